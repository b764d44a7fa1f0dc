import pytest

from pdf_noter.backends.pdfplumber_backend import PdfDocument
from pdf_noter.core.errors import AnnotationError, NoPdfWindow
from pdf_noter.viewer.surface import NOTES, PDF, Buffer, Viewer


@pytest.fixture
def buffers(pdf_path):
    doc = PdfDocument(pdf_path)
    yield Buffer("notes.org", NOTES), Buffer(doc.name, PDF, doc)
    doc.close()


def test_open_in_window_splits_then_reuses(viewer, buffers):
    notes, pdf = buffers
    first = viewer.display(notes)
    window = viewer.open_in_window(pdf)
    assert window is not first
    assert viewer.selected is window
    assert len(viewer.windows) == 2

    viewer.select_window(first)
    assert viewer.open_in_window(pdf) is window
    assert len(viewer.windows) == 2


def test_open_in_window_takes_over_selected_window_when_full(buffers):
    notes, pdf = buffers
    viewer = Viewer(max_windows=1)
    only = viewer.display(notes)
    assert viewer.open_in_window(pdf) is only
    assert only.buffer is pdf


def test_killed_buffer_cannot_be_shown(viewer, buffers):
    notes, pdf = buffers
    viewer.display(notes)
    viewer.open_in_window(pdf)
    viewer.kill_buffer(pdf)
    assert viewer.find_window_showing(pdf) is None
    assert len(viewer.windows) == 1
    with pytest.raises(NoPdfWindow):
        viewer.open_in_window(pdf)


def test_annotation_redraws_unless_suspended(viewer, buffers):
    notes, pdf = buffers
    viewer.display(notes)
    window = viewer.open_in_window(pdf)

    annotation = viewer.add_highlight_annotation(window, {"page": 1, "coordinates": [0.1, 0.25, 0.5, 0.5]})
    assert viewer.redraw_count == 1
    assert annotation["page"] == 1
    assert annotation["persisted"] is False
    assert annotation["quads"] == [[0.1, 0.25, 0.5, 0.5]]
    assert annotation["position"] == pytest.approx([20.0, 100.0, 100.0, 200.0])
    assert pdf.annotations == [annotation]

    viewer.redraw_suspended = True
    viewer.add_highlight_annotation(window, {"page": 2, "coordinates": []})
    assert viewer.redraw_count == 1
    assert len(pdf.annotations) == 2


def test_annotation_rejects_bad_targets(viewer, buffers):
    notes, pdf = buffers
    notes_window = viewer.display(notes)
    with pytest.raises(AnnotationError):
        viewer.add_highlight_annotation(notes_window, {"page": 1, "coordinates": []})

    window = viewer.open_in_window(pdf)
    with pytest.raises(AnnotationError):
        viewer.add_highlight_annotation(window, {"page": 4, "coordinates": [0, 0, 1, 1]})
    assert pdf.annotations == []
    assert viewer.redraw_count == 0
