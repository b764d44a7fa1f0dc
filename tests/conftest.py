from pathlib import Path

import pytest
from PyPDF2 import PdfWriter
from PyPDF2.generic import ArrayObject, DictionaryObject, FloatObject, NameObject, TextStringObject

from pdf_noter.core.session import Session
from pdf_noter.notes.outline import NotesDocument
from pdf_noter.viewer.surface import Viewer

PAGE_WIDTH = 200
PAGE_HEIGHT = 400

NOTES_TEXT = """\
#+TITLE: Reading notes
* Paper
  :PROPERTIES:
  :NOTER_DOCUMENT: paper.pdf
  :END:
** Intro
   :PROPERTIES:
   :NOTER_PAGE: 1
   :HIGHLIGHT: (pdf-highlight 1 (1 (0.1 0.2 0.3 0.4)))
   :END:
   Some thoughts on the intro.
** Methods
   No highlight here.
*** Details
    :PROPERTIES:
    :HIGHLIGHT: (pdf-highlight 1 (2 (0.5 0.5 0.9 0.6 0.1 0.7 0.4 0.75)))
    :END:
"""


def write_pdf(path: Path, pages: int = 3, highlight_on_page: int = 0) -> Path:
    """Write a blank PDF; optionally with one persisted highlight on a 1-based page."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    if highlight_on_page:
        annot = DictionaryObject({
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Highlight"),
            NameObject("/Rect"): ArrayObject([FloatObject(v) for v in (20, 300, 60, 320)]),
            NameObject("/QuadPoints"): ArrayObject(
                [FloatObject(v) for v in (20, 320, 60, 320, 20, 300, 60, 300)]
            ),
            NameObject("/T"): TextStringObject("reviewer"),
            NameObject("/Contents"): TextStringObject("check this"),
        })
        writer.pages[highlight_on_page - 1][NameObject("/Annots")] = ArrayObject([annot])
    with open(path, "wb") as f:
        writer.write(f)
    return path


@pytest.fixture
def make_pdf(tmp_path):
    def _make(name: str = "paper.pdf", pages: int = 3, highlight_on_page: int = 0) -> Path:
        return write_pdf(tmp_path / name, pages, highlight_on_page)
    return _make


@pytest.fixture
def pdf_path(make_pdf) -> Path:
    return make_pdf()


@pytest.fixture
def notes_text() -> str:
    return NOTES_TEXT


@pytest.fixture
def notes_path(tmp_path) -> Path:
    path = tmp_path / "notes.org"
    path.write_text(NOTES_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def viewer() -> Viewer:
    return Viewer()


@pytest.fixture
def make_session(viewer, pdf_path):
    """Open a session over `text` (the sample notes by default) and close it afterwards."""
    opened = []

    def _open(text: str = NOTES_TEXT, pdf: Path = None) -> Session:
        pdf = pdf or pdf_path
        s = Session.open(viewer, NotesDocument(text, path=pdf.parent / "notes.org"), pdf)
        opened.append(s)
        return s

    yield _open
    for s in opened:
        if not s.closed:
            s.close()


@pytest.fixture
def session(make_session):
    return make_session()
