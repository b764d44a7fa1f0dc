"""
Replay highlight records stored in the notes outline onto the PDF viewer.

Both entry points leave focus where the user was: the window selected before
the call is reselected and shown its previous buffer on every exit path.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Tuple

from pdf_noter.core.errors import AnnotationError, MalformedRecord, NoHighlightAtLocation
from pdf_noter.core.region import decode_region
from pdf_noter.core.session import Session
from pdf_noter.core.types import Entry, RegionDescriptor, ReplaySummary, SkippedEntry
from pdf_noter.notes.outline import NotesDocument
from pdf_noter.viewer.surface import Viewer, Window

logger = logging.getLogger(__name__)

HIGHLIGHT_PROPERTY = "HIGHLIGHT"


@contextmanager
def preserved_focus(viewer: Viewer) -> Iterator[None]:
    window = viewer.selected
    buffer = window.buffer if window is not None else None
    try:
        yield
    finally:
        if window is not None and window in viewer.windows:
            viewer.select_window(window)
            if buffer.live:
                viewer.switch_to_buffer(window, buffer)
        elif window is not None:
            logger.warning(f"Window {window.id} disappeared during replay; focus not restored")


@contextmanager
def deferred_redraw(viewer: Viewer, window: Window) -> Iterator[None]:
    """Suppress per-annotation redraws, then redraw `window` exactly once."""
    previous = viewer.redraw_suspended
    viewer.redraw_suspended = True
    try:
        yield
    finally:
        viewer.redraw_suspended = previous
        viewer.request_redraw(window)


def _pdf_window(session: Session) -> Window:
    viewer = session.viewer
    window = viewer.find_window_showing(session.doc_buffer)
    if window is None:
        window = viewer.open_in_window(session.doc_buffer)
    viewer.select_window(window)
    return window


def collect_highlight_entries(notes: NotesDocument) -> List[Entry]:
    """Every heading with a highlight record, in document order."""
    entries: List[Entry] = []
    for heading in notes.iter_headings():
        raw = notes.get_property(heading["line"], HIGHLIGHT_PROPERTY)
        if raw is None:
            continue
        entries.append({"location": heading["line"], "heading": heading["title"], "raw": raw})
    return entries


def replay_one(session: Session, location: int) -> int:
    """Recreate the highlight recorded on the entry containing `location`."""
    raw = session.notes.get_property(location, HIGHLIGHT_PROPERTY)
    if raw is None:
        raise NoHighlightAtLocation(f"No {HIGHLIGHT_PROPERTY} property at line {location + 1}")
    region = decode_region(raw)

    viewer = session.viewer
    with preserved_focus(viewer):
        window = _pdf_window(session)
        viewer.add_highlight_annotation(window, region)
    logger.info(f"Replayed highlight on page {region['page']} from line {location + 1}")
    return 1


def _skip(entry: Entry, error: Exception) -> SkippedEntry:
    logger.warning(f"Skipping highlight at line {entry['location'] + 1} ({entry['heading']}): {error}")
    return {"location": entry["location"], "heading": entry["heading"], "error": str(error)}


def replay_all(session: Session) -> ReplaySummary:
    """Recreate every highlight in the notes with a single redraw.

    Entries whose record is malformed, or whose region the viewer rejects,
    are skipped and reported; the rest are still applied.
    """
    entries = collect_highlight_entries(session.notes)
    skipped: List[SkippedEntry] = []
    decoded: List[Tuple[Entry, RegionDescriptor]] = []
    for entry in entries:
        try:
            decoded.append((entry, decode_region(entry["raw"])))
        except MalformedRecord as e:
            skipped.append(_skip(entry, e))

    applied = 0
    viewer = session.viewer
    with preserved_focus(viewer):
        window = _pdf_window(session)
        with deferred_redraw(viewer, window):
            for entry, region in decoded:
                try:
                    viewer.add_highlight_annotation(window, region)
                except AnnotationError as e:
                    skipped.append(_skip(entry, e))
                    continue
                applied += 1

    skipped.sort(key=lambda s: s["location"])
    message = f"Applied {applied} of {len(entries)} highlight(s)"
    if skipped:
        message += f"; skipped {len(skipped)} that could not be replayed"
    logger.info(message)
    return {"applied": applied, "attempted": len(entries), "skipped": skipped, "message": message}
