"""
In-memory viewer state: buffers, the windows showing them, which window has
focus, and the session-scoped annotations created on PDF buffers.

Annotations live only here; the PDF file on disk is never modified.
"""

import itertools
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pdf_noter.core.bbox import union_boxes
from pdf_noter.core.errors import AnnotationError, NoPdfWindow
from pdf_noter.core.region import iter_quads
from pdf_noter.core.types import RegionDescriptor, SessionAnnotation

logger = logging.getLogger(__name__)

NOTES = "notes"
PDF = "pdf"


@dataclass(eq=False)
class Buffer:
    name: str
    kind: str
    content: Any = None   # NotesDocument for notes buffers, PdfDocument for PDF buffers
    live: bool = True
    annotations: List[SessionAnnotation] = field(default_factory=list)


@dataclass(eq=False)
class Window:
    id: int
    buffer: Buffer


class Viewer:
    """Window/buffer bookkeeping plus the annotation-creation primitive.

    While `redraw_suspended` is False every new annotation triggers its own
    redraw; callers adding many annotations set it and call `request_redraw`
    once at the end.
    """

    def __init__(self, max_windows: int = 2):
        if max_windows < 1:
            raise ValueError("A viewer needs room for at least one window")
        self.max_windows = max_windows
        self.windows: List[Window] = []
        self.selected: Optional[Window] = None
        self.redraw_suspended = False
        self.redraw_count = 0
        self._ids = itertools.count(1)

    # --- windows and buffers ---

    def display(self, buffer: Buffer) -> Window:
        """Show `buffer` in the selected window, creating the first window if needed."""
        if self.selected is None:
            window = Window(next(self._ids), buffer)
            self.windows.append(window)
            self.selected = window
        else:
            self.switch_to_buffer(self.selected, buffer)
        return self.selected

    def find_window_showing(self, buffer: Buffer) -> Optional[Window]:
        for window in self.windows:
            if window.buffer is buffer:
                return window
        return None

    def open_in_window(self, buffer: Buffer) -> Window:
        """Select a window showing `buffer`, reusing an existing one when visible.

        A new window is split off while there is room; otherwise the selected
        window is switched to `buffer`.
        """
        if not buffer.live:
            raise NoPdfWindow(f"Buffer '{buffer.name}' has been killed")

        window = self.find_window_showing(buffer)
        if window is None:
            if self.selected is None or len(self.windows) < self.max_windows:
                window = Window(next(self._ids), buffer)
                self.windows.append(window)
                logger.debug(f"Opened window {window.id} for '{buffer.name}'")
            else:
                window = self.selected
                self.switch_to_buffer(window, buffer)
        self.select_window(window)
        return window

    def select_window(self, window: Window) -> None:
        if window not in self.windows:
            raise NoPdfWindow(f"Window {window.id} is no longer live")
        self.selected = window

    def switch_to_buffer(self, window: Window, buffer: Buffer) -> None:
        if not buffer.live:
            raise ValueError(f"Buffer '{buffer.name}' has been killed")
        window.buffer = buffer

    def delete_window(self, window: Window) -> None:
        self.windows.remove(window)
        if self.selected is window:
            self.selected = self.windows[0] if self.windows else None

    def kill_buffer(self, buffer: Buffer) -> None:
        buffer.live = False
        for window in [w for w in self.windows if w.buffer is buffer]:
            self.delete_window(window)

    # --- annotations ---

    def add_highlight_annotation(self, window: Window, region: RegionDescriptor) -> SessionAnnotation:
        """Create a session-scoped highlight on the PDF shown in `window`."""
        buffer = window.buffer
        if buffer.kind != PDF:
            raise AnnotationError(f"Window {window.id} shows '{buffer.name}', not a PDF")

        doc = buffer.content
        page = region["page"]
        if page > doc.page_count:
            raise AnnotationError(
                f"Page {page} out of range for '{buffer.name}' (1-{doc.page_count})"
            )

        boxes = doc.region_boxes(region)
        annotation: SessionAnnotation = {
            "id": uuid.uuid4().hex[:12],
            "page": page,
            "quads": iter_quads(region),
            "position": union_boxes(boxes) if boxes else [],
            "highlighted_text": doc.text_in_boxes(page, boxes),
            "persisted": False,
        }
        buffer.annotations.append(annotation)
        logger.debug(f"Added highlight {annotation['id']} on page {page} of '{buffer.name}'")

        if not self.redraw_suspended:
            self.request_redraw(window)
        return annotation

    def request_redraw(self, window: Window) -> None:
        self.redraw_count += 1
        logger.debug(f"Redraw #{self.redraw_count} of window {window.id}")
