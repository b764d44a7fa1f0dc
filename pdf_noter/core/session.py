import logging
from pathlib import Path
from typing import Optional

from pdf_noter.backends.pdfplumber_backend import PdfDocument
from pdf_noter.notes.outline import NotesDocument
from pdf_noter.viewer.surface import NOTES, PDF, Buffer, Viewer

logger = logging.getLogger(__name__)

DOCUMENT_PROPERTY = "NOTER_DOCUMENT"


def document_property(notes: NotesDocument) -> Optional[str]:
    """The PDF named by the first heading carrying a NOTER_DOCUMENT property."""
    for heading in notes.iter_headings():
        value = heading["properties"].get(DOCUMENT_PROPERTY)
        if value:
            return value
    return None


class Session:
    """Associates a notes buffer with the buffer of the PDF it annotates."""

    def __init__(self, viewer: Viewer, notes_buffer: Buffer, doc_buffer: Buffer):
        self.viewer = viewer
        self.notes_buffer = notes_buffer
        self.doc_buffer = doc_buffer
        self.closed = False

    @classmethod
    def open(cls, viewer: Viewer, notes: NotesDocument, pdf_path: Path) -> "Session":
        """Load both files into buffers and show the notes in the selected window."""
        doc = PdfDocument(pdf_path)
        session = cls(
            viewer,
            Buffer(notes.name, NOTES, notes),
            Buffer(doc.name, PDF, doc),
        )
        viewer.display(session.notes_buffer)
        logger.info(f"Session opened: {notes.name} <-> {doc.name} ({doc.page_count} pages)")
        return session

    @property
    def notes(self) -> NotesDocument:
        return self.notes_buffer.content

    @property
    def document(self) -> PdfDocument:
        return self.doc_buffer.content

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for buffer in (self.doc_buffer, self.notes_buffer):
            if buffer.live:
                self.viewer.kill_buffer(buffer)
        self.document.close()
        logger.info(f"Session closed: {self.notes_buffer.name}")
