from pathlib import Path
from typing import List, Optional
import logging
import PyPDF2

from pdf_noter.core.bbox import flip_y, quadpoints_to_quad
from pdf_noter.core.page_range import parse_page_range
from pdf_noter.core.types import PersistedHighlight

logger = logging.getLogger(__name__)


def _note_from_obj(obj) -> str:
    note = obj.get("/Contents", "") or obj.get("/RC", "") or ""
    popup = obj.get("/Popup")
    if not note and popup is not None:
        note = popup.get_object().get("/Contents", "") or ""
    return str(note)


def _quads_from_obj(obj, width: float, height: float) -> List[List[float]]:
    quads = obj.get("/QuadPoints")
    if isinstance(quads, list) and len(quads) >= 8:
        return [
            quadpoints_to_quad(quads[i:i + 8], width, height)
            for i in range(0, len(quads) - len(quads) % 8, 8)
        ]
    rect = obj.get("/Rect", [])
    if rect and len(rect) >= 4:
        x0, x1 = sorted([float(rect[0]), float(rect[2])])
        y0, y1 = sorted([float(rect[1]), float(rect[3])])
        top, bottom = flip_y(height, y1), flip_y(height, y0)
        return [[x0 / width, top / height, x1 / width, bottom / height]]
    return []


def extract_persisted_highlights(
    pdf_path: Path,
    page_range: Optional[str] = None,
) -> List[PersistedHighlight]:
    """Highlight annotations already saved in the PDF, with normalized quads."""
    out: List[PersistedHighlight] = []
    try:
        with open(pdf_path, "rb") as f:
            reader = PyPDF2.PdfReader(f)
            for page_index in parse_page_range(len(reader.pages), page_range):
                page = reader.pages[page_index]
                if "/Annots" not in page:
                    continue
                width = float(page.mediabox.width)
                height = float(page.mediabox.height)
                for annot in page["/Annots"]:
                    obj = annot.get_object()
                    subtype = str(obj.get("/Subtype", "")).lstrip("/")
                    if subtype.lower() != "highlight":
                        continue
                    out.append({
                        "page": page_index + 1,
                        "author": str(obj.get("/T", "") or ""),
                        "note": _note_from_obj(obj),
                        "quads": _quads_from_obj(obj, width, height),
                        "persisted": True,
                    })
    except Exception as e:
        logger.error(f"PyPDF2 highlight extraction failed for {pdf_path}: {e}")
        raise
    return out
