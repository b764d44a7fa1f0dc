from pathlib import Path
from typing import List, Tuple
import logging
import pdfplumber

from pdf_noter.core.bbox import clamp_bbox, quad_to_bbox, text_from_words
from pdf_noter.core.region import iter_quads
from pdf_noter.core.types import RegionDescriptor

logger = logging.getLogger(__name__)


class PdfDocument:
    """Read-only view of a PDF: page geometry and the text under a region.

    The file is opened once and kept open until `close()`; nothing is ever
    written back to it.
    """

    def __init__(self, pdf_path: Path):
        self.path = Path(pdf_path)
        try:
            self._pdf = pdfplumber.open(self.path)
        except Exception as e:
            logger.error(f"pdfplumber could not open {pdf_path}: {e}")
            raise
        self._sizes: List[Tuple[float, float]] = [
            (float(p.width), float(p.height)) for p in self._pdf.pages
        ]
        logger.debug(f"Opened {self.path.name}: {len(self._sizes)} page(s)")

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def page_count(self) -> int:
        return len(self._sizes)

    def page_size(self, page: int) -> Tuple[float, float]:
        """Width and height in points of the 1-based `page`."""
        if page < 1 or page > self.page_count:
            raise ValueError(f"Page {page} out of range (1-{self.page_count})")
        return self._sizes[page - 1]

    def region_boxes(self, region: RegionDescriptor) -> List[List[float]]:
        """One [x0, top, x1, bottom] box in page points per quad of `region`."""
        w, h = self.page_size(region["page"])
        return [clamp_bbox(quad_to_bbox(q, w, h), w, h) for q in iter_quads(region)]

    def text_in_boxes(self, page: int, boxes: List[List[float]]) -> str:
        """Best-effort text under the boxes of one page.
        1) page.within_bbox + extract_text per box (pdfminer layout order)
        2) fall back to grouping the page words when a crop is rejected
        """
        if not boxes:
            return ""
        pl_page = self._pdf.pages[page - 1]
        spans: List[str] = []
        words = None
        for bbox in boxes:
            try:
                text = pl_page.within_bbox(tuple(bbox)).extract_text() or ""
                text = " ".join(s.strip() for s in text.splitlines() if s.strip())
            except ValueError as e:
                logger.debug(f"Crop {bbox} rejected on page {page} ({e}); grouping words instead")
                if words is None:
                    words = pl_page.extract_words() or []
                text = text_from_words(bbox, words)
            if text:
                spans.append(text)
        return " ".join(spans).strip()

    def close(self) -> None:
        self._pdf.close()
