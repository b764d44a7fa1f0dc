from typing import List, Optional


def parse_page_range(total_pages: int, page_range: Optional[str]) -> List[int]:
    """Return zero-based page indices selected by `page_range`.
    Accepts None or "all", "first", "last", "N" and "S-E" (either end may be omitted).
    """
    if total_pages <= 0:
        return []
    pr = "all" if page_range is None else str(page_range).strip().lower()
    if pr in ("", "all"):
        return list(range(total_pages))
    if pr == "first":
        return [0]
    if pr == "last":
        return [total_pages - 1]

    try:
        if "-" in pr:
            s, e = pr.split("-", 1)
            start = int(s) if s.strip() else 1
            end = int(e) if e.strip() else total_pages
        else:
            start = end = int(pr)
    except ValueError:
        raise ValueError(f"Invalid page range: {page_range}") from None

    if start < 1 or start > total_pages or end < start:
        raise ValueError(f"Page range {page_range} out of range (1-{total_pages})")
    return list(range(start - 1, min(end, total_pages)))


def selects_page(total_pages: int, page_range: Optional[str], page: int) -> bool:
    """True when the 1-based `page` falls inside `page_range`."""
    return (page - 1) in parse_page_range(total_pages, page_range)
