from typing import TypedDict, List

class RegionDescriptor(TypedDict):
    page: int                 # 1-based
    coordinates: List[float]  # quads of (x1, y1, x2, y2), normalized 0..1, origin top-left

class Entry(TypedDict):
    location: int   # 0-based line of the heading in the notes document
    heading: str
    raw: str

class SessionAnnotation(TypedDict, total=False):
    id: str
    page: int
    quads: List[List[float]]
    position: List[float]   # [x0, top, x1, bottom] in pdfplumber coordinates
    highlighted_text: str
    persisted: bool

class SkippedEntry(TypedDict):
    location: int
    heading: str
    error: str

class ReplaySummary(TypedDict):
    applied: int
    attempted: int
    skipped: List[SkippedEntry]
    message: str

class PersistedHighlight(TypedDict, total=False):
    page: int
    author: str
    note: str
    quads: List[List[float]]
    persisted: bool
