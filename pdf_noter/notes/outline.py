"""
Minimal org-style outline used as the notes store.

Only the parts the highlight replay needs are modelled: headings (`*`, `**`, ...)
and the property drawer that may follow a heading line:

    * Chapter 1
      :PROPERTIES:
      :NOTER_PAGE: 3
      :HIGHLIGHT: (pdf-highlight 1 (3 (0.1 0.2 0.3 0.4)))
      :END:
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TypedDict

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(\*+)\s+(.*?)\s*$")
_PLANNING_RE = re.compile(r"^\s*(SCHEDULED|DEADLINE|CLOSED):")
_DRAWER_START_RE = re.compile(r"^\s*:PROPERTIES:\s*$", re.IGNORECASE)
_DRAWER_END_RE = re.compile(r"^\s*:END:\s*$", re.IGNORECASE)
_PROPERTY_RE = re.compile(r"^\s*:([^\s:]+):(?:\s+(.*?))?\s*$")


class Heading(TypedDict):
    line: int          # 0-based line of the heading itself
    level: int
    title: str
    properties: Dict[str, str]   # keys upper-cased


def _read_drawer(lines: List[str], start: int) -> Dict[str, str]:
    """Read the property drawer directly below the heading at `start`."""
    i = start + 1
    if i < len(lines) and _PLANNING_RE.match(lines[i]):
        i += 1
    if i >= len(lines) or not _DRAWER_START_RE.match(lines[i]):
        return {}

    props: Dict[str, str] = {}
    for line in lines[i + 1:]:
        if _DRAWER_END_RE.match(line) or _HEADING_RE.match(line):
            break
        m = _PROPERTY_RE.match(line)
        if m:
            props[m.group(1).upper()] = m.group(2) or ""
    return props


class NotesDocument:
    """An outline document held in memory, addressed by 0-based line numbers."""

    def __init__(self, text: str, path: Optional[Path] = None):
        self.path = path
        self.lines = text.splitlines()
        self._headings: List[Heading] = []
        for idx, line in enumerate(self.lines):
            m = _HEADING_RE.match(line)
            if m:
                self._headings.append({
                    "line": idx,
                    "level": len(m.group(1)),
                    "title": m.group(2),
                    "properties": _read_drawer(self.lines, idx),
                })
        logger.debug(f"Parsed {len(self._headings)} heading(s) from {path or '<text>'}")

    @classmethod
    def from_file(cls, path: Path) -> "NotesDocument":
        return cls(Path(path).read_text(encoding="utf-8"), path=Path(path))

    @property
    def name(self) -> str:
        return self.path.name if self.path else "*notes*"

    def iter_headings(self) -> Iterator[Heading]:
        """Yield every heading in document order, whatever its level."""
        yield from self._headings

    def heading_at(self, location: int) -> Optional[Heading]:
        """Return the heading whose entry contains `location`, if any."""
        found = None
        for h in self._headings:
            if h["line"] > location:
                break
            found = h
        return found

    def find_heading(self, title: str) -> Optional[Heading]:
        wanted = title.strip().lower()
        for h in self._headings:
            if h["title"].lower() == wanted:
                return h
        return None

    def get_property(self, location: int, name: str) -> Optional[str]:
        """Property `name` of the entry containing `location`, or None when unset or empty."""
        heading = self.heading_at(location)
        if heading is None:
            return None
        value = heading["properties"].get(name.upper())
        return value if value else None
