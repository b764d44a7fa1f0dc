import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from pdf_noter.core import paths as _paths
from pdf_noter.core.paths import (
    NOTES_EXTENSIONS,
    PDF_EXTENSIONS,
    find_file,
    resolve_relative_to,
)
from pdf_noter.core.errors import MalformedRecord, NoActiveSession, NoterError
from pdf_noter.core.page_range import selects_page
from pdf_noter.core.region import decode_region
from pdf_noter.core.replay import collect_highlight_entries, replay_all, replay_one
from pdf_noter.core.session import Session, document_property
from pdf_noter.backends.pypdf2_backend import extract_persisted_highlights
from pdf_noter.notes.outline import NotesDocument
from pdf_noter.viewer.surface import Viewer

logger = logging.getLogger(__name__)

mcp = FastMCP("PDF Noter")

# One viewer per server process, holding at most one active session.
_viewer = Viewer()
_session: Optional[Session] = None


def _require_session() -> Session:
    if _session is None:
        raise NoActiveSession("No active session. Call open_session(notes_file, pdf_file) first.")
    return _session


def _resolve_location(notes: NotesDocument, heading: str) -> int:
    """A heading title, or a 1-based line number inside the entry."""
    text = heading.strip()
    if text.isdigit():
        return int(text) - 1
    found = notes.find_heading(text)
    if found is None:
        raise NoterError(f"No heading titled '{heading}' in {notes.name}")
    return found["line"]


# ---------- Session ----------
@mcp.tool()
async def open_session(notes_file: str, pdf_file: Optional[str] = None) -> str:
    """Bind an org notes file to the PDF it annotates.

    Parameters
    ----------
    notes_file: str
        Filename (relative) or absolute path of the `.org` notes. Must reside within the accessible directories.
    pdf_file: Optional[str]
        The PDF to annotate. When omitted, the first heading's `NOTER_DOCUMENT` property is used,
        resolved relative to the notes file.
    """
    global _session

    notes_path = find_file(notes_file, NOTES_EXTENSIONS)
    if not notes_path:
        return f"Error: Could not find notes file '{notes_file}'."
    try:
        notes = NotesDocument.from_file(notes_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Reading notes {notes_path} failed: {e}")
        return f"Error: Could not read notes file '{notes_path.name}': {e}"

    if pdf_file:
        pdf_path = find_file(pdf_file, PDF_EXTENSIONS)
    else:
        target = document_property(notes)
        if not target:
            return f"Error: '{notes_path.name}' has no NOTER_DOCUMENT property; pass pdf_file explicitly."
        pdf_path = resolve_relative_to(notes_path, target)
    if not pdf_path:
        return f"Error: Could not find PDF '{pdf_file or target}'."

    if _session is not None:
        _session.close()
        _session = None
    try:
        _session = Session.open(_viewer, notes, pdf_path)
    except Exception as e:
        logger.error(f"Opening session failed: {e}")
        return f"Error: {e}"

    result = {
        "notes_file": str(notes_path),
        "pdf_file": str(pdf_path),
        "total_pages": _session.document.page_count,
        "highlight_entries": len(collect_highlight_entries(notes)),
    }
    return json.dumps(result, indent=2, ensure_ascii=False)


@mcp.tool()
async def close_session() -> str:
    """Close the active session. Session-scoped highlights are discarded; the PDF is untouched."""
    global _session
    if _session is None:
        return "No active session."
    name = _session.notes_buffer.name
    _session.close()
    _session = None
    return f"Closed session for '{name}'."


# ---------- Replay ----------
@mcp.tool()
async def replay_highlight(heading: str) -> str:
    """Recreate the highlight recorded on one notes heading.

    `heading` is the heading title (case-insensitive) or a 1-based line number inside its entry.
    """
    try:
        session = _require_session()
        location = _resolve_location(session.notes, heading)
        replay_one(session, location)
    except (NoterError, ValueError) as e:
        return f"Error: {e}"
    except Exception as e:
        logger.error(f"Replaying highlight at '{heading}' failed: {e}")
        return f"Error: {e}"

    annotation = session.doc_buffer.annotations[-1]
    return json.dumps({"replayed": 1, "annotation": annotation}, indent=2, ensure_ascii=False)


@mcp.tool()
async def replay_all_highlights() -> str:
    """Recreate every highlight recorded in the notes; reports how many were applied."""
    try:
        summary = replay_all(_require_session())
    except NoterError as e:
        return f"Error: {e}"
    except Exception as e:
        logger.error(f"Batch replay failed: {e}")
        return f"Error: {e}"
    return json.dumps(summary, indent=2, ensure_ascii=False)


# ---------- Inspection ----------
@mcp.tool()
async def list_highlight_entries() -> str:
    """List the notes headings that carry a highlight record, with their decoded page or decode error."""
    try:
        session = _require_session()
    except NoActiveSession as e:
        return f"Error: {e}"

    items = []
    for entry in collect_highlight_entries(session.notes):
        item = {"line": entry["location"] + 1, "heading": entry["heading"]}
        try:
            region = decode_region(entry["raw"])
            item["page"] = region["page"]
            item["quads"] = len(region["coordinates"]) // 4
        except MalformedRecord as e:
            item["error"] = str(e)
        items.append(item)
    return json.dumps({"notes_file": session.notes_buffer.name, "entries": items}, indent=2, ensure_ascii=False)


@mcp.tool()
async def list_session_annotations(page_range: Optional[str] = None, include_persisted: bool = True) -> str:
    """List highlights on the session's PDF.

    Parameters
    ----------
    page_range: Optional[str]
        Flexible range: `first`, `last`, `N`, `S-E`, or `None` for all pages.
    include_persisted: bool
        Also list highlight annotations already saved inside the PDF file.
    """
    try:
        session = _require_session()
        total = session.document.page_count
        replayed = [a for a in session.doc_buffer.annotations if selects_page(total, page_range, a["page"])]
        persisted = []
        if include_persisted:
            persisted = extract_persisted_highlights(session.document.path, page_range)
    except (NoterError, ValueError) as e:
        return f"Error: {e}"

    result = {
        "file_name": session.document.name,
        "page_range": page_range or "all",
        "session_annotations": replayed,
        "persisted_highlights": persisted,
    }
    return json.dumps(result, indent=2, ensure_ascii=False)


@mcp.tool()
async def decode_highlight(record: str) -> str:
    """Decode a raw HIGHLIGHT property value into its page and quad coordinates."""
    try:
        region = decode_region(record)
    except MalformedRecord as e:
        return f"Error: {e}"
    return json.dumps(region, ensure_ascii=False)


@mcp.tool()
async def show_accessible_directories() -> str:
    """Return the current directory/configuration constraints as JSON."""
    info = {
        "accessible_directories": _paths.SEARCH_DIRECTORIES,
        "directory_count": len(_paths.SEARCH_DIRECTORIES),
        "max_file_size_mb": _paths.MAX_FILE_SIZE // (1024 * 1024),
        "allowed_extensions": _paths.ALLOWED_EXTENSIONS,
    }
    return json.dumps(info, indent=2, ensure_ascii=False)
