import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Limits and filters
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
PDF_EXTENSIONS = [".pdf"]
NOTES_EXTENSIONS = [".org"]
ALLOWED_EXTENSIONS = PDF_EXTENSIONS + NOTES_EXTENSIONS

# Default search directories (used when no args are provided)
DEFAULT_SEARCH_DIRECTORIES = [
    os.path.expanduser("~/Downloads"),
    os.path.expanduser("~/Desktop"),
    os.path.expanduser("~/Documents"),
    os.getcwd(),
]

# Actual configured directories (initialized at runtime)
SEARCH_DIRECTORIES: List[str] = []


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """Parse CLI arguments to configure accessible directories and limits."""
    parser = argparse.ArgumentParser(
        description="PDF Noter MCP Server: replay highlights recorded in org notes onto their PDFs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "\nExamples:\n"
            "  python main.py ~/Papers ~/Notes\n"
            "  python main.py --allow-dir ~/Papers --allow-dir /shared/notes\n"
            "  python main.py ~/Papers --max-file-size 52428800 --log-level DEBUG\n"
        ),
    )

    parser.add_argument(
        "directories",
        nargs="*",
        help="Directories holding PDFs and notes files (space-separated)",
    )

    parser.add_argument(
        "--allow-dir",
        action="append",
        dest="allowed_dirs",
        help="Add an allowed directory (can be used multiple times)",
    )

    parser.add_argument(
        "--max-file-size",
        type=int,
        default=100 * 1024 * 1024,
        help="Maximum file size in bytes (default: 100MB)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def _is_within(base: str, target: str) -> bool:
    base = os.path.join(os.path.realpath(base), "")  # ensure trailing separator
    target = os.path.realpath(target)
    return target.startswith(base) or target == base[:-1]


def _real(d: str) -> str:
    return os.path.realpath(os.path.abspath(os.path.expanduser(d)))


def setup_search_directories(args) -> None:
    """Configure SEARCH_DIRECTORIES and MAX_FILE_SIZE from parsed args.
    Falls back to DEFAULT_SEARCH_DIRECTORIES when none are provided or none are usable.
    """
    global MAX_FILE_SIZE

    MAX_FILE_SIZE = int(args.max_file_size)

    provided: List[str] = []
    if getattr(args, "directories", None):
        provided.extend(args.directories)
    if getattr(args, "allowed_dirs", None):
        provided.extend(args.allowed_dirs)

    validated: List[str] = []
    for d in provided:
        real_path = _real(d)
        if not os.path.isdir(real_path):
            logger.warning(f"Not a directory, skipped: {d} -> {real_path}")
            continue
        if not os.access(real_path, os.R_OK):
            logger.warning(f"Unreadable directory, skipped: {d} -> {real_path}")
            continue
        validated.append(real_path)

    if not validated:
        if provided:
            logger.warning("No valid directories from arguments; falling back to defaults.")
        else:
            logger.info("Using default search directories.")
        validated = [_real(d) for d in DEFAULT_SEARCH_DIRECTORIES]

    # mutate in place so modules holding a reference see the update
    SEARCH_DIRECTORIES.clear()
    SEARCH_DIRECTORIES.extend(validated)


def validate_and_resolve_path(file_path: str, extensions: Sequence[str] = ALLOWED_EXTENSIONS) -> Optional[Path]:
    """Return the real Path of `file_path` when it is an allowed, readable file inside the search directories."""
    try:
        abs_path = os.path.expanduser(file_path) if file_path.startswith("~") else os.path.abspath(file_path)
        real_path = os.path.realpath(abs_path)

        # Must be within one of the allowed directories; block traversal
        is_safe = any(_is_within(allowed, real_path) for allowed in SEARCH_DIRECTORIES)
        if not is_safe or ".." in Path(file_path).parts:
            logger.warning(f"Security risk detected (outside allowed directories): {file_path}")
            return None

        resolved = Path(real_path)
        if not resolved.is_file():
            return None
        if resolved.suffix.lower() not in extensions:
            logger.warning(f"Disallowed file extension: {file_path}")
            return None
        if resolved.stat().st_size > MAX_FILE_SIZE:
            logger.warning(f"File too large: {file_path}")
            return None
        return resolved
    except OSError as e:
        logger.error(f"Error validating path {file_path}: {e}")
        return None


def find_file(file_name: str, extensions: Sequence[str] = ALLOWED_EXTENSIONS) -> Optional[Path]:
    """Resolve an absolute path, or search by name/substring within the configured directories."""
    if os.path.isabs(file_name) or file_name.startswith("~"):
        return validate_and_resolve_path(file_name, extensions)

    for directory in SEARCH_DIRECTORIES:
        dir_path = Path(directory)
        # Direct match
        path = validate_and_resolve_path(str(dir_path / file_name), extensions)
        if path:
            return path
        # Fuzzy match
        for ext in extensions:
            for candidate in sorted(dir_path.glob(f"*{ext}")):
                if file_name.lower() in candidate.name.lower():
                    path = validate_and_resolve_path(str(candidate), extensions)
                    if path:
                        return path

    logger.warning(f"File not found: {file_name}")
    return None


def resolve_relative_to(base_file: Path, target: str, extensions: Sequence[str] = PDF_EXTENSIONS) -> Optional[Path]:
    """Resolve `target` (absolute, ~, or relative to `base_file`'s directory) within the allowed directories."""
    if os.path.isabs(target) or target.startswith("~"):
        return validate_and_resolve_path(target, extensions)
    # normalize "../x.pdf" first; containment is checked on the real path
    joined = os.path.normpath(os.path.join(os.path.dirname(str(base_file)), target))
    return validate_and_resolve_path(joined, extensions)
