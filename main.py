#!/usr/bin/env python3
"""
PDF Noter MCP Server
Replays highlights recorded in org-style notes onto the PDF they annotate,
as session-scoped annotations that never modify the PDF file.
"""

import logging

from pdf_noter.core import paths as _paths
from pdf_noter.tools.mcp_tools import mcp

# --- Basic Configuration ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("PDFNoter")


def main(argv=None):
    """Configure accessible directories and logging, then serve over stdio."""
    args = _paths.parse_arguments(argv)
    logging.getLogger().setLevel(getattr(logging, args.log_level))
    _paths.setup_search_directories(args)

    logger.info("Starting PDF Noter MCP Server...")
    logger.info(f"Accessible directories: {_paths.SEARCH_DIRECTORIES}")
    logger.info(f"Maximum file size: {_paths.MAX_FILE_SIZE // (1024 * 1024)} MB")

    mcp.run()


if __name__ == "__main__":
    main()
