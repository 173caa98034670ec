"""
Indigo Docs MCP Server - FastMCP implementation

Exposes the HQ document tree, the change watcher, and the document/search
helpers as MCP tools.

CRITICAL: In stdio mode this is an MCP server - NEVER use print() statements!
stdout is reserved for the JSON-RPC protocol. Use the logger instead.
"""

import argparse
import os
import sys
from typing import Optional

from fastmcp import FastMCP

from . import server_state
from .logging_config import setup_logging
from .tools_wrappers import (
    check_qmd_available,
    connect_hq_folder,
    disconnect_hq_folder,
    find_document,
    get_file_metadata,
    get_git_commit_date,
    list_qmd_collections,
    list_scopes,
    qmd_search,
    recent_changes,
    scan_hq_directory,
    set_enabled_scopes,
    start_watching,
    stop_watching,
)

# File logging must be in place before FastMCP starts emitting records
logger = setup_logging()

mcp = FastMCP("Indigo Docs")

# Registration keeps the module-level names as plain functions
mcp.tool(output_schema=None)(scan_hq_directory)  # Document tree for the enabled scopes
mcp.tool(output_schema=None)(start_watching)  # Replaces any active watcher
mcp.tool(output_schema=None)(stop_watching)
mcp.tool(output_schema=None)(recent_changes)  # Drains debounced change events
mcp.tool(output_schema=None)(connect_hq_folder)
mcp.tool(output_schema=None)(disconnect_hq_folder)
mcp.tool(output_schema=None)(list_scopes)
mcp.tool(output_schema=None)(set_enabled_scopes)  # Persisted in the config file
mcp.tool(output_schema=None)(find_document)

# Per-document helpers
mcp.tool(output_schema=None)(get_file_metadata)
mcp.tool(output_schema=None)(get_git_commit_date)

# qmd search integration
mcp.tool(output_schema=None)(check_qmd_available)
mcp.tool(output_schema=None)(qmd_search)
mcp.tool(output_schema=None)(list_qmd_collections)

__all__ = [
    "mcp",
    "check_qmd_available",
    "connect_hq_folder",
    "disconnect_hq_folder",
    "find_document",
    "get_file_metadata",
    "get_git_commit_date",
    "list_qmd_collections",
    "list_scopes",
    "qmd_search",
    "recent_changes",
    "scan_hq_directory",
    "set_enabled_scopes",
    "start_watching",
    "stop_watching",
]


def main():
    """Main entry point (stdio transport)."""
    logger.info("Starting Indigo Docs MCP server (stdio)")
    try:
        mcp.run(show_banner=False)
    except BrokenPipeError:
        logger.info("Client closed the stdio pipe, shutting down")
        sys.exit(0)
    finally:
        server_state.change_watcher.stop()


def main_http(host: Optional[str] = None, port: Optional[int] = None):
    """
    HTTP entry point, allowing several clients to share one server.

    Args:
        host: Host to bind to (default: 127.0.0.1, or INDIGO_HOST env var)
        port: Port to listen on (default: 8766, or INDIGO_PORT env var)
    """
    host = host or os.environ.get("INDIGO_HOST", "127.0.0.1")
    port = port or int(os.environ.get("INDIGO_PORT", "8766"))

    # HTTP does not use stdout for the protocol, so stderr logging is safe
    setup_logging(console=True)
    logger.info(f"Listening on http://{host}:{port}/mcp")

    try:
        mcp.run(transport="http", host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Shutting down Indigo Docs HTTP server...")
    finally:
        server_state.change_watcher.stop()


def main_http_cli():
    """
    CLI entry point with argument parsing for the HTTP server.

    Usage:
        indigo-docs-http --host 0.0.0.0 --port 8766

    Or via environment variables:
        INDIGO_HOST=0.0.0.0 INDIGO_PORT=8766 indigo-docs-http
    """
    parser = argparse.ArgumentParser(description="Indigo Docs MCP server (HTTP mode)")
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (default: 127.0.0.1, or INDIGO_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: 8766, or INDIGO_PORT env var)",
    )
    args = parser.parse_args()
    main_http(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
