"""MCP Server for Marten.

Exposes solution selection and csharp-ls lifecycle commands as MCP tools
using FastMCP.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import os
import signal
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server import FastMCP

from .config import load_config
from .server import MartenServer

logger = logging.getLogger(__name__)

# Global server instance and project path
_marten_server: Optional[MartenServer] = None
_project_path: Optional[str] = None

mcp = FastMCP("Marten: C# solution host")


def set_project_path(path: str) -> None:
    """Set the project path for the Marten server."""
    global _project_path
    _project_path = str(Path(path).resolve())


def get_project_path() -> str:
    """Get the current project path."""
    return _project_path or os.getenv("MARTEN_PROJECT_PATH") or os.getcwd()


async def get_marten_server() -> MartenServer:
    """Get or create the server instance, running autostart on creation."""
    global _marten_server
    if _marten_server is None:
        _marten_server = MartenServer(project_path=get_project_path())
        await _marten_server.start()
    return _marten_server


def _cleanup_server() -> None:
    """Stop the language server when the MCP process exits.

    From atexit no loop is running, so the server gets the regular LSP
    shutdown on a fresh loop. Signal handlers fire while FastMCP's loop is
    still running and nothing can be awaited there; the server process is
    terminated directly instead.
    """
    global _marten_server
    server, _marten_server = _marten_server, None
    if server is None:
        return

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        server.terminate()
        return

    try:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(server.stop())
        finally:
            loop.close()
    except Exception as e:
        logger.warning(f"Language server cleanup failed: {e}")
        server.terminate()


def _setup_cleanup_handlers() -> None:
    """Set up signal handlers and atexit hooks for cleanup."""
    atexit.register(_cleanup_server)

    def signal_handler(signum, frame):
        _cleanup_server()
        # Re-raise the signal to allow normal termination
        signal.signal(signum, signal.SIG_DFL)
        signal.raise_signal(signum)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def _to_dict(obj: Any) -> Any:
    """Convert dataclass objects to dictionaries for JSON serialization."""
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    elif isinstance(obj, list):
        return [_to_dict(item) for item in obj]
    elif isinstance(obj, dict):
        return {k: _to_dict(v) for k, v in obj.items()}
    return obj


# ============================================================================
# Solution Tools
# ============================================================================


@mcp.tool()
async def list_solutions() -> List[Dict[str, Any]]:
    """List the solution files (.sln, .slnx) found in the workspace.

    Build output (bin/obj), dependency and version-control folders are skipped.

    Returns:
        One entry per solution with path, name, relative_path, is_active
        (bound to the running server) and is_remembered.
    """
    server = await get_marten_server()
    return _to_dict(await server.list_solutions())


@mcp.tool()
async def select_solution(solution: str | None = None) -> Dict[str, Any]:
    """Load a solution into the C# language server.

    Args:
        solution: Path of the solution to load (absolute or relative to the
                  project). Omit it to get the list of candidates back.

    Returns:
        state, solution, the messages the command produced and, when nothing
        was loaded, the candidate solutions.
    """
    server = await get_marten_server()
    return _to_dict(await server.select_solution(solution))


# ============================================================================
# Server Lifecycle Tools
# ============================================================================


@mcp.tool()
async def restart_server(solution: str | None = None) -> Dict[str, Any]:
    """Restart the C# language server.

    Args:
        solution: Optional solution to restart on; defaults to the remembered one.
                  With neither, the selection flow runs instead.
    """
    server = await get_marten_server()
    return _to_dict(await server.restart_server(solution))


@mcp.tool()
async def stop_server() -> Dict[str, Any]:
    """Stop the C# language server. The remembered solution is kept."""
    server = await get_marten_server()
    return _to_dict(await server.stop_server())


@mcp.tool()
async def open_document(path: str, language_id: str = "csharp") -> Dict[str, Any]:
    """Notify Marten that a document was opened.

    Opening a C# file while no server runs loads the solution governing it.

    Args:
        path: File path (relative to project root or absolute)
        language_id: Language of the document
    """
    server = await get_marten_server()
    return _to_dict(await server.open_document(path, language_id))


@mcp.tool()
async def get_server_status(check_toolchain: bool = True) -> Dict[str, Any]:
    """Report the language server state, bound solution and dotnet runtime.

    Args:
        check_toolchain: Also run `dotnet --version` and report the result
    """
    server = await get_marten_server()
    return _to_dict(await server.get_status(check_toolchain))


# ============================================================================
# Language Server Requests
# ============================================================================


@mcp.tool()
async def show_references(arguments: str | Dict[str, Any]) -> Dict[str, Any]:
    """Find references for a serialized position (as sent by code lenses).

    Args:
        arguments: ReferenceParams as JSON text or object:
                   {"textDocument": {"uri": ...}, "position": {"line": ..., "character": ...}}
    """
    server = await get_marten_server()
    return _to_dict(await server.show_references(arguments))


@mcp.tool()
async def get_decompiled_source(uri: str) -> str:
    """Return decompiled source for a `csharp:` metadata document URI.

    Returns an empty string when no server is running.
    """
    server = await get_marten_server()
    return await server.get_decompiled_source(uri)


# ============================================================================
# Entry Point
# ============================================================================


def _configure_logging(project_path: str) -> None:
    level_name = os.getenv("MARTEN_LOG_LEVEL") or load_config(Path(project_path)).logging.level
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    # stdout carries the MCP protocol
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    """Run the MCP server.

    The project path can be set via:
    1. First command line argument
    2. MARTEN_PROJECT_PATH environment variable
    3. Current working directory (default)

    Example:
        MARTEN_PROJECT_PATH=/path/to/solution python -m marten.mcp_server
    """
    _setup_cleanup_handlers()

    if len(sys.argv) > 1 and not sys.argv[1].startswith("-"):
        set_project_path(sys.argv[1])
        # Remove the argument so FastMCP doesn't see it
        sys.argv = [sys.argv[0]] + sys.argv[2:]

    project_path = get_project_path()
    if not _project_path:
        set_project_path(project_path)

    _configure_logging(project_path)

    print("🚀 Starting Marten MCP Server", file=sys.stderr)
    print(f"📁 Project: {Path(project_path).name}", file=sys.stderr)
    print(f"📂 Path: {project_path}", file=sys.stderr)
    print("", file=sys.stderr)

    mcp.run()


if __name__ == "__main__":
    main()
