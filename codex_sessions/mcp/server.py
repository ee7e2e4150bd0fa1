"""
Codex Session MCP Server.

Provides tools for listing, inspecting, resuming and deleting Codex CLI sessions.

Setup:
    claude mcp add --scope user codex-sessions -- codex-sessions-mcp

Example:
    # List sessions, newest first
    list_sessions()

    # Resume one of them in a new terminal
    resume_session(session_id='0199dc75-7be5-7ae2-98a3-5be0079041b5', path='/home/me/.codex/sessions/...')
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from typing import Any

import attrs
from mcp.server.fastmcp import Context, FastMCP

from codex_sessions.config.base import SessionManagerSettings, settings
from codex_sessions.mcp.utils import DualLogger
from codex_sessions.schemas.operations import (
    DeleteSessionResponse,
    ResumeSessionResponse,
    SessionDetailView,
    SessionSummaryView,
)
from codex_sessions.services.manager import SessionManager

# ==============================================================================
# Server State (immutable)
# ==============================================================================


@attrs.define(frozen=True)
class ServerState:
    """
    Immutable server state initialized at startup.

    The manager owns the session watcher; it is closed on shutdown.
    """

    settings: SessionManagerSettings
    manager: SessionManager


def build_state(server_settings: SessionManagerSettings) -> ServerState:
    """Create server state and start watching the session root."""
    manager = SessionManager.from_settings(server_settings)
    manager.start_watching()
    return ServerState(settings=server_settings, manager=manager)


# ==============================================================================
# Lifespan Management
# ==============================================================================


@contextlib.asynccontextmanager
async def lifespan(mcp_server: FastMCP) -> AsyncIterator[None]:
    """
    Manage server lifecycle and state initialization.

    Creates ServerState at startup and releases the watcher on shutdown.
    """
    state = build_state(settings)

    try:
        # Register tools with closure over state
        register_tools(state)

        print(f'[MCP Server] Session root: {state.manager.root_path}')
        print(f'[MCP Server] Watching: {state.manager.watching}')

        yield  # Setup successful; application active

    finally:
        state.manager.close()
        print('[MCP Server] Stopped session watcher')


# ==============================================================================
# Server Setup
# ==============================================================================

server = FastMCP('codex-sessions', lifespan=lifespan)


# ==============================================================================
# Tool Registration (Closure Pattern)
# ==============================================================================


def register_tools(state: ServerState) -> None:
    """
    Register MCP tools with closure over server state.

    Args:
        state: Server state containing the session manager
    """
    manager = state.manager

    @server.tool()
    async def list_sessions(force_refresh: bool = False) -> list[SessionSummaryView]:
        """
        List Codex sessions under the session root, newest first.

        Sessions with missing or corrupted metadata are included with their
        status and error code so they can be cleaned up.

        Args:
            force_refresh: Re-scan even if the cached list is current

        Returns:
            One summary per session
        """
        return await asyncio.to_thread(manager.list_sessions, force_refresh)

    @server.tool()
    async def get_session_detail(session_id: str, path: str) -> SessionDetailView | None:
        """
        Get details of one session.

        Args:
            session_id: Session ID (UUIDv7)
            path: Session directory or .jsonl log (from list_sessions)

        Returns:
            Session detail, or null when its metadata is missing or invalid
        """
        return await asyncio.to_thread(manager.get_session_detail, session_id, path)

    @server.tool()
    async def resume_session(
        session_id: str,
        path: str,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> ResumeSessionResponse:
        """
        Resume a session by launching `codex resume <id>` in a new terminal.

        The session's metadata must name the given id. When the Codex CLI is
        not installed, a placeholder command runs instead (simulated=true).

        Args:
            session_id: Session ID (UUIDv7)
            path: Session directory or .jsonl log (from list_sessions)

        Returns:
            Response with the launched command, or an error code
            (INVALID_ID, MISSING_META, ID_MISMATCH, SPAWN_FAILED)
        """
        logger = DualLogger(ctx)
        response = await asyncio.to_thread(manager.resume_session, session_id, path)
        if response.error is not None:
            await logger.warning(f'Resume refused [{response.error.code}]: {response.error.message}')
        elif response.result is not None and response.result.simulated:
            await logger.warning('Codex CLI not found - resume was simulated')
        else:
            await logger.info(f'Resumed session {session_id}')
        return response

    @server.tool()
    async def delete_session(
        session_id: str,
        path: str,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> DeleteSessionResponse:
        """
        Permanently delete a session's files. This cannot be undone.

        Only call after the user has explicitly confirmed the deletion.

        Args:
            session_id: Session ID (UUIDv7)
            path: Session directory or .jsonl log (from list_sessions)

        Returns:
            Response with the removed path, or an error code
            (INVALID_ID, MISSING_META, ID_MISMATCH, REMOVE_FAILED)
        """
        logger = DualLogger(ctx)
        response = await asyncio.to_thread(manager.delete_session, session_id, path)
        if response.error is not None:
            await logger.warning(f'Delete refused [{response.error.code}]: {response.error.message}')
        elif response.result is not None:
            if response.result.matched_by_path:
                await logger.warning(f'Deleted {response.result.removed_path} identified by path only')
            else:
                await logger.info(f'Deleted {response.result.removed_path}')
        return response


def main() -> None:
    """Run the MCP server."""
    server.run()


if __name__ == '__main__':
    main()
