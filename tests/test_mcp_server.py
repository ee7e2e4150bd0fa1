"""Tests for MCP server wiring."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest
from helpers import make_meta_record, write_session_dir

from codex_sessions.config.base import SessionManagerSettings
from codex_sessions.mcp.server import build_state, register_tools, server
from codex_sessions.mcp.utils import DualLogger


def test_state_watches_and_tools_register(session_root: Path) -> None:
    write_session_dir(session_root, 'rollout', make_meta_record())
    state = build_state(SessionManagerSettings(CODEX_SESSION_PATH=session_root))

    try:
        assert state.manager.watching
        assert len(state.manager.list_sessions()) == 1

        register_tools(state)
        tools = asyncio.run(server.list_tools())
    finally:
        state.manager.close()

    assert {'list_sessions', 'get_session_detail', 'resume_session', 'delete_session'} <= {tool.name for tool in tools}
    assert state.manager.watching is False


def test_dual_logger_without_context(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger='codex_sessions.mcp'):
        asyncio.run(DualLogger(None).warning('Resume refused'))

    assert 'Resume refused' in caplog.text
