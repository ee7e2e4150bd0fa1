"""Shared utilities for the MCP server."""

from __future__ import annotations

# Standard Library
import logging
from typing import Any

# Third-Party Libraries
from mcp.server.fastmcp import Context

logger = logging.getLogger('codex_sessions.mcp')


class DualLogger:
    """Logs messages to both the server log and the MCP client context."""

    def __init__(self, ctx: Context[Any, Any, Any] | None) -> None:
        self.ctx = ctx

    async def info(self, message: str) -> None:
        logger.info(message)
        if self.ctx is not None:
            await self.ctx.info(message)

    async def warning(self, message: str) -> None:
        logger.warning(message)
        if self.ctx is not None:
            await self.ctx.warning(message)

    async def error(self, message: str) -> None:
        logger.error(message)
        if self.ctx is not None:
            await self.ctx.error(message)
