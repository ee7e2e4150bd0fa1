"""MCP server exposing session operations as tools."""
