"""Pydantic schemas for session metadata and operation results."""
