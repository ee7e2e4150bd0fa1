"""
Codex session manager.

Discovers Codex CLI sessions on disk, validates their metadata, watches the
session tree for changes, and provides guarded resume/delete operations.
"""

__version__ = '0.1.0'
