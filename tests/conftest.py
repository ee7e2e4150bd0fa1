"""Shared fixtures for codex-sessions tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from codex_sessions.paths import CLI_PATH_ENV_VAR, SESSION_ROOT_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own Codex configuration out of tests."""
    monkeypatch.delenv(SESSION_ROOT_ENV_VAR, raising=False)
    monkeypatch.delenv(CLI_PATH_ENV_VAR, raising=False)
    monkeypatch.delenv('LOAD_ENV_FILE', raising=False)


@pytest.fixture
def session_root(tmp_path: Path) -> Path:
    """Empty session root directory."""
    root = tmp_path / 'sessions'
    root.mkdir()
    return root


@pytest.fixture
def launches(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record resume launches instead of spawning processes."""
    launched: list[str] = []
    monkeypatch.setattr('codex_sessions.services.resume.launch_detached', lambda command: launched.append(command))
    return launched


@pytest.fixture
def no_codex(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make the Codex executable unresolvable."""
    monkeypatch.setattr('codex_sessions.services.resume.resolve_codex_executable', lambda override=None: None)
