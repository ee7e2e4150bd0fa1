"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from codex_sessions.config.base import SessionManagerSettings, get_settings
from codex_sessions.paths import DEFAULT_META_FILE, DEFAULT_SESSION_ROOT


def test_defaults() -> None:
    settings = get_settings(SessionManagerSettings)

    assert settings.CODEX_SESSION_PATH == DEFAULT_SESSION_ROOT
    assert settings.META_FILE_NAME == DEFAULT_META_FILE
    assert settings.CODEX_CLI_PATH is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv('CODEX_SESSION_PATH', str(tmp_path))
    monkeypatch.setenv('CODEX_CLI_PATH', '/opt/codex/bin/codex')

    settings = get_settings(SessionManagerSettings)

    assert settings.CODEX_SESSION_PATH == tmp_path
    assert settings.CODEX_CLI_PATH == '/opt/codex/bin/codex'


def test_session_path_expands_home(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('CODEX_SESSION_PATH', '~/codex-sessions')

    settings = get_settings(SessionManagerSettings)

    assert settings.CODEX_SESSION_PATH == Path.home() / 'codex-sessions'


@pytest.mark.parametrize('value', ['', 'nested/session_meta', 'nested\\session_meta'])
def test_meta_file_name_must_be_bare(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv('META_FILE_NAME', value)

    with pytest.raises(pydantic.ValidationError):
        get_settings(SessionManagerSettings)


def test_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / 'codex.env'
    env_file.write_text(f'CODEX_SESSION_PATH={tmp_path}\nMETA_FILE_NAME=meta.json\n', encoding='utf-8')

    settings = get_settings(SessionManagerSettings, env_file=str(env_file))

    assert settings.CODEX_SESSION_PATH == tmp_path
    assert settings.META_FILE_NAME == 'meta.json'


def test_env_file_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / 'codex.env'
    env_file.write_text('TERMINAL_EMULATOR=gnome-terminal\n', encoding='utf-8')
    monkeypatch.setenv('LOAD_ENV_FILE', str(env_file))

    assert get_settings(SessionManagerSettings).TERMINAL_EMULATOR == 'gnome-terminal'


def test_env_file_rejects_unknown_keys(tmp_path: Path) -> None:
    env_file = tmp_path / 'codex.env'
    env_file.write_text('CODEX_SESION_PATH=/typo\n', encoding='utf-8')

    with pytest.raises(pydantic.ValidationError):
        get_settings(SessionManagerSettings, env_file=str(env_file))


def test_missing_env_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        get_settings(SessionManagerSettings, env_file=str(tmp_path / 'absent.env'))
