"""
Session resume - launches `codex resume <id>` in a new terminal.

The session's metadata must load cleanly and name the requested id before
anything is launched; a stale caller pointing at the wrong path is refused
with ID_MISMATCH. There is no path-based bypass here.

When no Codex executable can be found, a harmless placeholder command that
echoes the intended action is launched instead and the result is marked
simulated. This is a normal outcome, not an error.

The launched process is detached: it is not waited on or tracked.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path

from codex_sessions.exceptions import ResumeSessionError
from codex_sessions.paths import DEFAULT_META_FILE, is_session_id
from codex_sessions.schemas.operations.resume import ResumeResult
from codex_sessions.services.executable import resolve_codex_executable
from codex_sessions.services.meta import load_session_meta

__all__ = [
    'DEFAULT_TERMINAL',
    'build_resume_command',
    'build_simulated_command',
    'launch_detached',
    'resume_session',
]

logger = logging.getLogger(__name__)

DEFAULT_TERMINAL = 'x-terminal-emulator'


def resume_session(
    session_id: str,
    session_path: Path | str,
    meta_file_name: str = DEFAULT_META_FILE,
    cli_path_override: str | None = None,
    *,
    terminal: str = DEFAULT_TERMINAL,
) -> ResumeResult:
    """
    Validate a session and launch the Codex CLI to resume it.

    Args:
        session_id: UUIDv7 the caller believes the session has
        session_path: Session directory or log file
        meta_file_name: Meta file name inside session directories
        cli_path_override: Explicit Codex executable path
        terminal: Terminal launcher used on Linux

    Returns:
        ResumeResult with the launched command

    Raises:
        ResumeSessionError: INVALID_ID, MISSING_META, ID_MISMATCH or SPAWN_FAILED
    """
    if not is_session_id(session_id):
        raise ResumeSessionError('INVALID_ID', f'Session id "{session_id}" is not a valid UUIDv7')

    resolved_path = Path(os.path.abspath(session_path))
    meta = load_session_meta(resolved_path, meta_file_name)
    meta_path = meta.meta_path or str(resolved_path / meta_file_name)

    if meta.status == 'missing':
        raise ResumeSessionError(
            'MISSING_META',
            meta.error.message if meta.error else f'Missing session metadata at "{meta_path}"',
        )

    if meta.status == 'corrupted' or meta.summary is None:
        raise ResumeSessionError(
            'MISSING_META',
            meta.error.message if meta.error else f'Corrupted session metadata at "{meta_path}"',
            cause=meta.error,
        )

    if meta.summary.id != session_id:
        raise ResumeSessionError(
            'ID_MISMATCH',
            f'Session id mismatch: requested({session_id}) vs meta({meta.summary.id})',
        )

    cli_path = resolve_codex_executable(cli_path_override)
    simulated = cli_path is None
    if cli_path is None:
        command = build_simulated_command(session_id, terminal=terminal)
    else:
        command = build_resume_command(cli_path, session_id, terminal=terminal)

    try:
        launch_detached(command)
    except OSError as e:
        logger.error(f'Failed to launch resume command for {session_id}: {e}')
        raise ResumeSessionError('SPAWN_FAILED', 'Failed to launch Codex CLI session command', cause=e) from e

    if simulated:
        logger.info(f'Codex CLI not found, simulated resume of {session_id}')
    else:
        logger.info(f'Resumed session {session_id} with {cli_path}')

    return ResumeResult(
        session_id=session_id,
        meta_path=meta_path,
        cli_path=cli_path,
        command=command,
        simulated=simulated,
    )


# ==============================================================================
# Command Construction
# ==============================================================================


def build_resume_command(
    cli_path: str,
    session_id: str,
    *,
    platform: str = sys.platform,
    terminal: str = DEFAULT_TERMINAL,
) -> str:
    """
    Build the shell command that opens a terminal running `codex resume`.

    The executable path is quoted when it contains whitespace. The session id
    is interpolated as-is; callers must have validated it as a UUIDv7.
    """
    if platform == 'win32':
        cli = f'"{cli_path}"' if _has_whitespace(cli_path) else cli_path
        return f'start cmd /k {cli} resume {session_id}'

    return _in_new_terminal(f'{shlex.quote(cli_path)} resume {session_id}', platform=platform, terminal=terminal)


def build_simulated_command(
    session_id: str,
    *,
    platform: str = sys.platform,
    terminal: str = DEFAULT_TERMINAL,
) -> str:
    """Placeholder command that opens a terminal and only echoes what would have been run."""
    message = f'[Simulated] Codex resume {session_id}'
    if platform == 'win32':
        return f'start cmd /k echo {message}'

    # Hand over to an interactive shell so the window stays open
    shell_line = f'echo {shlex.quote(message)}; exec "${{SHELL:-/bin/sh}}"'
    return _in_new_terminal(f'sh -c {shlex.quote(shell_line)}', platform=platform, terminal=terminal)


def _in_new_terminal(command: str, *, platform: str, terminal: str) -> str:
    """Wrap a POSIX shell command so it runs in a new terminal window."""
    if platform == 'darwin':
        escaped = command.replace('\\', '\\\\').replace('"', '\\"')
        script = 'tell application "Terminal" to do script "' + escaped + '"'
        return f'osascript -e {shlex.quote(script)}'
    return f'{terminal} -e {command}'


def launch_detached(command: str, *, platform: str = sys.platform) -> None:
    """
    Run a shell command without waiting for it or tying it to this process.

    Raises:
        OSError: If the shell could not be started
    """
    if platform == 'win32':
        creationflags = getattr(subprocess, 'DETACHED_PROCESS', 0) | getattr(
            subprocess, 'CREATE_NEW_PROCESS_GROUP', 0
        )
        subprocess.Popen(
            ['cmd.exe', '/c', command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=creationflags,
        )
        return

    subprocess.Popen(
        command,
        shell=True,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def _has_whitespace(value: str) -> bool:
    return any(ch.isspace() for ch in value)
