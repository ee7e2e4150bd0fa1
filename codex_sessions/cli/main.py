#!/usr/bin/env python3
"""
Command-line interface for codex-sessions.

Provides commands to list, inspect, resume, delete and watch Codex CLI sessions.
"""

from __future__ import annotations

import json
import time
from pathlib import Path

import typer

from codex_sessions.cli.logger import configure_logging
from codex_sessions.config.base import SessionManagerSettings, get_settings
from codex_sessions.exceptions import ERROR_SEVERITY
from codex_sessions.schemas.operations import OperationErrorInfo, SessionEvent
from codex_sessions.services.manager import SessionManager

app = typer.Typer(
    name='codex-sessions',
    help='List, resume and delete Codex CLI sessions',
    add_completion=False,
)

STATUS_COLORS = {
    'ok': typer.colors.GREEN,
    'missing': typer.colors.YELLOW,
    'corrupted': typer.colors.RED,
}


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Manage Codex CLI sessions stored on disk."""
    configure_logging(verbose)


def _build_manager(root: Path | None = None, cli: str | None = None) -> SessionManager:
    """Create a manager from settings, applying command-line overrides."""
    settings = get_settings(SessionManagerSettings)
    manager = SessionManager.from_settings(settings)
    if root is not None:
        manager = SessionManager(
            root,
            meta_file_name=manager.meta_file_name,
            cli_path=manager.cli_path,
            terminal=manager.terminal,
        )
    if cli is not None:
        manager.cli_path = cli
    return manager


def _fail(error: OperationErrorInfo | None) -> None:
    """Print an operation error (warning- or error-class) and exit 1."""
    if error is None:
        typer.secho('Error: operation failed without details', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    severity = ERROR_SEVERITY.get(error.code, 'error')
    color = typer.colors.YELLOW if severity == 'warning' else typer.colors.RED
    label = 'Warning' if severity == 'warning' else 'Error'
    typer.secho(f'{label} [{error.code}]: {error.message}', fg=color, err=True)
    raise typer.Exit(1)


@app.command()
def root() -> None:
    """Print the session root directory."""
    typer.echo(str(_build_manager().root_path))


@app.command(name='list')
def list_sessions(
    refresh: bool = typer.Option(False, '--refresh', help='Ignore any cached listing'),
    as_json: bool = typer.Option(False, '--json', help='Output JSON'),
    root_path: Path | None = typer.Option(None, '--root', '-r', help='Session root (default: CODEX_SESSION_PATH)'),
) -> None:
    """List sessions, newest first."""
    manager = _build_manager(root_path)
    sessions = manager.list_sessions(force_refresh=refresh)

    if as_json:
        typer.echo(json.dumps([view.model_dump(mode='json') for view in sessions], indent=2))
        return

    if not sessions:
        typer.echo(f'No sessions found under {manager.root_path}')
        return

    for view in sessions:
        status = typer.style(f'{view.status:<9}', fg=STATUS_COLORS[view.status])
        typer.echo(f'{status} {view.created_at_iso:<26} {view.id}')
        typer.echo(f'          cwd:  {view.cwd}')
        typer.echo(f'          path: {view.session_path}')
        if view.error_code:
            typer.echo(f'          error: {view.error_code}')

    typer.echo()
    typer.echo(f'{len(sessions)} session(s) under {manager.root_path}')


@app.command()
def show(
    session_id: str = typer.Argument(..., help='Session ID (UUIDv7)'),
    path: Path = typer.Argument(..., help='Session directory or .jsonl log'),
    as_json: bool = typer.Option(False, '--json', help='Output JSON'),
) -> None:
    """Show details of one session."""
    detail = _build_manager().get_session_detail(session_id, path)
    if detail is None:
        typer.secho(f'Error: No valid session metadata at {path}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(detail.model_dump_json(indent=2))
        return

    typer.echo(f'Session: {detail.id}')
    if detail.id != session_id:
        typer.secho(f'  (requested {session_id})', fg=typer.colors.YELLOW)
    typer.echo(f'Created: {detail.created_at_iso}')
    typer.echo(f'Cwd: {detail.cwd}')
    typer.echo()
    typer.secho('Origin:', bold=True)
    typer.echo(f'  Originator: {detail.originator}')
    typer.echo(f'  CLI version: {detail.cli_version}')
    typer.echo(f'  Source: {detail.source}')
    typer.echo()
    typer.secho('Files:', bold=True)
    typer.echo(f'  Session: {detail.session_path}')
    typer.echo(f'  Metadata: {detail.metadata_path}')
    if detail.instructions:
        typer.echo()
        typer.secho('Instructions:', bold=True)
        typer.echo(detail.instructions)


@app.command()
def resume(
    session_id: str = typer.Argument(..., help='Session ID (UUIDv7)'),
    path: str = typer.Argument(..., help='Session directory or .jsonl log'),
    cli: str | None = typer.Option(None, '--cli', help='Codex executable (or use CODEX_CLI_PATH env)'),
) -> None:
    """Resume a session in a new terminal window."""
    response = _build_manager(cli=cli).resume_session(session_id, path)
    if not response.success or response.result is None:
        _fail(response.error)
        return

    result = response.result
    if result.simulated:
        typer.secho('Codex CLI not found - simulated resume', fg=typer.colors.YELLOW)
    else:
        typer.secho('✓ Session resumed', fg=typer.colors.GREEN)
        typer.echo(f'  CLI: {result.cli_path}')
    typer.echo(f'  Session ID: {result.session_id}')
    typer.echo(f'  Metadata: {result.meta_path}')
    typer.echo(f'  Command: {result.command}')


@app.command()
def delete(
    session_id: str = typer.Argument(..., help='Session ID (UUIDv7)'),
    path: str = typer.Argument(..., help='Session directory or .jsonl log'),
    yes: bool = typer.Option(False, '--yes', '-y', help='Skip the confirmation prompt'),
) -> None:
    """Delete a session's files. This cannot be undone."""
    if not yes:
        typer.confirm(f'Permanently delete session {session_id} at {path}?', abort=True)

    response = _build_manager().delete_session(session_id, path)
    if not response.success or response.result is None:
        _fail(response.error)
        return

    result = response.result
    typer.secho('✓ Session deleted', fg=typer.colors.GREEN)
    typer.echo(f'  Session ID: {result.session_id}')
    typer.echo(f'  Removed: {result.removed_path}')
    if result.matched_by_path:
        typer.secho('  Identified by path only (metadata did not confirm the id)', fg=typer.colors.YELLOW)


@app.command()
def watch(
    root_path: Path | None = typer.Option(None, '--root', '-r', help='Session root (default: CODEX_SESSION_PATH)'),
) -> None:
    """Print session change events until interrupted."""
    manager = _build_manager(root_path)

    def on_event(event: SessionEvent) -> None:
        ts = time.strftime('%H:%M:%S')
        if event.kind == 'updated':
            typer.echo(f'[{ts}] updated {event.path or ""}')
        else:
            typer.secho(f'[{ts}] error {event.message}', fg=typer.colors.RED, err=True)

    with manager:
        manager.subscribe_to_changes(on_event)
        if not manager.watching:
            raise typer.Exit(1)

        typer.echo(f'Watching {manager.root_path} (Ctrl+C to stop)')
        try:
            # A watch error (root removed) drops the watcher
            while manager.watching:
                time.sleep(1)
        except KeyboardInterrupt:
            typer.echo()
            return
        raise typer.Exit(1)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
