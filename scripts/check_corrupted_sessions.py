#!/usr/bin/env -S uv run
"""
Check for missing or corrupted Codex session metadata.

Scans the session root (CODEX_SESSION_PATH or ~/.codex/sessions) and reports
every session whose metadata does not load cleanly. Useful before cleaning up
sessions with `codex-sessions delete`.
"""

import sys

from codex_sessions.paths import get_session_root_path
from codex_sessions.services.scanner import scan_sessions


def main():
    print('=' * 80)
    print('Codex Session Metadata Check')
    print('=' * 80)
    print()

    root = get_session_root_path()

    if not root.exists():
        print(f'Directory not found: {root}')
        sys.exit(1)

    sessions = scan_sessions(root)
    unhealthy = [session for session in sessions if session.meta.status != 'ok']

    print(f'Found {len(sessions)} sessions')
    print()

    for session in unhealthy:
        error = session.meta.error
        print(f'✗ {session.meta.status.upper()}: {session.session_path}')
        if error is not None:
            print(f'  Error: [{error.code}] {error.message}')
            if error.missing_fields:
                print(f'  Missing fields: {", ".join(error.missing_fields)}')
        print()

    print()
    print('SUMMARY')
    print('-' * 80)
    print(f'Total sessions checked: {len(sessions)}')
    print(f'Valid sessions: {len(sessions) - len(unhealthy)}')
    print(f'Missing metadata: {sum(1 for s in unhealthy if s.meta.status == "missing")}')
    print(f'Corrupted metadata: {sum(1 for s in unhealthy if s.meta.status == "corrupted")}')
    print()

    if unhealthy:
        print('✗ Found sessions with unusable metadata!')
        sys.exit(1)
    else:
        print('✓ All session metadata is valid!')
        sys.exit(0)


if __name__ == '__main__':
    main()
