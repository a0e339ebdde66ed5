#!/usr/bin/env python3
"""
Restore League Manager data from a JSON backup.

Usage:
    python scripts/restore.py backup.json --data-dir /path/to/data
    python scripts/restore.py backup.json --data-dir /path/to/data --force
    python scripts/restore.py backup.json --data-dir /path/to/data --no-backup

Safety:
    - Validates the whole document before touching any data
    - Creates a pre-restore backup automatically (unless --no-backup)
"""

import argparse
import os
import subprocess
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league import document
from league.errors import DocumentImportError
from league.store import EntityStore

DEFAULT_MAX_TEAMS = 16


def error(message: str, code: int = 1):
    """Print error and exit."""
    print(f"ERROR: {message}", file=sys.stderr)
    sys.exit(code)


def validate_backup(backup_path: str, max_teams: int) -> dict:
    """Load the backup and check it can be imported."""
    if not os.path.exists(backup_path):
        error(f"Backup file not found: {backup_path}")

    print(f"Validating backup: {backup_path}")
    try:
        with open(backup_path, 'rb') as f:
            data = document.loads(f.read())
        document.validate_document(data, max_teams)
    except DocumentImportError as e:
        error(f"Invalid backup: {e}")

    print(f"   Found {len(data['teams'])} teams, {len(data.get('matches') or [])} matches")
    return data


def create_pre_restore_backup(data_dir: str):
    """Create backup before restore."""
    print("\nCreating pre-restore backup...")

    backup_script = os.path.join(os.path.dirname(__file__), 'backup.py')
    if not os.path.exists(backup_script):
        error("backup.py not found. Cannot create pre-restore backup.", code=1)

    result = subprocess.run([
        sys.executable, backup_script,
        '--data-dir', data_dir,
        '--prefix', 'pre-restore'
    ], capture_output=True, text=True, check=False)

    if result.returncode != 0:
        print(f"Warning: Pre-restore backup failed:\n{result.stderr}", file=sys.stderr)
        print("   Continuing with restore...")
    else:
        print("   Pre-restore backup created")


def restore_data(data: dict, data_dir: str, max_teams: int):
    """Replace every slice in ``data_dir`` with the backup contents."""
    print(f"\nRestoring into {data_dir}...")
    document.import_document(EntityStore(data_dir), data, max_teams)
    print("   Restore written")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Restore League Manager data from a JSON backup',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/restore.py backup.json --data-dir data
  python scripts/restore.py backup.json --data-dir data --no-backup
  python scripts/restore.py backup.json --data-dir data --force

Exit codes:
  0: Success
  1: Invalid backup
  3: Restore operation failed
        """
    )

    parser.add_argument('backup_file', help='Path to backup JSON file')
    parser.add_argument('--data-dir', required=True, help='Data directory to restore into')
    parser.add_argument('--max-teams', type=int, default=DEFAULT_MAX_TEAMS,
                        help=f'Reject backups with more teams than this (default: {DEFAULT_MAX_TEAMS})')
    parser.add_argument('--no-backup', action='store_true',
                        help='Skip pre-restore backup (not recommended)')
    parser.add_argument('--force', action='store_true',
                        help='Skip confirmation prompt')

    args = parser.parse_args(argv)

    print("=== League Manager Restore ===\n")
    print(f"Backup file: {args.backup_file}")
    print(f"Data directory: {args.data_dir}")
    print(f"Pre-restore backup: {'disabled' if args.no_backup else 'enabled'}")
    print()

    data = validate_backup(args.backup_file, args.max_teams)

    if not args.force:
        print("\nWARNING: This will replace all teams, players, matches and the bracket.")
        response = input("\nType 'RESTORE' to continue: ")
        if response != 'RESTORE':
            print("Restore cancelled.")
            sys.exit(0)

    if not args.no_backup and os.path.isdir(args.data_dir):
        create_pre_restore_backup(args.data_dir)

    try:
        restore_data(data, args.data_dir, args.max_teams)
    except Exception as e:
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        print("   Consider restoring from the pre-restore backup.")
        sys.exit(3)

    print("\nRestore complete!")


if __name__ == '__main__':
    main()
