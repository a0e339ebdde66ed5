#!/usr/bin/env python3
"""
League Manager Backup Tool

Reads the tournament slices from a data directory and writes them as a
timestamped JSON document (the same document the web export produces).

Usage:
    python scripts/backup.py --data-dir /path/to/data
    python scripts/backup.py --data-dir /path/to/data --output /path/to/backup.json

Exit codes:
    0: Success
    1: Data directory not found
    3: Backup write failure
"""
import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league import document
from league.store import SLICE_KEYS, EntityStore


def check_data_dir(data_dir: str) -> bool:
    """Verify the data directory exists and holds at least one slice file."""
    if not os.path.isdir(data_dir):
        print(f"Error: Data directory not found: {data_dir}", file=sys.stderr)
        return False
    present = [key for key in SLICE_KEYS if os.path.exists(os.path.join(data_dir, f'{key}.yaml'))]
    if not present:
        print(f"Warning: No tournament data in {data_dir}, backing up an empty document", file=sys.stderr)
    return True


def create_backup(data_dir: str, output_path: str) -> bool:
    """Write the document for ``data_dir`` to ``output_path``."""
    print(f"Creating backup: {output_path}")
    try:
        payload = document.dumps(document.build_document(EntityStore(data_dir)))
        os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(payload)
    except Exception as e:
        print(f"Error: Failed to write backup: {e}", file=sys.stderr)
        return False

    file_size = os.path.getsize(output_path)
    print(f"Backup created successfully: {output_path} ({file_size / 1024:.1f} KB)")
    return True


def default_output_path(prefix: str) -> str:
    timestamp = datetime.now().strftime('%Y%m%d-%H%M%S')
    backups_dir = Path(__file__).parent.parent / 'backups'
    backups_dir.mkdir(exist_ok=True)
    return str(backups_dir / f'{prefix}-{timestamp}.json')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Backup League Manager data to a local JSON file'
    )
    parser.add_argument(
        '--data-dir',
        default=os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(os.path.dirname(__file__), '..', 'data')),
        help='Data directory (default: $TOURNAMENT_DATA_DIR or ./data)'
    )
    parser.add_argument(
        '--output',
        help='Output file path (default: backups/<prefix>-YYYYMMDD-HHMMSS.json)'
    )
    parser.add_argument(
        '--prefix',
        default='backup',
        help='File name prefix for the default output path'
    )

    args = parser.parse_args(argv)

    print(f"Checking data directory: {args.data_dir}")
    if not check_data_dir(args.data_dir):
        return 1

    output_path = args.output or default_output_path(args.prefix)
    if not output_path.endswith('.json'):
        output_path += '.json'

    if not create_backup(args.data_dir, output_path):
        print("Backup failed.", file=sys.stderr)
        return 3

    print("\nBackup completed successfully!")
    print(f"Location: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
