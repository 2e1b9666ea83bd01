#!/usr/bin/env python3
"""
View Logs from SQLite Database
==============================

Query persisted logs and delivered events from the monitor database.

Usage:
    # Last 24 hours of logs
    python scripts/view_logs.py

    # Last 6 hours, errors only
    python scripts/view_logs.py --hours 6 --level ERROR

    # Events delivered in the last 24 hours
    python scripts/view_logs.py --seen

    # Database stats
    python scripts/view_logs.py --stats
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from solcerer.db import MonitorDatabase
from solcerer.models import SourceType
from config.monitor_settings import DB_PATH


def format_log(log: dict) -> str:
    """Format a log entry for display."""
    timestamp = log['timestamp'][:19].replace('T', ' ')
    level = log['level'].ljust(8)
    name = log['logger_name']

    if len(name) > 30:
        name = '...' + name[-27:]

    output = f"{timestamp} {level} {name}: {log['message']}"
    if log.get('exc_info'):
        output += f"\n{log['exc_info']}"
    return output


def format_seen(record: dict) -> str:
    """Format a delivered-event record for display."""
    recorded = record['recorded_at'][:19].replace('T', ' ')
    return f"{recorded} {record['source_type'].ljust(22)} {record['entity_key']}: {record['dedup_key']}"


def print_stats(db: MonitorDatabase):
    stats = db.get_stats()
    print("\nDatabase Statistics:")
    print("-" * 40)
    print(f"  Tracked entities:      {stats['tracked_entities']:,}")
    print(f"  Price alerts:          {stats['price_alerts']:,} ({stats['price_alerts_active']:,} active)")
    print(f"  Delivered events:      {stats['seen_records']:,}")
    print(f"  Service log entries:   {stats['service_logs']:,}")
    print(f"  Database size:         {stats['file_size_mb']:.2f} MB")
    print()


def main():
    parser = argparse.ArgumentParser(
        description='View logs from the monitor service database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--hours', '-t', type=int, default=24,
                        help='Hours of history to show (default: 24)')
    parser.add_argument('--level', '-l',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Filter logs by level')
    parser.add_argument('--limit', '-n', type=int, default=100,
                        help='Maximum logs to show (default: 100)')
    parser.add_argument('--stats', action='store_true',
                        help='Show database statistics')
    parser.add_argument('--seen', nargs='?', const='all',
                        choices=['all'] + [s.value for s in SourceType],
                        help='Show delivered events instead of logs (optionally one source type)')
    parser.add_argument('--db', type=str, default=str(DB_PATH),
                        help='Path to database file')

    args = parser.parse_args()

    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        print("The monitor service needs to run first to create the database.")
        sys.exit(1)

    db = MonitorDatabase(db_path)

    if args.stats:
        print_stats(db)
        return

    if args.seen:
        source_type = None if args.seen == 'all' else SourceType(args.seen)
        records = db.get_recent_seen(hours=args.hours, source_type=source_type)
        if not records:
            print(f"No events delivered in the last {args.hours} hours")
            return
        print(f"\n=== {len(records)} events delivered in the last {args.hours} hours ===\n")
        for record in records:
            print(format_seen(record))
        return

    logs = db.get_logs(hours=args.hours, level=args.level, limit=args.limit)

    if not logs:
        print(f"No logs found in the last {args.hours} hours")
        if args.level:
            print(f"(filtered by level: {args.level})")
        return

    print(f"\n=== Last {len(logs)} logs (most recent first) ===\n")

    # Oldest first reads more naturally
    for log in reversed(logs):
        print(format_log(log))

    print(f"\n=== Showing {len(logs)} logs from last {args.hours} hours ===")
    if args.level:
        print(f"(filtered by level: {args.level})")


if __name__ == "__main__":
    main()
