#!/usr/bin/env python3
"""
Solcerer Monitor Service - CLI Entry Point
==========================================

Runs the three polling loops:
    - social: new posts from tracked X handles and live searches (every 60s)
    - price: one-shot market-cap / price alerts (every 60s)
    - whale: large transfers of tracked mints (every 120s)

Usage:
    # Start monitor
    python scripts/run_monitor.py

    # Dry run (console alerts only, no Discord)
    python scripts/run_monitor.py --dry-run

    # Only some loops, visible browser
    python scripts/run_monitor.py --only social,price --headful

    # Test a Discord webhook
    python scripts/run_monitor.py --test-webhook price_alerts
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from solcerer.alerts import AlertCategory, send_test_alert
from solcerer.db import SQLiteLoggingHandler
from solcerer.monitor import MonitorService, parse_only
from config.monitor_settings import (
    DB_PATH,
    LOG_FILE,
    LOG_LEVEL,
    PRICE_POLL_INTERVAL_SECONDS,
    SOCIAL_POLL_INTERVAL_SECONDS,
    WHALE_POLL_INTERVAL_SECONDS,
    WHALE_THRESHOLD_USD,
    get_webhook_urls,
)


def ensure_directories():
    """Ensure required data directories exist."""
    for d in (project_root / "data", project_root / "logs"):
        d.mkdir(parents=True, exist_ok=True)


def setup_logging(log_level: str = LOG_LEVEL, log_file: str = LOG_FILE):
    """Configure logging for the monitor service."""
    ensure_directories()

    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = project_root / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Date-stamped log file (e.g., logs/monitor_2026-01-18.log)
    date_str = datetime.now().strftime("%Y-%m-%d")
    dated_log_file = log_path.parent / f"{log_path.stem}_{date_str}{log_path.suffix}"

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(dated_log_file)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # SQLite handler (persists logs to database, survives container restarts)
    sqlite_handler = SQLiteLoggingHandler(
        db_path=DB_PATH,
        level=getattr(logging, log_level.upper())
    )
    sqlite_handler.setFormatter(formatter)
    root_logger.addHandler(sqlite_handler)

    # Reduce noise from HTTP libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    root_logger.info(f"Logging to: {dated_log_file}")
    root_logger.info("Logs also persisted to SQLite database")


def main():
    parser = argparse.ArgumentParser(
        description='Solcerer Monitor Service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Loops:
  - social: tracked X handles / searches every {SOCIAL_POLL_INTERVAL_SECONDS}s
  - price:  market-cap / price alerts every {PRICE_POLL_INTERVAL_SECONDS}s
  - whale:  transfers >= ${WHALE_THRESHOLD_USD:,} every {WHALE_POLL_INTERVAL_SECONDS}s

Examples:
  python scripts/run_monitor.py                              # Start monitor
  python scripts/run_monitor.py --dry-run                    # Console alerts only
  python scripts/run_monitor.py --only whale                 # Whale loop only
  python scripts/run_monitor.py --test-webhook whale_moves   # Test a webhook
        """
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print alerts to console instead of posting to Discord'
    )

    parser.add_argument(
        '--only',
        default=None,
        help='Comma-separated loops to run: social,price,whale (default: all)'
    )

    parser.add_argument(
        '--headful',
        action='store_true',
        help='Show the scraping browser window'
    )

    parser.add_argument(
        '--test-webhook',
        choices=[c.value for c in AlertCategory],
        help='Send a test alert to one category webhook and exit'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=LOG_LEVEL,
        help=f'Log level (default: {LOG_LEVEL})'
    )

    args = parser.parse_args()

    try:
        only = parse_only(args.only)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.test_webhook:
        print(f"Testing #{args.test_webhook} webhook...")
        success = send_test_alert(AlertCategory(args.test_webhook), dry_run=args.dry_run)
        if success:
            print("Test alert sent successfully!")
            sys.exit(0)
        else:
            print(f"Failed to send test alert. Check DISCORD_WEBHOOK_{args.test_webhook.upper()}.")
            sys.exit(1)

    print("\n" + "=" * 60)
    print("SOLCERER MONITOR SERVICE")
    print("=" * 60)
    print(f"Loops:          {', '.join(only)}")
    print(f"Whale floor:    ${WHALE_THRESHOLD_USD:,}")
    print(f"Headless:       {not args.headful}")
    print(f"Dry run:        {args.dry_run}")
    print(f"Log level:      {args.log_level}")
    print("=" * 60)

    if not args.dry_run:
        webhooks = get_webhook_urls()
        categories = {"social": "tracked_posts", "price": "price_alerts", "whale": "whale_moves"}
        missing = [categories[name] for name in only if not webhooks.get(categories[name])]
        for category in missing:
            print(f"\nWARNING: DISCORD_WEBHOOK_{category.upper()} not set!")
        if missing:
            print("Those loops will skip every tick. Set the variables or use --dry-run.")

    try:
        service = MonitorService(
            dry_run=args.dry_run,
            only=only,
            headless=not args.headful,
        )

        print("\nStarting monitor service...")
        print("Press Ctrl+C to stop\n")

        asyncio.run(service.run())

    except KeyboardInterrupt:
        print("\n\nMonitor stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Monitor service error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
