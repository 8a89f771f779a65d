#!/usr/bin/env python
"""
Expired Session Purge Job

Deletes every session whose expiry has passed. Validation already rejects
expired sessions on its own, so this only reclaims storage; schedule it
(cron, systemd timer) as often as you like.

Usage:
    python scripts/purge_expired_sessions.py [--as-of "YYYY-MM-DD HH:MM:SS"] [--dry-run]

Options:
    --as-of: Treat this naive UTC time as "now" (default: current UTC time)
    --dry-run: Report how many sessions would be deleted without deleting them
"""
import sys
from pathlib import Path
from datetime import datetime
from argparse import ArgumentParser

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from finance_tracker.db.core import get_db, utcnow
from finance_tracker.crud.crud_session import purge_expired_sessions, count_expired_sessions
from finance_tracker.logging_config import setup_logging


def run_purge(as_of: datetime, dry_run: bool = False) -> int:
    """
    Purge (or count, on a dry run) sessions that expired at or before ``as_of``.
    """
    logger = setup_logging()

    print("=" * 60)
    print(f"Running Session Purge Job - {as_of:%Y-%m-%d %H:%M:%S} UTC")
    print("=" * 60)

    db = next(get_db())

    try:
        if dry_run:
            count = count_expired_sessions(db, now=as_of)
            print(f"Dry run: {count} expired session(s) would be deleted")
            return count

        count = purge_expired_sessions(db, now=as_of)
        print(f"Deleted {count} expired session(s)")
        return count

    except Exception as e:
        logger.error(f"Session purge failed: {e}")
        raise
    finally:
        db.close()


def main():
    parser = ArgumentParser(description="Delete expired sessions")

    parser.add_argument(
        '--as-of',
        type=str,
        help='Reference time in UTC (YYYY-MM-DD HH:MM:SS), defaults to now'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Only count the sessions that would be deleted'
    )

    args = parser.parse_args()

    if args.as_of:
        try:
            as_of = datetime.strptime(args.as_of, '%Y-%m-%d %H:%M:%S')
        except ValueError:
            print(f"Invalid time format: {args.as_of}. Use YYYY-MM-DD HH:MM:SS")
            sys.exit(1)
    else:
        as_of = utcnow()

    run_purge(as_of=as_of, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
