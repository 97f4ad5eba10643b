"""
Daemon that keeps automatic backups of the app state running.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fitbackup.config import get_settings
from fitbackup.dependencies import build_backup_service

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Fitness app auto-backup daemon")
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Override the backup API base URL",
    )
    parser.add_argument(
        "--interval-seconds",
        type=float,
        default=None,
        help="Seconds between automatic backups",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Create a single backup and exit",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_settings()
    overrides = {}
    if args.api_url:
        overrides["backup_api_url"] = args.api_url
    if args.interval_seconds:
        overrides["backup_interval_seconds"] = args.interval_seconds
    if overrides:
        settings = settings.model_copy(update=overrides)

    service = build_backup_service(settings)

    if args.once:
        name = service.create_backup()
        if not name:
            logger.error("Backup failed")
            return 1
        logger.info("Created %s", name)
        return 0

    service.start_auto_backups()
    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
