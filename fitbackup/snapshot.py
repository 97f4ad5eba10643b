"""
Builds named snapshots of the local app state and stores them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from fitbackup.catalog import LocalBackupCatalog
from fitbackup.domains import StateDomain
from fitbackup.models import BackupSnapshot, default_device_info, format_backup_name
from fitbackup.remote import RemoteBackupClient
from fitbackup.retention import RetentionPolicy

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    """
    Captures every state domain and persists it under a minute-granular name.

    The local write is the durability guarantee: it happens first, and its
    failure is the only way `create_snapshot` reports failure. Mirroring to
    the server and retention run afterwards and only log on error.
    """

    def __init__(
        self,
        catalog: LocalBackupCatalog,
        remote: Optional[RemoteBackupClient] = None,
        retention: Optional[RetentionPolicy] = None,
        *,
        device_info: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.catalog = catalog
        self.remote = remote
        self.retention = retention
        self.device_info = device_info or default_device_info()
        self._clock = clock

    def capture(self, now: Optional[datetime] = None) -> BackupSnapshot:
        now = now or self._clock()
        domains: dict[StateDomain, str] = {}
        for domain in StateDomain:
            try:
                value = self.catalog.store.get(domain.store_key)
            except Exception as e:
                logger.warning("Could not read %s, leaving it out: %s", domain.name, e)
                continue
            if value is not None:
                domains[domain] = value
        return BackupSnapshot(
            timestamp=now.astimezone(timezone.utc).isoformat(),
            device_info=self.device_info,
            domains=domains,
            is_admin_backup=True,
        )

    def create_snapshot(self, *, auto: bool = False) -> str:
        """Return the new backup's name, or "" if it could not be stored locally."""
        try:
            now = self._clock()
            snapshot = self.capture(now)
            name = format_backup_name(self.catalog.prefix, now)
            self.catalog.write(name, snapshot)
        except Exception:
            logger.exception("Failed to create backup")
            return ""

        if self.remote is not None and not self.remote.create(name, snapshot, auto=auto):
            logger.warning("Backup %s is stored locally only", name)

        if self.retention is not None:
            try:
                self.retention.enforce()
            except Exception:
                logger.exception("Failed to clean up old backups after %s", name)

        logger.info("Backup created: %s", name)
        return name
