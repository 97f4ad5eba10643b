"""
Restores app state from a named backup, local copy first.
"""

from __future__ import annotations

import logging
from typing import Optional

from fitbackup.catalog import LocalBackupCatalog
from fitbackup.domains import StateDomain
from fitbackup.models import normalize_backup_name
from fitbackup.remote import RemoteBackupClient
from fitbackup.retention import RetentionPolicy

logger = logging.getLogger(__name__)


class BackupRestorer:
    def __init__(
        self,
        catalog: LocalBackupCatalog,
        remote: Optional[RemoteBackupClient] = None,
        retention: Optional[RetentionPolicy] = None,
    ):
        self.catalog = catalog
        self.remote = remote
        self.retention = retention

    def restore(self, name: str) -> bool:
        """
        Overwrite each domain present in the backup; absent domains are kept.

        Not transactional: an error part-way through leaves the writes that
        already happened in place and returns False.
        """
        full_name = normalize_backup_name(name, self.catalog.prefix)
        from_server = False
        try:
            snapshot = self.catalog.read(full_name)
            if snapshot is None and self.remote is not None:
                snapshot = self.remote.fetch(full_name)
                from_server = snapshot is not None
            if snapshot is None:
                logger.error("Backup %s not found", full_name)
                return False

            for domain in StateDomain:
                value = snapshot.domains.get(domain)
                if value:
                    self.catalog.store.set(domain.store_key, value)

            if from_server:
                self.catalog.write(full_name, snapshot)
        except Exception:
            logger.exception("Failed to restore backup %s", full_name)
            return False

        # The local copy written back above counts against the local cap.
        if from_server and self.retention is not None:
            try:
                self.retention.enforce()
            except Exception:
                logger.exception("Failed to clean up old backups after restoring %s", full_name)

        logger.info("Backup restored: %s", full_name)
        return True
