"""
Backup actions exposed to the admin panel.
"""

from __future__ import annotations

import logging
from typing import Optional

from fitbackup.catalog import LocalBackupCatalog
from fitbackup.models import BackupInfo, normalize_backup_name
from fitbackup.reconcile import Reconciler
from fitbackup.remote import RemoteBackupClient
from fitbackup.restore import BackupRestorer
from fitbackup.scheduler import BackupScheduler
from fitbackup.snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)


class BackupService:
    def __init__(
        self,
        catalog: LocalBackupCatalog,
        builder: SnapshotBuilder,
        restorer: BackupRestorer,
        reconciler: Reconciler,
        scheduler: BackupScheduler,
        remote: Optional[RemoteBackupClient] = None,
    ):
        self.catalog = catalog
        self.builder = builder
        self.restorer = restorer
        self.reconciler = reconciler
        self.scheduler = scheduler
        self.remote = remote

    def create_backup(self) -> str:
        return self.builder.create_snapshot(auto=False)

    def list_backups(self) -> list[BackupInfo]:
        return self.reconciler.list_backups()

    def restore_backup(self, name: str) -> bool:
        return self.restorer.restore(name)

    def delete_backup(self, name: str) -> bool:
        """Delete locally and on the server; a server failure is only logged."""
        full_name = normalize_backup_name(name, self.catalog.prefix)
        try:
            self.catalog.remove(full_name)
        except Exception:
            logger.exception("Failed to delete backup %s", full_name)
            return False

        if self.remote is not None and not self.remote.delete(full_name):
            logger.warning("Backup %s was deleted locally only", full_name)
        logger.info("Backup deleted: %s", full_name)
        return True

    def start_auto_backups(self) -> None:
        self.scheduler.start()

    def stop_auto_backups(self) -> None:
        self.scheduler.stop()
