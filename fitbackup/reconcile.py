"""
Merges local and server backup listings into one newest-first view.
"""

from __future__ import annotations

import logging
from typing import Optional

from fitbackup.catalog import LocalBackupCatalog
from fitbackup.models import BackupInfo, recency_key
from fitbackup.remote import RemoteBackupClient

logger = logging.getLogger(__name__)


class Reconciler:
    """
    Every listing also prunes local backups the server does not know about.

    When the server listing cannot be fetched at all, pruning is skipped
    unless `prune_on_remote_failure` is set, in which case the unreachable
    server counts as an empty one.
    """

    def __init__(
        self,
        catalog: LocalBackupCatalog,
        remote: Optional[RemoteBackupClient] = None,
        *,
        prune_on_remote_failure: bool = False,
    ):
        self.catalog = catalog
        self.remote = remote
        self.prune_on_remote_failure = prune_on_remote_failure

    def _prune_unsynced(
        self, local: list[BackupInfo], remote_names: set[str]
    ) -> list[BackupInfo]:
        kept: list[BackupInfo] = []
        for info in local:
            if info.name in remote_names:
                kept.append(info)
                continue
            try:
                self.catalog.remove(info.name)
                logger.info("Removed unsynced local backup %s", info.name)
            except Exception as e:
                logger.warning("Could not remove unsynced backup %s: %s", info.name, e)
                kept.append(info)
        return kept

    def list_backups(self) -> list[BackupInfo]:
        remote = self.remote.try_list() if self.remote is not None else None
        local = self.catalog.entries()

        if remote is None and self.prune_on_remote_failure:
            remote = []
        if remote is not None:
            remote_names = {info.name for info in remote}
            # Unreadable entries are never listed, only cleaned up.
            readable = {info.name for info in local}
            unreadable = [
                info
                for info in self.catalog.entries(include_unreadable=True)
                if info.name not in readable
            ]
            self._prune_unsynced(unreadable, remote_names)
            local = self._prune_unsynced(local, remote_names)

        merged = list(local)
        local_names = {info.name for info in local}
        for info in remote or []:
            if info.name not in local_names:
                merged.append(info)

        merged.sort(key=lambda info: recency_key(info.timestamp), reverse=True)
        return merged
