"""
Caps the number of backups kept in the local store.
"""

from __future__ import annotations

import logging

from fitbackup.catalog import LocalBackupCatalog
from fitbackup.models import recency_key

logger = logging.getLogger(__name__)

MAX_LOCAL_BACKUPS = 5


class RetentionPolicy:
    def __init__(self, catalog: LocalBackupCatalog, max_backups: int = MAX_LOCAL_BACKUPS):
        self.catalog = catalog
        self.max_backups = max_backups

    def enforce(self) -> list[str]:
        """
        Remove local backups beyond the `max_backups` most recent.

        Recency is the listing order: newest timestamp first, with later
        enumerated entries winning ties. Unreadable entries count as oldest.
        Returns the evicted names.
        """
        entries = list(enumerate(self.catalog.entries(include_unreadable=True)))
        if len(entries) <= self.max_backups:
            return []

        newest_first = sorted(
            entries,
            key=lambda pair: (recency_key(pair[1].timestamp), pair[0]),
            reverse=True,
        )
        evicted: list[str] = []
        for _, info in newest_first[self.max_backups :]:
            self.catalog.remove(info.name)
            evicted.append(info.name)
            logger.info("Removed old backup %s", info.name)
        return evicted
