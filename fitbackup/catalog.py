"""
Backup entries kept in the persisted key-value store.

Backups share the store with ordinary app-state keys and are told apart by
the backup prefix.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fitbackup.kv_store import KeyValueStore
from fitbackup.models import (
    DEFAULT_BACKUP_PREFIX,
    UNKNOWN_TIMESTAMP,
    BackupInfo,
    BackupSnapshot,
)

logger = logging.getLogger(__name__)


class LocalBackupCatalog:
    def __init__(self, store: KeyValueStore, prefix: str = DEFAULT_BACKUP_PREFIX):
        self.store = store
        self.prefix = prefix

    def is_backup_key(self, key: str) -> bool:
        return key.startswith(self.prefix)

    def entries(self, *, include_unreadable: bool = False) -> list[BackupInfo]:
        """
        Local backups in store enumeration order.

        Entries that are empty or not valid JSON are logged and skipped,
        unless `include_unreadable` is set; they are then listed with an
        unknown timestamp so cleanup and retention can remove them.
        """
        backups: list[BackupInfo] = []
        for key in self.store.keys():
            if not self.is_backup_key(key):
                continue
            raw = self.store.get(key)
            if raw is None:
                continue
            try:
                if not raw:
                    raise ValueError("empty payload")
                payload = json.loads(raw)
            except ValueError as e:
                logger.warning("Unreadable backup %s: %s", key, e)
                if include_unreadable:
                    backups.append(
                        BackupInfo(
                            name=key, timestamp=UNKNOWN_TIMESTAMP, is_local_backup=True
                        )
                    )
                continue
            timestamp = None
            if isinstance(payload, dict):
                timestamp = payload.get("timestamp")
            backups.append(
                BackupInfo(
                    name=key,
                    timestamp=timestamp or UNKNOWN_TIMESTAMP,
                    is_local_backup=True,
                )
            )
        return backups

    def read(self, name: str) -> Optional[BackupSnapshot]:
        """Return the stored snapshot, or None. Raises ValueError if malformed."""
        raw = self.store.get(name)
        if not raw:
            return None
        return BackupSnapshot.from_dict(json.loads(raw))

    def write(self, name: str, snapshot: BackupSnapshot) -> None:
        self.store.set(name, json.dumps(snapshot.as_dict(), ensure_ascii=False))

    def remove(self, name: str) -> None:
        self.store.remove(name)
