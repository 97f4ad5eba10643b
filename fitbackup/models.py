"""
Backup data model: names, snapshots and listing entries.
"""

from __future__ import annotations

import math
import platform
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from fitbackup.domains import StateDomain

DEFAULT_BACKUP_PREFIX = "fitness-app-backup"
UNKNOWN_TIMESTAMP = "unknown"


def format_backup_name(prefix: str, when: datetime) -> str:
    """`<prefix>-YYYY-MM-DD_HH-mm` in the clock's local time."""
    return f"{prefix}-{when:%Y-%m-%d_%H-%M}"


def normalize_backup_name(name: str, prefix: str = DEFAULT_BACKUP_PREFIX) -> str:
    """
    Return the full backup name for either form of a name.

    `fitness-app-backup-2024-01-01_00-00` and `2024-01-01_00-00` both resolve
    to the prefixed form.
    """
    if name.startswith(prefix):
        return name
    return f"{prefix}-{name}"


def parse_timestamp(value: Optional[str]) -> Optional[float]:
    """Parse an ISO-8601 timestamp to epoch seconds, or None if unparsable."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.timestamp()


def recency_key(timestamp: Optional[str]) -> float:
    """Sort key for newest-first ordering; unparsable timestamps sort last."""
    parsed = parse_timestamp(timestamp)
    return parsed if parsed is not None else -math.inf


def default_device_info() -> str:
    return (
        f"python/{platform.python_version()} "
        f"({platform.system()} {platform.release()}; {platform.node()})"
    )


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class BackupSnapshot:
    """Point-in-time capture of every state domain, as serialized strings."""

    timestamp: str
    device_info: str = ""
    domains: dict[StateDomain, str] = field(default_factory=dict)
    is_admin_backup: bool = True

    def as_dict(self) -> dict:
        payload: dict = {
            "timestamp": self.timestamp,
            "deviceInfo": self.device_info,
            "isAdminBackup": self.is_admin_backup,
        }
        for domain, value in self.domains.items():
            payload[domain.snapshot_field] = value
        return payload

    @classmethod
    def from_dict(cls, payload: dict) -> "BackupSnapshot":
        if not isinstance(payload, dict):
            raise ValueError("backup snapshot must be a JSON object")
        domains: dict[StateDomain, str] = {}
        for domain in StateDomain:
            value = payload.get(domain.snapshot_field)
            # Empty and null fields are treated as absent.
            if not value:
                continue
            if isinstance(value, str):
                domains[domain] = value
            else:
                # Rows posted by other clients may embed the decoded value.
                domains[domain] = domain.codec.serialize(value)
        return cls(
            timestamp=payload.get("timestamp") or UNKNOWN_TIMESTAMP,
            device_info=payload.get("deviceInfo") or "",
            domains=domains,
            is_admin_backup=bool(payload.get("isAdminBackup", False)),
        )


@dataclass
class BackupInfo:
    """Listing entry; a backup may be known locally, remotely, or both."""

    name: str
    timestamp: str
    is_local_backup: bool = False
    is_server_backup: bool = False

    def as_dict(self) -> dict:
        payload = {"name": self.name, "timestamp": self.timestamp}
        if self.is_local_backup:
            payload["isLocalBackup"] = True
        if self.is_server_backup:
            payload["isServerBackup"] = True
        return payload
