"""
Server-side backup storage for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from sqlalchemy import JSON, Boolean, Column, Float, Integer, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fitbackup.models import recency_key

MAX_SERVER_BACKUPS = 5


class DbClient(Protocol):
    """Interface for database access."""

    def save_backup(self, record: "BackupRecord") -> "BackupRecord":
        ...

    def list_backups(self) -> list["BackupRecord"]:
        ...

    def get_backup(self, name: str) -> Optional["BackupRecord"]:
        ...

    def delete_backup(self, name: str) -> bool:
        ...


def payload_size(data: dict) -> int:
    return len(json.dumps(data, ensure_ascii=False).encode("utf-8"))


@dataclass
class BackupRecord:
    name: str
    data: dict
    timestamp: str
    device_info: Optional[str] = None
    is_auto_backup: bool = False
    size: int = 0
    created_at: float = field(default_factory=lambda: time.time())

    def __post_init__(self):
        if not self.size:
            self.size = payload_size(self.data)

    def as_listing(self) -> dict:
        return {
            "name": self.name,
            "timestamp": self.timestamp,
            "isServerBackup": True,
            "deviceInfo": self.device_info,
            "isAutoBackup": self.is_auto_backup,
            "size": self.size,
        }


def _newest_first(records: list[BackupRecord]) -> list[BackupRecord]:
    return sorted(
        records,
        key=lambda r: (recency_key(r.timestamp), r.created_at),
        reverse=True,
    )


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self, max_backups: int = MAX_SERVER_BACKUPS):
        self.max_backups = max_backups
        self.backups: Dict[str, BackupRecord] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.backups.clear()

    def save_backup(self, record: BackupRecord) -> BackupRecord:
        # One row per name: a later write replaces the earlier one.
        self.backups[record.name] = record
        for stale in _newest_first(list(self.backups.values()))[self.max_backups :]:
            del self.backups[stale.name]
        return record

    def list_backups(self) -> list[BackupRecord]:
        return _newest_first(list(self.backups.values()))

    def get_backup(self, name: str) -> Optional[BackupRecord]:
        return self.backups.get(name)

    def delete_backup(self, name: str) -> bool:
        return self.backups.pop(name, None) is not None


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str, max_backups: int = MAX_SERVER_BACKUPS):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.max_backups = max_backups
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "BackupRow") -> BackupRecord:
        return BackupRecord(
            name=row.name,
            data=row.data,
            timestamp=row.timestamp,
            device_info=row.device_info,
            is_auto_backup=row.is_auto_backup,
            size=row.size,
            created_at=row.created_at,
        )

    def save_backup(self, record: BackupRecord) -> BackupRecord:
        with self.Session() as session:
            row = session.get(BackupRow, record.name)
            if row:
                row.data = record.data
                row.timestamp = record.timestamp
                row.device_info = record.device_info
                row.is_auto_backup = record.is_auto_backup
                row.size = record.size
                row.created_at = record.created_at
            else:
                session.add(
                    BackupRow(
                        name=record.name,
                        data=record.data,
                        timestamp=record.timestamp,
                        device_info=record.device_info,
                        is_auto_backup=record.is_auto_backup,
                        size=record.size,
                        created_at=record.created_at,
                    )
                )
            session.flush()

            rows = session.execute(select(BackupRow)).scalars().all()
            keep = {
                r.name
                for r in _newest_first([self._to_record(r) for r in rows])[
                    : self.max_backups
                ]
            }
            for r in rows:
                if r.name not in keep:
                    session.delete(r)
            session.commit()
        return record

    def list_backups(self) -> list[BackupRecord]:
        with self.Session() as session:
            rows = session.execute(select(BackupRow)).scalars().all()
            return _newest_first([self._to_record(row) for row in rows])

    def get_backup(self, name: str) -> Optional[BackupRecord]:
        with self.Session() as session:
            row = session.get(BackupRow, name)
            return self._to_record(row) if row else None

    def delete_backup(self, name: str) -> bool:
        with self.Session() as session:
            row = session.get(BackupRow, name)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


Base = declarative_base()


class BackupRow(Base):
    __tablename__ = "backups"

    name = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    timestamp = Column(String, nullable=False, index=True)
    device_info = Column(String, nullable=True)
    is_auto_backup = Column(Boolean, nullable=False, default=False)
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(Float, nullable=False)
