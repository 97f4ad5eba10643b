"""
Dependency wiring for the API server and the sync client.

Nothing here is a module-level singleton: the server builds its DB client in
`create_app` and keeps it on `app.state`; the client side is assembled once
by `build_backup_service` and passed around by reference.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Request

from fitbackup.catalog import LocalBackupCatalog
from fitbackup.config import Settings, get_settings
from fitbackup.db import DbClient, InMemoryDbClient, PostgresDbClient
from fitbackup.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from fitbackup.reconcile import Reconciler
from fitbackup.remote import RemoteBackupClient
from fitbackup.restore import BackupRestorer
from fitbackup.retention import RetentionPolicy
from fitbackup.scheduler import BackupScheduler
from fitbackup.service import BackupService
from fitbackup.snapshot import SnapshotBuilder


def build_db_client(settings: Optional[Settings] = None) -> DbClient:
    settings = settings or get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        return InMemoryDbClient(max_backups=settings.server_max_backups)
    return PostgresDbClient(settings.database_url, max_backups=settings.server_max_backups)


def get_db_client(request: Request) -> DbClient:
    """FastAPI dependency returning the DB client owned by the running app."""
    return request.app.state.db


def build_state_store(settings: Optional[Settings] = None) -> KeyValueStore:
    settings = settings or get_settings()
    if settings.redis_url:
        return RedisKeyValueStore(url=settings.redis_url, hash_key=settings.redis_state_key)
    return InMemoryKeyValueStore()


def build_remote_client(
    settings: Optional[Settings] = None, session: Any = None
) -> RemoteBackupClient:
    settings = settings or get_settings()
    return RemoteBackupClient(
        settings.backup_api_url,
        prefix=settings.backup_prefix,
        retry_attempts=settings.list_retry_attempts,
        retry_base_delay=settings.list_retry_base_delay_seconds,
        timeout=settings.request_timeout_seconds,
        session=session,
    )


def build_backup_service(
    settings: Optional[Settings] = None,
    *,
    store: Optional[KeyValueStore] = None,
    remote: Optional[RemoteBackupClient] = None,
) -> BackupService:
    settings = settings or get_settings()
    catalog = LocalBackupCatalog(store or build_state_store(settings), settings.backup_prefix)
    remote = remote or build_remote_client(settings)
    retention = RetentionPolicy(catalog, settings.local_max_backups)
    builder = SnapshotBuilder(
        catalog, remote, retention, device_info=settings.device_info
    )
    return BackupService(
        catalog=catalog,
        builder=builder,
        restorer=BackupRestorer(catalog, remote, retention),
        reconciler=Reconciler(
            catalog, remote, prune_on_remote_failure=settings.prune_on_remote_failure
        ),
        scheduler=BackupScheduler(builder, settings.backup_interval_seconds),
        remote=remote,
    )
