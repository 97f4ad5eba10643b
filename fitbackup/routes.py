"""
HTTP routes for the backup API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from fitbackup.db import BackupRecord, DbClient
from fitbackup.dependencies import get_db_client
from fitbackup.models import utc_now_iso
from fitbackup.schemas import (
    BackupListItem,
    BackupResponse,
    CreateBackupPayload,
    CreateBackupResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Declared before /backups/{name} so "list" is not taken as a backup name.
@router.get("/backups/list", response_model=list[BackupListItem])
def list_backups(response: Response, db: DbClient = Depends(get_db_client)):
    response.headers["Cache-Control"] = "no-store"
    return [BackupListItem(**record.as_listing()) for record in db.list_backups()]


@router.post("/backups/create", response_model=CreateBackupResponse, status_code=201)
def create_backup(payload: CreateBackupPayload, db: DbClient = Depends(get_db_client)):
    """
    Store a backup, replacing any existing one with the same name.
    """
    if not payload.name or payload.data is None:
        raise HTTPException(status_code=400, detail="Backup name and data are required")
    record = BackupRecord(
        name=payload.name,
        data=payload.data,
        timestamp=payload.timestamp or utc_now_iso(),
        device_info=payload.deviceInfo,
        is_auto_backup=payload.isAutoBackup,
    )
    db.save_backup(record)
    logger.info("Stored backup %s (%d bytes)", record.name, record.size)
    return CreateBackupResponse(name=record.name, timestamp=record.timestamp)


@router.get("/backups/{name}", response_model=BackupResponse)
def get_backup(name: str, db: DbClient = Depends(get_db_client)):
    record = db.get_backup(name)
    if not record:
        raise HTTPException(status_code=404, detail="Backup not found")
    return BackupResponse(name=record.name, data=record.data, timestamp=record.timestamp)


@router.delete("/backups/{name}", status_code=204)
def delete_backup(name: str, db: DbClient = Depends(get_db_client)):
    if not db.delete_backup(name):
        raise HTTPException(status_code=404, detail="Backup not found")
    logger.info("Deleted backup %s", name)
    return Response(status_code=204)
