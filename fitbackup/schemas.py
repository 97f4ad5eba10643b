"""
Pydantic schemas for the backup API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class CreateBackupPayload(BaseModel):
    # name and data are checked in the route so a missing field is a 400.
    name: Optional[str] = None
    data: Optional[dict] = None
    timestamp: Optional[str] = None
    deviceInfo: Optional[str] = None
    isAutoBackup: bool = False


class CreateBackupResponse(BaseModel):
    name: str
    timestamp: str
    stored: Literal[True] = True


class BackupListItem(BaseModel):
    name: str
    timestamp: str
    isServerBackup: bool = True
    deviceInfo: Optional[str] = None
    isAutoBackup: bool = False
    size: int = 0


class BackupResponse(BaseModel):
    name: str
    data: dict
    timestamp: str
