"""
HTTP client for the remote backup API.

None of the public methods raise: network errors and non-2xx responses are
logged and turned into False / None / [] for the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fitbackup.models import (
    DEFAULT_BACKUP_PREFIX,
    UNKNOWN_TIMESTAMP,
    BackupInfo,
    BackupSnapshot,
    normalize_backup_name,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _is_success(response: Any) -> bool:
    return 200 <= response.status_code < 300


class RemoteBackupClient:
    def __init__(
        self,
        base_url: str,
        *,
        prefix: str = DEFAULT_BACKUP_PREFIX,
        retry_attempts: int = 3,
        retry_base_delay: float = 0.5,
        timeout: float = REQUEST_TIMEOUT,
        session: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self._sleep = sleep

    def _url(self, path: str) -> str:
        return f"{self.base_url}/backups/{path}"

    def create(
        self, name: str, snapshot: BackupSnapshot, *, auto: bool = False
    ) -> bool:
        body = {
            "name": name,
            "data": snapshot.as_dict(),
            "timestamp": snapshot.timestamp,
            "deviceInfo": snapshot.device_info,
            "isAutoBackup": auto,
        }
        try:
            response = self.session.post(
                self._url("create"), json=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("Could not mirror backup %s to server: %s", name, e)
            return False
        if not _is_success(response):
            logger.warning(
                "Server rejected backup %s with status %s", name, response.status_code
            )
            return False
        return True

    def _list_once(self) -> list[BackupInfo]:
        response = self.session.get(
            self._url("list"),
            params={"_": int(time.time() * 1000)},
            headers=NO_CACHE_HEADERS,
            timeout=self.timeout,
        )
        if not _is_success(response):
            raise requests.HTTPError(f"status {response.status_code}")
        items = response.json()
        if not isinstance(items, list):
            raise ValueError("backup listing is not an array")
        return [
            BackupInfo(
                name=item["name"],
                timestamp=item.get("timestamp") or UNKNOWN_TIMESTAMP,
                is_server_backup=True,
            )
            for item in items
            if isinstance(item, dict) and item.get("name")
        ]

    def try_list(self) -> Optional[list[BackupInfo]]:
        """
        Fetch the remote listing with exponential backoff.

        The first attempt is followed by up to `retry_attempts` retries,
        waiting `retry_base_delay * 2 ** n` before the n-th (0-based) retry.
        Returns None once the budget is spent.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_attempts + 1),
            wait=wait_exponential(multiplier=self.retry_base_delay),
            retry=retry_if_exception_type(
                (requests.RequestException, ValueError, KeyError)
            ),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.INFO),
            retry_error_callback=self._give_up_listing,
        )
        return retrying(self._list_once)

    def _give_up_listing(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "Giving up on backup listing after %d attempts: %s",
            retry_state.attempt_number,
            retry_state.outcome.exception(),
        )
        return None

    def list(self) -> list[BackupInfo]:
        return self.try_list() or []

    def fetch(self, name: str) -> Optional[BackupSnapshot]:
        full_name = normalize_backup_name(name, self.prefix)
        try:
            response = self.session.get(
                self._url(full_name), headers=NO_CACHE_HEADERS, timeout=self.timeout
            )
            if response.status_code == 404:
                logger.info("Backup %s not found on server", full_name)
                return None
            if not _is_success(response):
                logger.warning(
                    "Fetching backup %s failed with status %s",
                    full_name,
                    response.status_code,
                )
                return None
            payload = response.json()
            return BackupSnapshot.from_dict(payload["data"])
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            logger.warning("Could not fetch backup %s from server: %s", full_name, e)
            return None

    def delete(self, name: str) -> bool:
        full_name = normalize_backup_name(name, self.prefix)
        try:
            response = self.session.delete(self._url(full_name), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Could not delete backup %s on server: %s", full_name, e)
            return False
        if not _is_success(response):
            logger.warning(
                "Deleting backup %s on server failed with status %s",
                full_name,
                response.status_code,
            )
            return False
        return True
