"""
Automatic backups: one on start, one per interval, one on shutdown.
"""

from __future__ import annotations

import atexit
import logging
import threading
from typing import Optional

from fitbackup.snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)

DAILY_SECONDS = 24 * 60 * 60


class BackupScheduler:
    def __init__(self, builder: SnapshotBuilder, interval_seconds: float = DAILY_SECONDS):
        self.builder = builder
        self.interval_seconds = interval_seconds
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._started = False

    @property
    def is_running(self) -> bool:
        return self._started

    def run_backup(self) -> str:
        with self._lock:
            return self.builder.create_snapshot(auto=True)

    def _arm_timer(self) -> None:
        self._timer = threading.Timer(self.interval_seconds, self._on_timer)
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self) -> None:
        if not self._started:
            return
        try:
            self.run_backup()
        finally:
            if self._started:
                self._arm_timer()

    def _on_teardown(self) -> None:
        """
        Take a last backup while the interpreter shuts down.

        Runs inline: new threads cannot be started from atexit handlers.
        Best effort only; the process may be killed before it finishes, and
        its result is not reported anywhere.
        """
        self._started = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.run_backup()

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.run_backup()
        self._arm_timer()
        atexit.register(self._on_teardown)
        logger.info(
            "Automatic backups enabled (every %.0fs)", self.interval_seconds
        )

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        atexit.unregister(self._on_teardown)
        logger.info("Automatic backups disabled")
