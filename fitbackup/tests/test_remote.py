import unittest
from unittest.mock import MagicMock

import requests
from fastapi.testclient import TestClient

from fitbackup.app import create_app
from fitbackup.config import Settings
from fitbackup.db import BackupRecord, InMemoryDbClient
from fitbackup.domains import StateDomain
from fitbackup.models import BackupSnapshot
from fitbackup.remote import RemoteBackupClient


def _response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


class RemoteBackupClientServerTests(unittest.TestCase):
    """Runs the client against the real API app through TestClient."""

    def setUp(self):
        self.db = InMemoryDbClient()
        session = TestClient(create_app(Settings(use_in_memory_backends=True), db=self.db))
        self.client = RemoteBackupClient(
            "http://testserver/api", session=session, sleep=lambda _: None
        )

    def test_create_then_list_and_fetch(self):
        snapshot = BackupSnapshot(
            timestamp="2024-01-01T00:00:00+00:00",
            device_info="tests",
            domains={StateDomain.POSTS: '[{"id": 1}]'},
        )
        self.assertTrue(
            self.client.create("fitness-app-backup-2024-01-01_00-00", snapshot, auto=True)
        )
        self.assertTrue(self.db.get_backup("fitness-app-backup-2024-01-01_00-00").is_auto_backup)

        listing = self.client.list()
        self.assertEqual(len(listing), 1)
        self.assertEqual(listing[0].name, "fitness-app-backup-2024-01-01_00-00")
        self.assertTrue(listing[0].is_server_backup)
        self.assertFalse(listing[0].is_local_backup)

        fetched = self.client.fetch("fitness-app-backup-2024-01-01_00-00")
        self.assertEqual(fetched.domains, {StateDomain.POSTS: '[{"id": 1}]'})
        self.assertTrue(fetched.is_admin_backup)

    def test_fetch_with_and_without_prefix_hits_same_row(self):
        self.db.save_backup(
            BackupRecord(
                name="fitness-app-backup-2024-01-01_00-00",
                data={"timestamp": "2024-01-01T00:00:00+00:00", "groups": "[7]"},
                timestamp="2024-01-01T00:00:00+00:00",
            )
        )
        with_prefix = self.client.fetch("fitness-app-backup-2024-01-01_00-00")
        without_prefix = self.client.fetch("2024-01-01_00-00")
        self.assertIsNotNone(with_prefix)
        self.assertEqual(with_prefix, without_prefix)
        self.assertEqual(without_prefix.domains[StateDomain.GROUPS], "[7]")

    def test_fetch_missing_returns_none(self):
        self.assertIsNone(self.client.fetch("fitness-app-backup-1999-01-01_00-00"))

    def test_delete(self):
        self.db.save_backup(
            BackupRecord("fitness-app-backup-2024-01-01_00-00", {}, "2024-01-01T00:00:00+00:00")
        )
        self.assertTrue(self.client.delete("2024-01-01_00-00"))
        self.assertFalse(self.client.delete("2024-01-01_00-00"))


class RemoteBackupClientFailureTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.sleeps = []
        self.client = RemoteBackupClient(
            "http://backups.test/api",
            session=self.session,
            retry_attempts=3,
            retry_base_delay=0.5,
            sleep=self.sleeps.append,
        )

    def test_list_retries_with_exponential_backoff_then_gives_up(self):
        self.session.get.side_effect = requests.ConnectionError("down")

        self.assertEqual(self.client.list(), [])
        self.assertEqual(self.session.get.call_count, 4)
        self.assertEqual(self.sleeps, [0.5, 1.0, 2.0])

    def test_try_list_distinguishes_failure_from_empty(self):
        self.session.get.return_value = _response(500)
        self.assertIsNone(self.client.try_list())

        self.session.get.return_value = _response(200, [])
        self.assertEqual(self.client.try_list(), [])

    def test_list_recovers_after_transient_failure(self):
        self.session.get.side_effect = [
            _response(503),
            _response(200, [{"name": "b1", "timestamp": "2024-01-01T00:00:00Z"}]),
        ]
        listing = self.client.list()
        self.assertEqual([info.name for info in listing], ["b1"])
        self.assertEqual(self.sleeps, [0.5])

    def test_list_sends_cache_busting_headers(self):
        self.session.get.return_value = _response(200, [])
        self.client.list()
        _, kwargs = self.session.get.call_args
        self.assertIn("no-cache", kwargs["headers"]["Cache-Control"])
        self.assertEqual(kwargs["headers"]["Pragma"], "no-cache")
        self.assertIn("_", kwargs["params"])

    def test_create_failures_return_false(self):
        snapshot = BackupSnapshot(timestamp="2024-01-01T00:00:00+00:00")
        self.session.post.return_value = _response(500)
        self.assertFalse(self.client.create("b1", snapshot))

        self.session.post.side_effect = requests.Timeout("slow")
        self.assertFalse(self.client.create("b1", snapshot))

    def test_fetch_and_delete_failures_do_not_raise(self):
        self.session.get.side_effect = requests.ConnectionError("down")
        self.session.delete.side_effect = requests.ConnectionError("down")
        self.assertIsNone(self.client.fetch("2024-01-01_00-00"))
        self.assertFalse(self.client.delete("2024-01-01_00-00"))

    def test_fetch_normalizes_name_in_url(self):
        self.session.get.return_value = _response(404)
        self.client.fetch("2024-01-01_00-00")
        url = self.session.get.call_args[0][0]
        self.assertEqual(
            url, "http://backups.test/api/backups/fitness-app-backup-2024-01-01_00-00"
        )


if __name__ == "__main__":
    unittest.main()
