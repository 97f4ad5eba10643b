"""
Application state domains captured by a backup.

Each domain owns its key in the persisted key-value store, its field name in
a snapshot, and the codec used to turn its value into the stored string.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from fitbackup.kv_store import KeyValueStore


class JsonCodec:
    """Values are stored as JSON text."""

    def serialize(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False)

    def deserialize(self, text: str) -> Any:
        return json.loads(text)


JSON_CODEC = JsonCodec()


class StateDomain(Enum):
    CURRENT_USER = ("fitness-app-user", "currentUser")
    USERS = ("fitness-app-users", "users")
    POSTS = ("fitness-app-posts", "posts")
    CHALLENGES = ("fitness-app-challenges", "challenges")
    DAILY_GOALS = ("fitness-app-daily-goals", "dailyGoals")
    CHALLENGE_PARTICIPANTS = (
        "fitness-app-challenge-participants",
        "challengeParticipants",
    )
    EVENTS = ("fitness-app-events", "events")
    EVENT_PARTICIPANTS = ("fitness-app-event-participants", "eventParticipants")
    PRODUCTS = ("fitness-app-products", "products")
    ORDERS = ("fitness-app-orders", "orders")
    GROUPS = ("fitness-app-groups", "groups")
    GROUP_MEMBERS = ("fitness-app-group-members", "groupMembers")

    def __init__(self, store_key: str, snapshot_field: str):
        self.store_key = store_key
        self.snapshot_field = snapshot_field

    @property
    def codec(self) -> JsonCodec:
        return JSON_CODEC


def read_state(store: "KeyValueStore", domain: StateDomain) -> Optional[Any]:
    """Decode a domain's current value, or None when it has never been stored."""
    raw = store.get(domain.store_key)
    if raw is None:
        return None
    return domain.codec.deserialize(raw)


def write_state(store: "KeyValueStore", domain: StateDomain, value: Any) -> None:
    store.set(domain.store_key, domain.codec.serialize(value))
