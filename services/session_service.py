"""
Session Service
Persists in-progress wizard state so it can be resumed, and expires it
"""

import os
import json
import time
from typing import Callable, Dict, List, Optional

from models.database import PersistenceError
from services.monitoring_service import logger

SESSION_TIMEOUT_MS = int(os.getenv("SESSION_TIMEOUT_MS", "300000"))

# Nested payloads merged one level deep on save
MERGED_FIELDS = ("addressData", "scheduleData")


def now_ms() -> int:
    return int(time.time() * 1000)


def merge_record(record: Dict, partial: Dict) -> Dict:
    """Field-by-field merge of a partial update over a session record"""
    merged = dict(record)
    for key, value in partial.items():
        if key in MERGED_FIELDS and isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class SessionService:
    """
    One session record per wizard kind, stored as JSON under ``{kind}_session``.

    Storage failures are logged and swallowed: the caller's in-memory state
    stays authoritative and only cross-restart resume is lost.
    """

    def __init__(self, store, wizard_kind: str, clock: Callable[[], int] = now_ms,
                 timeout_ms: int = SESSION_TIMEOUT_MS):
        self.store = store
        self.wizard_kind = wizard_kind
        self.clock = clock
        self.timeout_ms = timeout_ms

    @property
    def session_key(self) -> str:
        return f"{self.wizard_kind}_session"

    @property
    def container_times_key(self) -> str:
        return f"{self.wizard_kind}_container_times"

    def save(self, partial: Dict) -> Optional[Dict]:
        """Merge ``partial`` over the stored record and stamp it; returns the written record"""
        record = merge_record(self.load() or {"wizardKind": self.wizard_kind}, partial)

        previous = record.get("lastUpdateTimestamp") or 0
        record["wizardKind"] = self.wizard_kind
        record["lastUpdateTimestamp"] = max(self.clock(), previous)

        try:
            self.store.set(self.session_key, json.dumps(record))
        except (PersistenceError, TypeError, ValueError) as e:
            logger.error(f"[Session] Failed to save {self.session_key}: {e}")
            return None
        return record

    def load(self) -> Optional[Dict]:
        try:
            raw = self.store.get(self.session_key)
            return json.loads(raw) if raw else None
        except (PersistenceError, ValueError) as e:
            logger.error(f"[Session] Failed to load {self.session_key}: {e}")
            return None

    def clear(self):
        try:
            self.store.remove(self.session_key)
        except PersistenceError as e:
            logger.error(f"[Session] Failed to clear {self.session_key}: {e}")

    def last_update(self) -> Optional[int]:
        record = self.load()
        return record.get("lastUpdateTimestamp") if record else None

    def check_and_clear_expired(self) -> bool:
        """Clear the session when it is older than the timeout; exactly the timeout is still fresh"""
        last_update = self.last_update()
        if not last_update:
            return False

        age_ms = self.clock() - last_update
        if age_ms > self.timeout_ms:
            logger.info(f"[Session] {self.session_key} expired after {age_ms} ms, clearing")
            self.clear()
            self.clear_container_times()
            return True
        return False

    def save_container_times(self, containers: List[Dict]):
        snapshot = {"containers": containers, "lastUpdateTimestamp": self.clock()}
        try:
            self.store.set(self.container_times_key, json.dumps(snapshot))
        except (PersistenceError, TypeError, ValueError) as e:
            logger.error(f"[Session] Failed to save {self.container_times_key}: {e}")

    def load_container_times(self) -> Optional[Dict]:
        try:
            raw = self.store.get(self.container_times_key)
            return json.loads(raw) if raw else None
        except (PersistenceError, ValueError) as e:
            logger.error(f"[Session] Failed to load {self.container_times_key}: {e}")
            return None

    def clear_container_times(self):
        try:
            self.store.remove(self.container_times_key)
        except PersistenceError as e:
            logger.error(f"[Session] Failed to clear {self.container_times_key}: {e}")
