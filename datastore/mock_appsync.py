from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from app.schemas import CreateDeviceStatusInput, DeviceStatus
from settings import get_settings

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[List[DeviceStatus]], None]
Unsubscribe = Callable[[], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockDeviceStatusTable:
    """In-process stand-in for the managed ``DeviceStatus`` model store.

    Observers receive the complete current item list on subscription and after
    every write, in write order, mirroring an observe-query subscription.
    """

    def __init__(
        self,
        name: str,
        persistence_path: Optional[Path] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._items: Dict[str, DeviceStatus] = {}
        self._listeners: Dict[int, SnapshotListener] = {}
        self._next_listener_id = 0
        self._clock = clock
        # Reentrant: listeners may read the table while a write is notifying.
        self._lock = RLock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def create(self, item: CreateDeviceStatusInput) -> DeviceStatus:
        with self._lock:
            now = self._clock()
            record = DeviceStatus(
                id=str(uuid4()),
                createdAt=now,
                updatedAt=now,
                **item.model_dump(),
            )
            self._items[record.id] = record
            self._persist()
            self._notify()
            return record.model_copy(deep=True)

    def get(self, key: str) -> Optional[DeviceStatus]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def list(self) -> List[DeviceStatus]:
        """Return deep copies of all stored records."""

        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]

    def observe(self, listener: SnapshotListener) -> Unsubscribe:
        with self._lock:
            listener_id = self._next_listener_id
            self._next_listener_id += 1
            self._listeners[listener_id] = listener
            listener(self.list())

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _notify(self) -> None:
        for listener_id, listener in list(self._listeners.items()):
            try:
                listener(self.list())
            except Exception:  # noqa: BLE001 - one broken subscriber must not fail the write
                logger.exception(
                    "Snapshot listener failed",
                    extra={"session_id": listener_id},
                )

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {key: item.to_graphql() for key, item in self._items.items()}
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for key, payload in data.items():
            self._items[key] = DeviceStatus.model_validate(payload)


@lru_cache
def build_default_table(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MockDeviceStatusTable:
    settings = get_settings()
    table_path = settings.table_persistence_path if path is None else path
    persistence = Path(table_path) if table_path else None
    return MockDeviceStatusTable(name=name or "DeviceStatus", persistence_path=persistence)
