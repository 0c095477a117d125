"""Transient highlighting of recently changed rows."""

from __future__ import annotations

import logging
import threading
from typing import Callable, FrozenSet, Iterable, List, Optional, Protocol

from app.schemas import DeviceRow, DeviceStatus
from services.snapshot import diff_snapshot

logger = logging.getLogger(__name__)

HIGHLIGHT_TTL_SECONDS = 3.0


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def start_daemon_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class HighlightTracker:
    """Owns the retained snapshot, the highlight set and its single clear timer.

    Every applied snapshot starts a new epoch. The pending clear timer of the
    previous epoch is cancelled, and a clear that still fires late is ignored
    unless its epoch is current, so rapid updates never blank a newer set.
    """

    def __init__(
        self,
        ttl: float = HIGHLIGHT_TTL_SECONDS,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.ttl = ttl
        self._schedule = scheduler or start_daemon_timer
        self._lock = threading.Lock()
        self._rows: List[DeviceStatus] = []
        self._highlighted: FrozenSet[str] = frozenset()
        self._epoch = 0
        self._pending: Optional[TimerHandle] = None
        self._closed = False

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def rows(self) -> List[DeviceStatus]:
        with self._lock:
            return list(self._rows)

    @property
    def highlighted(self) -> FrozenSet[str]:
        with self._lock:
            return self._highlighted

    def apply(self, snapshot: Iterable[DeviceStatus]) -> FrozenSet[str]:
        """Diff ``snapshot`` against the retained one and arm the clear timer."""
        with self._lock:
            if self._closed:
                return frozenset()
            result = diff_snapshot(self._rows, snapshot)
            self._rows = result.rows
            self._highlighted = result.highlighted
            self._epoch += 1
            epoch = self._epoch
            if self._pending is not None:
                self._pending.cancel()
            self._pending = self._schedule(self.ttl, lambda: self._expire(epoch))

        logger.debug(
            "Snapshot applied",
            extra={
                "row_count": len(result.rows),
                "highlight_count": len(result.highlighted),
                "epoch": epoch,
            },
        )
        return result.highlighted

    def view(self) -> List[DeviceRow]:
        with self._lock:
            return [
                DeviceRow(device=row, highlighted=row.id in self._highlighted)
                for row in self._rows
            ]

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

    def _expire(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch:
                return
            self._highlighted = frozenset()
            self._pending = None
