"""Diffing of full live-query snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from app.schemas import DeviceStatus

WATCHED_FIELDS = ("temperature", "humidity", "status_state")


@dataclass(frozen=True)
class SnapshotDiff:
    """Sorted rows of the new snapshot and the ids to flag as recently changed."""

    rows: List[DeviceStatus] = field(default_factory=list)
    highlighted: FrozenSet[str] = frozenset()


def sort_snapshot(records: Iterable[DeviceStatus]) -> List[DeviceStatus]:
    """Newest first by creation time; ties keep their arrival order."""
    return sorted(records, key=lambda record: record.created_at, reverse=True)


def _watched_values(record: DeviceStatus) -> Tuple[object, ...]:
    return tuple(getattr(record, name) for name in WATCHED_FIELDS)


def diff_snapshot(
    previous: Sequence[DeviceStatus], incoming: Iterable[DeviceStatus]
) -> SnapshotDiff:
    """Compare ``incoming`` against the previously retained snapshot.

    On the first snapshot (``previous`` empty) every row is flagged so the
    freshly loaded table draws attention. Afterwards a row is flagged when its
    id is new or one of ``WATCHED_FIELDS`` differs from every previous record
    with that id. Records dropped from the snapshot are simply gone.
    """
    rows = sort_snapshot(incoming)
    if not previous:
        return SnapshotDiff(rows=rows, highlighted=frozenset(row.id for row in rows))

    known: Dict[str, set[Tuple[object, ...]]] = {}
    for record in previous:
        known.setdefault(record.id, set()).add(_watched_values(record))

    highlighted = frozenset(
        row.id for row in rows if _watched_values(row) not in known.get(row.id, set())
    )
    return SnapshotDiff(rows=rows, highlighted=highlighted)
