"""Unit tests for the snapshot diff."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.schemas import DeviceStatus
from services.snapshot import diff_snapshot, sort_snapshot

_BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _status(
    record_id: str,
    temperature: float = 20.0,
    humidity: float = 50.0,
    state: str = "NORMAL",
    minute: int = 0,
    voltage: str = "12.0",
) -> DeviceStatus:
    created = _BASE + timedelta(minutes=minute)
    return DeviceStatus(
        id=record_id,
        device_Id=f"device_{record_id.zfill(3)}",
        temperature=temperature,
        humidity=humidity,
        status_state=state,
        voltage=voltage,
        createdAt=created,
        updatedAt=created,
    )


def test_first_snapshot_highlights_every_record() -> None:
    snapshot = [_status("1"), _status("2", minute=1), _status("3", minute=2)]

    result = diff_snapshot([], snapshot)

    assert result.highlighted == {"1", "2", "3"}


def test_unchanged_record_is_not_highlighted() -> None:
    previous = [_status("1")]

    result = diff_snapshot(previous, [_status("1")])

    assert result.highlighted == frozenset()


def test_changed_watched_field_is_highlighted() -> None:
    previous = [_status("1")]

    assert diff_snapshot(previous, [_status("1", temperature=21.0)]).highlighted == {"1"}
    assert diff_snapshot(previous, [_status("1", humidity=51.0)]).highlighted == {"1"}
    assert diff_snapshot(previous, [_status("1", state="ERROR")]).highlighted == {"1"}


def test_unwatched_field_change_is_ignored() -> None:
    previous = [_status("1")]

    result = diff_snapshot(previous, [_status("1", voltage="11.2")])

    assert result.highlighted == frozenset()


def test_new_record_is_highlighted_and_removed_record_disappears() -> None:
    previous = [_status("1"), _status("2", minute=1)]
    incoming = [_status("2", minute=1), _status("3", minute=2)]

    result = diff_snapshot(previous, incoming)

    assert result.highlighted == {"3"}
    assert [row.id for row in result.rows] == ["3", "2"]


def test_rows_are_sorted_newest_first_regardless_of_arrival_order() -> None:
    incoming = [_status("a", minute=5), _status("b", minute=9), _status("c", minute=1)]

    rows = diff_snapshot([], incoming).rows

    assert [row.id for row in rows] == ["b", "a", "c"]
    assert all(
        earlier.created_at >= later.created_at for earlier, later in zip(rows, rows[1:])
    )


def test_sort_keeps_arrival_order_for_ties() -> None:
    incoming = [_status("x", minute=3), _status("y", minute=3), _status("z", minute=4)]

    assert [row.id for row in sort_snapshot(incoming)] == ["z", "x", "y"]


def test_diff_does_not_mutate_inputs() -> None:
    previous = [_status("1")]
    incoming = [_status("2", minute=1), _status("1")]

    diff_snapshot(previous, incoming)

    assert [row.id for row in previous] == ["1"]
    assert [row.id for row in incoming] == ["2", "1"]
