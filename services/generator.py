"""Synthetic device reading generation."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from models.records import (
    DEVICE_COUNT,
    HUMIDITY_RANGE,
    TEMPERATURE_RANGE,
    VOLTAGE_RANGE,
    DeviceReading,
)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class ReadingGenerator:
    """Draws independent uniform readings; ``rng`` and ``clock`` are injectable."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock or _utcnow

    def generate(self) -> DeviceReading:
        return DeviceReading(
            device_Id=self.device_id(),
            temperature=self._uniform(TEMPERATURE_RANGE),
            humidity=self._uniform(HUMIDITY_RANGE),
            voltage=f"{self._uniform(VOLTAGE_RANGE):.1f}",
            last_updated=format_timestamp(self._clock()),
        )

    def device_id(self) -> str:
        return f"device_{self._rng.randrange(DEVICE_COUNT):03d}"

    def _uniform(self, bounds: Tuple[float, float]) -> float:
        low, high = bounds
        value = round(self._rng.uniform(low, high), 1)
        return min(max(value, low), high)
