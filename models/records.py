"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

TEMPERATURE_RANGE = (15.0, 35.0)
HUMIDITY_RANGE = (30.0, 80.0)
VOLTAGE_RANGE = (11.0, 13.0)
DEVICE_COUNT = 100

NORMAL_STATUS_CODE = "200"
NORMAL_STATUS_DESCRIPTION = "Normal operation"
NORMAL_STATUS_STATE = "NORMAL"


@dataclass(slots=True)
class DeviceReading:
    """A synthetic device reading, shaped like the ``CreateDeviceStatusInput`` type."""

    device_Id: str
    temperature: float
    humidity: float
    voltage: str
    last_updated: str
    status_code: str = NORMAL_STATUS_CODE
    status_description: str = NORMAL_STATUS_DESCRIPTION
    status_state: str = NORMAL_STATUS_STATE

    def as_input(self) -> Dict[str, Any]:
        """Return the mutation ``input`` variables for this reading."""
        return asdict(self)
