from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_ENDPOINT_ENV = "APPSYNC_ENDPOINT"
_REGION_ENV = "REGION"
_TIMEOUT_ENV = "APPSYNC_TIMEOUT"
_TABLE_PATH_ENV = "DEVICE_STATUS_TABLE_PATH"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_REGION = "ap-northeast-1"


@dataclass(frozen=True)
class Settings:
    appsync_endpoint: Optional[str]
    region: str
    request_timeout: float
    table_persistence_path: Optional[str]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_timeout(default: float) -> float:
    value = os.getenv(_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        appsync_endpoint=_read_optional_env(_ENDPOINT_ENV, None),
        region=_read_str_env(_REGION_ENV, DEFAULT_REGION),
        request_timeout=_read_timeout(10.0),
        table_persistence_path=_read_optional_env(_TABLE_PATH_ENV, "./tmp/device_status.json"),
        log_level=_read_log_level("INFO"),
    )
