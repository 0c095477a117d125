from __future__ import annotations

from dataclasses import replace
from typing import Optional

from services.ingestion import AppSyncConfig
from settings import get_settings

DEFAULT_COUNT = 1
DEFAULT_INTERVAL = 5.0


def load_config(
    endpoint: Optional[str] = None,
    region: Optional[str] = None,
    timeout: Optional[float] = None,
) -> AppSyncConfig:
    """Environment-backed settings with command line overrides applied on top."""
    config = AppSyncConfig.from_settings(get_settings())
    if endpoint:
        config = replace(config, endpoint=endpoint.strip())
    if region:
        config = replace(config, region=region.strip())
    if timeout is not None and timeout > 0:
        config = replace(config, timeout=timeout)
    return config
