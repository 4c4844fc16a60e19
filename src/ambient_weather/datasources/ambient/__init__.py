"""Ambient Weather Network data source.

Fetches device snapshots and historical observations from the Ambient
Weather REST API (API key + application key, 1 req/s).

Public API:
  - client: AmbientClient, RateLimiter, API constants
  - models: FunctionData, DeviceRecord, DeviceSummary, create_api_config
  - params: build_credentials, build_window_params
  - devices: fetch_latest
  - history: fetch_window, iter_checkpoints, fetch_historical, stream_historical
"""

from ambient_weather.datasources.ambient.client import (
    API_BASE,
    API_VERSION,
    AmbientClient,
    RateLimiter,
)
from ambient_weather.datasources.ambient.devices import fetch_latest
from ambient_weather.datasources.ambient.history import (
    HistoryStream,
    WindowResult,
    fetch_historical,
    fetch_window,
    iter_checkpoints,
    stream_historical,
)
from ambient_weather.datasources.ambient.models import (
    DeviceRecord,
    DeviceSummary,
    FunctionData,
    create_api_config,
)
from ambient_weather.datasources.ambient.params import (
    WindowParams,
    build_credentials,
    build_window_params,
)

__all__ = [
    "API_BASE",
    "API_VERSION",
    "AmbientClient",
    "DeviceRecord",
    "DeviceSummary",
    "FunctionData",
    "HistoryStream",
    "RateLimiter",
    "WindowParams",
    "WindowResult",
    "build_credentials",
    "build_window_params",
    "create_api_config",
    "fetch_historical",
    "fetch_latest",
    "fetch_window",
    "iter_checkpoints",
    "stream_historical",
]
