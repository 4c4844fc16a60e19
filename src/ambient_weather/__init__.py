"""Ambient Weather - client for the Ambient Weather Network API.

Architecture::

    datasources/   External APIs (Ambient Weather REST: devices, history)
    services/      Shared utilities (HTTP transport with bounded retry)
    context.py     Deadline + cancellation threaded through every call
    dates.py       YYYY-MM-DD <-> epoch milliseconds
    errors.py      Tagged error taxonomy
    config.py      Environment settings (AMBIENT_*)
    cli.py         ambient-weather command

Data flow: CLI/caller -> FunctionData -> history/devices -> AmbientClient -> transport
"""

__version__ = "0.1.0"
__author__ = "Michael Howden"

from ambient_weather.config import Settings
from ambient_weather.context import CallContext
from ambient_weather.datasources.ambient import (
    AmbientClient,
    DeviceRecord,
    DeviceSummary,
    FunctionData,
    create_api_config,
    fetch_historical,
    fetch_latest,
    stream_historical,
)

__all__ = [
    "AmbientClient",
    "CallContext",
    "DeviceRecord",
    "DeviceSummary",
    "FunctionData",
    "Settings",
    "__version__",
    "create_api_config",
    "fetch_historical",
    "fetch_latest",
    "stream_historical",
]
