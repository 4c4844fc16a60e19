"""Latest-snapshot fetching for the account's registered devices."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ambient_weather.datasources.ambient.client import DEVICES_ENDPOINT
from ambient_weather.datasources.ambient.models import DeviceSummary, parse_devices
from ambient_weather.datasources.ambient.params import build_credentials
from ambient_weather.errors import PayloadDecodeError

if TYPE_CHECKING:
    from ambient_weather.context import CallContext
    from ambient_weather.datasources.ambient.client import AmbientClient
    from ambient_weather.datasources.ambient.models import FunctionData

logger = logging.getLogger(__name__)


def fetch_latest(client: AmbientClient, ctx: CallContext, fd: FunctionData) -> list[DeviceSummary]:
    """
    Fetch every device on the account with its most recent observation.

    Only the key pair in ``fd`` is used; no windowing, no checkpoint.

    Returns:
        One ``DeviceSummary`` per registered station (possibly none).

    Raises:
        MissingCredentialError: Either key is empty (checked before the request).
        AmbientWeatherError: Same transport/remote/context failures as a window fetch.
    """
    params = build_credentials(fd)
    payload = client.get(ctx, DEVICES_ENDPOINT, params=params)

    if not isinstance(payload, list):
        raise PayloadDecodeError(f"expected a list of devices, got {type(payload).__name__}")
    try:
        devices = parse_devices(payload)
    except ValidationError as exc:
        raise PayloadDecodeError(str(exc)) from exc

    logger.info("Fetched %d device(s)", len(devices))
    return devices
