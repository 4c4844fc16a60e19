"""Query and path parameters for Ambient Weather requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ambient_weather.errors import (
    MissingAPIKeyError,
    MissingApplicationKeyError,
    MissingDeviceAddressError,
)

if TYPE_CHECKING:
    from ambient_weather.datasources.ambient.models import FunctionData


@dataclass(frozen=True)
class WindowParams:
    """Everything one historical window request needs."""

    query: dict[str, str] = field(default_factory=dict)
    path: dict[str, str] = field(default_factory=dict)

    @property
    def mac_address(self) -> str:
        return self.path["macAddress"]


def build_credentials(fd: FunctionData) -> dict[str, str]:
    """
    Authentication query parameters.

    Raises:
        MissingAPIKeyError: ``fd.api_key`` is empty.
        MissingApplicationKeyError: ``fd.application_key`` is empty.
    """
    if not fd.api_key:
        raise MissingAPIKeyError
    if not fd.application_key:
        raise MissingApplicationKeyError
    return {"apiKey": fd.api_key, "applicationKey": fd.application_key}


def build_window_params(fd: FunctionData) -> WindowParams:
    """
    Parameters for the window ending at ``fd.epoch``.

    Raises:
        MissingCredentialError: Either key is empty.
        MissingDeviceAddressError: ``fd.mac_address`` is empty.
    """
    query = build_credentials(fd)
    if not fd.mac_address:
        raise MissingDeviceAddressError
    query["endDate"] = str(fd.epoch)
    query["limit"] = str(fd.limit)
    return WindowParams(query=query, path={"macAddress": fd.mac_address})
