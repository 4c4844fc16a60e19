"""
Error taxonomy for the Ambient Weather client.

Every failure the client can surface is one exception class with a class-level
``kind`` tag and named fields, so callers can branch on either the type or the
tag::

    try:
        records = fetch_historical(client, ctx, query)
    except RemoteError as exc:
        print(exc.kind, exc.message)

Hierarchy::

    AmbientWeatherError
    ├── RequestValidationError (also ValueError) - raised before any network call
    │   ├── MalformedDateError
    │   ├── InvalidLimitError
    │   ├── MissingCredentialError
    │   │   ├── MissingAPIKeyError
    │   │   └── MissingApplicationKeyError
    │   └── MissingDeviceAddressError
    ├── RegexEngineError
    ├── ContextError
    │   ├── ContextTimeoutExceededError
    │   └── ContextCancelledError
    ├── RemoteError - reported by the API in an error-shaped body
    │   ├── APIKeyMissingError
    │   ├── AppKeyMissingError
    │   ├── InvalidDateFormatError
    │   ├── MacAddressMissingError
    │   └── RemoteRejectedError
    ├── TransportError
    └── PayloadDecodeError
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Stable tag for each failure kind."""

    MALFORMED_DATE = "malformed_date"
    REGEX_ENGINE_FAILURE = "regex_engine_failure"
    INVALID_LIMIT = "invalid_limit"
    MISSING_API_KEY = "missing_api_key"
    MISSING_APPLICATION_KEY = "missing_application_key"
    MISSING_DEVICE_ADDRESS = "missing_device_address"
    CONTEXT_TIMEOUT_EXCEEDED = "context_timeout_exceeded"
    CONTEXT_CANCELLED = "context_cancelled"
    API_KEY_MISSING = "api_key_missing"
    APP_KEY_MISSING = "app_key_missing"
    INVALID_DATE_FORMAT = "invalid_date_format"
    MAC_ADDRESS_MISSING = "mac_address_missing"
    REMOTE_REJECTED = "remote_rejected"
    TRANSPORT_FAILURE = "transport_failure"
    PAYLOAD_DECODE = "payload_decode"


class AmbientWeatherError(Exception):
    """Base class for every error raised by this package."""

    kind: ErrorKind


# =============================================================================
# Local validation (never reaches the network)
# =============================================================================


class RequestValidationError(AmbientWeatherError, ValueError):
    """Input rejected before any request was made."""


class MalformedDateError(RequestValidationError):
    kind = ErrorKind.MALFORMED_DATE

    def __init__(self, input: str) -> None:  # noqa: A002
        self.input = input
        super().__init__(f"date is malformed, expected YYYY-MM-DD: {input!r}")


class InvalidLimitError(RequestValidationError):
    kind = ErrorKind.INVALID_LIMIT

    def __init__(self, limit: int, minimum: int, maximum: int) -> None:
        self.limit = limit
        super().__init__(f"record limit must be between {minimum} and {maximum}, got {limit}")


class MissingCredentialError(RequestValidationError):
    """One half of the key pair is empty."""

    field: str = ""

    def __init__(self) -> None:
        super().__init__(f"{self.field} is missing")


class MissingAPIKeyError(MissingCredentialError):
    kind = ErrorKind.MISSING_API_KEY
    field = "apiKey"


class MissingApplicationKeyError(MissingCredentialError):
    kind = ErrorKind.MISSING_APPLICATION_KEY
    field = "applicationKey"


class MissingDeviceAddressError(RequestValidationError):
    kind = ErrorKind.MISSING_DEVICE_ADDRESS

    def __init__(self) -> None:
        super().__init__("device MAC address is missing")


class RegexEngineError(AmbientWeatherError):
    """The pattern matcher itself failed (not a simple non-match)."""

    kind = ErrorKind.REGEX_ENGINE_FAILURE

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"regex {pattern!r} failed: {reason}")


# =============================================================================
# Call context
# =============================================================================


class ContextError(AmbientWeatherError):
    """The call context finished before the operation did."""


class ContextTimeoutExceededError(ContextError):
    kind = ErrorKind.CONTEXT_TIMEOUT_EXCEEDED

    def __init__(self, timeout: float | None) -> None:
        self.timeout = timeout
        super().__init__(f"context timeout exceeded ({timeout}s)")


class ContextCancelledError(ContextError):
    kind = ErrorKind.CONTEXT_CANCELLED

    def __init__(self) -> None:
        super().__init__("context cancelled")


# =============================================================================
# Remote-reported errors
# =============================================================================


class RemoteError(AmbientWeatherError):
    """The API answered with an error object instead of data."""

    kind = ErrorKind.REMOTE_REJECTED
    summary = "request rejected by remote API"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"{self.summary} ({message})")


class APIKeyMissingError(RemoteError):
    kind = ErrorKind.API_KEY_MISSING
    summary = "API key is missing, visit https://ambientweather.net/account"


class AppKeyMissingError(RemoteError):
    kind = ErrorKind.APP_KEY_MISSING
    summary = "application key is missing, visit https://ambientweather.net/account"


class InvalidDateFormatError(RemoteError):
    kind = ErrorKind.INVALID_DATE_FORMAT
    summary = "date is invalid, it should be epoch time in milliseconds"


class MacAddressMissingError(RemoteError):
    kind = ErrorKind.MAC_ADDRESS_MISSING
    summary = "MAC address is missing, supply a valid MAC address for a weather station"


class RemoteRejectedError(RemoteError):
    kind = ErrorKind.REMOTE_REJECTED


#: Wire ``error`` codes the API is known to return (it documents none of them).
REMOTE_ERRORS: dict[str, type[RemoteError]] = {
    "apiKey-missing": APIKeyMissingError,
    "applicationKey-missing": AppKeyMissingError,
    "date-invalid": InvalidDateFormatError,
    "macAddress-missing": MacAddressMissingError,
}


def check_response(payload: Any) -> Any:
    """
    Raise the matching ``RemoteError`` if ``payload`` is an error object.

    The API signals failures with ``{"error": "<code>", "message": "..."}``
    rather than a documented status code.  Any other payload is returned as-is.
    """
    if not isinstance(payload, dict) or "error" not in payload:
        return payload

    code = str(payload["error"])
    error_cls = REMOTE_ERRORS.get(code)
    if error_cls is not None:
        raise error_cls(code)

    detail = payload.get("message")
    raise RemoteRejectedError(f"{code}: {detail}" if detail else code)


# =============================================================================
# Transport / decoding
# =============================================================================


class TransportError(AmbientWeatherError):
    """Retries exhausted or a non-retryable HTTP failure."""

    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class PayloadDecodeError(AmbientWeatherError):
    """Response body is not JSON or does not have the expected shape."""

    kind = ErrorKind.PAYLOAD_DECODE

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"unable to decode response: {detail}")
