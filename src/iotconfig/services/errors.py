"""Error classes raised by the config service tooling."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .crypto.signing import BatchSignResult


class IotConfigError(RuntimeError):
    """Base error for config service operations."""


class FormatError(IotConfigError, ValueError):
    """Raised when hex text does not match the expected fixed width."""

    def __init__(self, message: str, *, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


class InvalidRangeError(IotConfigError, ValueError):
    """Raised when a range ends before it starts."""

    def __init__(self, start: Any, end: Any) -> None:
        self.start = start
        self.end = end
        super().__init__(f"start_addr {start} cannot be greater than end_addr {end}")


class SigningError(IotConfigError):
    """Raised when a request cannot be signed with the supplied key."""


class KeyMaterialError(SigningError):
    """Raised when keypair bytes cannot be decoded."""


class BatchSigningError(SigningError):
    """Raised when some elements of a batch could not be signed.

    The full per-element report is kept on :attr:`result` so callers can show
    which inputs failed.
    """

    def __init__(self, result: "BatchSignResult") -> None:
        self.result = result
        failed = ", ".join(str(item) for item, _ in result.failed[:5])
        more = len(result.failed) - 5
        if more > 0:
            failed += f" (+{more} more)"
        super().__init__(f"{len(result.failed)} of {result.total} batch elements could not be signed: {failed}")


class TransportError(IotConfigError):
    """Raised when the config service cannot be reached or answers with an error."""

    def __init__(self, message: str, *, status_code: int = 0, error_code: str | None = None, payload: Any | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.payload = payload


class SettingsError(IotConfigError):
    """Raised when the settings file cannot be parsed."""


class RouteStoreError(IotConfigError):
    """Raised for local route cache failures."""


class RouteUpdateError(IotConfigError):
    """Raised when a route mutation does not apply to the route's protocol."""


__all__ = [
    "IotConfigError",
    "FormatError",
    "InvalidRangeError",
    "SigningError",
    "KeyMaterialError",
    "BatchSigningError",
    "TransportError",
    "SettingsError",
    "RouteStoreError",
    "RouteUpdateError",
]
