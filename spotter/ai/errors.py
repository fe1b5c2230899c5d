from __future__ import annotations


class SpotterError(Exception):
    """Base class for errors that carry a user-safe message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SpotterError, ValueError):
    """Input was rejected before any external call was made."""


class TransportError(SpotterError, RuntimeError):
    """The external classification call failed or returned unusable output."""


class DeviceError(SpotterError):
    """A capture device is missing or access to it was denied."""


def http_status(exc: Exception) -> str:
    """Status code of a failed HTTP call, without the URL or body text."""
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return str(status) if status is not None else "unknown"


__all__ = ["SpotterError", "ValidationError", "TransportError", "DeviceError", "http_status"]
