"""Exception hierarchy for the Rifi protocol SDK."""

from typing import Any


class RifiError(Exception):
    """Base exception for all Rifi SDK errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(RifiError):
    """Raised when caller input is rejected before any network call."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class ArgumentTypeError(ValidationError):
    """Raised when an argument has the wrong Python type."""

    pass


class RegistryError(RifiError):
    """Raised when a deployment table is malformed or lacks an entry."""

    def __init__(
        self,
        message: str,
        network: str | None = None,
        symbol: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.network = network
        self.symbol = symbol


class NetworkError(RifiError):
    """Raised when the HTTP API fails or a provider cannot be built."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


def error_prefix(operation: str, component: str = "Rifi") -> str:
    """Return the message prefix used by validation errors of ``operation``."""

    return f"{component} [{operation}] | "
