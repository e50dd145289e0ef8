"""Exception types shared by the stores, the provider client and the API."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for failures raised by the in-memory stores."""


class ValidationError(StoreError, ValueError):
    """Raised when a required field is missing, empty or out of range."""


class NotFoundError(StoreError, KeyError):
    """Raised when a user or a rating does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message for responses.
        return str(self.args[0]) if self.args else ""


class ConflictError(StoreError):
    """Raised when creating an entry that already exists."""


class ProviderError(RuntimeError):
    """Raised when the astronomy image provider cannot be reached or decoded."""


class ConfigurationError(RuntimeError):
    """Raised when the service configuration is missing or invalid."""


__all__ = [
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ProviderError",
    "ConfigurationError",
]
