"""Rate NASA's Astronomy Picture of the Day over a small JSON API."""

from __future__ import annotations

from typing import Any

from .errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ProviderError,
    StoreError,
    ValidationError,
)
from .models import Image
from .store import DataStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the FastAPI application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "DataStore",
    "Image",
    "NotFoundError",
    "ProviderError",
    "StoreError",
    "ValidationError",
    "create_app",
]
