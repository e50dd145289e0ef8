"""The process-wide data store handed to every request handler."""

from __future__ import annotations

from dataclasses import dataclass

from .images import ImageProvider, ImageStore
from .users import UserRegistry


@dataclass(frozen=True)
class DataStore:
    """Volatile state for one service process; rebuilt empty on each start."""

    images: ImageStore
    users: UserRegistry

    @classmethod
    def create(cls, provider: ImageProvider) -> "DataStore":
        return cls(images=ImageStore(provider), users=UserRegistry())


__all__ = ["DataStore"]
