"""Per-user rating ledgers mapping image urls to star ratings."""

from __future__ import annotations

import threading
from typing import Dict

from .errors import ConflictError, NotFoundError, ValidationError

MIN_RATING = 1
MAX_RATING = 5


def normalise_image_url(image_url: object) -> str:
    if not isinstance(image_url, str):
        raise ValidationError("Field 'imageURL' must be a string")
    value = image_url.strip()
    if not value:
        raise ValidationError("Field 'imageURL' must not be empty")
    return value


def validate_rating(rating: object) -> int:
    # bool is an int subclass; True is not a rating.
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Field 'rating' must be an integer")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Field 'rating' must be between {MIN_RATING} and {MAX_RATING}, got {rating}"
        )
    return rating


class RatingLedger:
    """The ratings one user has given, guarded by the user's own lock.

    A ledger is closed when its owner is deleted. Operations that reach a
    closed ledger fail with :class:`NotFoundError` as if the user had never
    been resolved.
    """

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._ratings: Dict[str, int] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def create(self, image_url: str, rating: int) -> None:
        with self._lock:
            self._ensure_open_locked()
            if image_url in self._ratings:
                raise ConflictError(
                    f"Rating for image {image_url} by {self._owner} already exists; update it instead"
                )
            self._ratings[image_url] = rating

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            self._ensure_open_locked()
            return dict(self._ratings)

    def update(self, image_url: str, rating: int) -> int:
        """Overwrite an existing rating and return the previous value."""

        with self._lock:
            self._ensure_open_locked()
            previous = self._ratings.get(image_url)
            if previous is None:
                raise NotFoundError(
                    f"Rating for image {image_url} by {self._owner} not found; create it first"
                )
            self._ratings[image_url] = rating
            return previous

    def delete(self, image_url: str) -> int:
        with self._lock:
            self._ensure_open_locked()
            try:
                return self._ratings.pop(image_url)
            except KeyError:
                raise NotFoundError(
                    f"Rating for image {image_url} by {self._owner} not found"
                ) from None

    def close(self) -> int:
        """Drop every rating and reject further operations."""

        with self._lock:
            dropped = len(self._ratings)
            self._ratings.clear()
            self._closed = True
            return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._ratings)

    def _ensure_open_locked(self) -> None:
        if self._closed:
            raise NotFoundError(f"User {self._owner} not found")


__all__ = [
    "MAX_RATING",
    "MIN_RATING",
    "RatingLedger",
    "normalise_image_url",
    "validate_rating",
]
