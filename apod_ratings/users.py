"""Registry of users and the entry point for rating operations."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List

from .errors import ConflictError, NotFoundError, ValidationError
from .ratings import RatingLedger, normalise_image_url, validate_rating

logger = logging.getLogger("apod_ratings.users")


def normalise_email(email: object) -> str:
    if not isinstance(email, str):
        raise ValidationError("Field 'email' must be a string")
    value = email.strip()
    if not value:
        raise ValidationError("Field 'email' must be populated with a valid email")
    return value


@dataclass
class UserRecord:
    """A registered user and the ledger of ratings they own."""

    email: str
    ledger: RatingLedger = field(init=False)

    def __post_init__(self) -> None:
        self.ledger = RatingLedger(self.email)


class UserRegistry:
    """Maps emails to user records.

    The registry lock covers lookups and mutations of the mapping only. Rating
    operations resolve the record under the registry lock, release it, then
    work under the record's own ledger lock, so users never contend with each
    other over ratings.
    """

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def create_user(self, email: str) -> UserRecord:
        """Register ``email``; an existing registration is a conflict."""

        normalised = normalise_email(email)

        with self._lock:
            if normalised in self._users:
                raise ConflictError(f"User with email {normalised} already exists")
            record = UserRecord(email=normalised)
            self._users[normalised] = record

        logger.info("Created user %s", normalised)
        return record

    def delete_user(self, email: str) -> bool:
        """Remove ``email`` and its ratings. Absent users are not an error."""

        normalised = normalise_email(email)

        with self._lock:
            record = self._users.pop(normalised, None)

        if record is None:
            logger.debug("Delete requested for unknown user %s", normalised)
            return False

        dropped = record.ledger.close()
        logger.info("Deleted user %s and %s rating(s)", normalised, dropped)
        return True

    def get_user(self, email: str) -> UserRecord:
        normalised = normalise_email(email)
        with self._lock:
            record = self._users.get(normalised)
        if record is None:
            raise NotFoundError(f"User {normalised} not found")
        return record

    def emails(self) -> List[str]:
        with self._lock:
            return list(self._users)

    def __contains__(self, email: object) -> bool:
        if not isinstance(email, str):
            return False
        with self._lock:
            return email.strip() in self._users

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------
    def create_rating(self, email: str, image_url: str, rating: int) -> None:
        normalised_email = normalise_email(email)
        url = normalise_image_url(image_url)
        value = validate_rating(rating)

        record = self.get_user(normalised_email)
        record.ledger.create(url, value)
        logger.info("User %s rated %s with %s", normalised_email, url, value)

    def list_ratings(self, email: str) -> Dict[str, int]:
        record = self.get_user(email)
        return record.ledger.snapshot()

    def update_rating(self, email: str, image_url: str, rating: int) -> None:
        normalised_email = normalise_email(email)
        url = normalise_image_url(image_url)
        value = validate_rating(rating)

        record = self.get_user(normalised_email)
        previous = record.ledger.update(url, value)
        logger.info(
            "User %s changed rating of %s from %s to %s",
            normalised_email,
            url,
            previous,
            value,
        )

    def delete_rating(self, email: str, image_url: str) -> None:
        normalised_email = normalise_email(email)
        url = normalise_image_url(image_url)

        record = self.get_user(normalised_email)
        record.ledger.delete(url)
        logger.info("User %s removed rating of %s", normalised_email, url)


__all__ = ["UserRecord", "UserRegistry", "normalise_email"]
