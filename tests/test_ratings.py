from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from apod_ratings.errors import ConflictError, NotFoundError, ValidationError
from apod_ratings.ratings import RatingLedger, validate_rating
from apod_ratings.users import UserRegistry

EMAIL = "rater@example.com"
URL = "https://apod.nasa.gov/apod/image/2401/galaxy.jpg"


@pytest.fixture()
def registry() -> UserRegistry:
    users = UserRegistry()
    users.create_user(EMAIL)
    return users


def test_create_then_list(registry: UserRegistry) -> None:
    registry.create_rating(EMAIL, URL, 5)
    assert registry.list_ratings(EMAIL) == {URL: 5}


def test_list_returns_a_snapshot(registry: UserRegistry) -> None:
    registry.create_rating(EMAIL, URL, 2)
    listing = registry.list_ratings(EMAIL)
    listing[URL] = 5
    listing["https://other"] = 1

    assert registry.list_ratings(EMAIL) == {URL: 2}


def test_list_for_user_without_ratings(registry: UserRegistry) -> None:
    assert registry.list_ratings(EMAIL) == {}


def test_duplicate_create_conflicts_then_update_succeeds(registry: UserRegistry) -> None:
    registry.create_rating(EMAIL, URL, 4)

    with pytest.raises(ConflictError):
        registry.create_rating(EMAIL, URL, 2)
    assert registry.list_ratings(EMAIL) == {URL: 4}

    registry.update_rating(EMAIL, URL, 2)
    assert registry.list_ratings(EMAIL) == {URL: 2}


def test_update_and_delete_require_existing_rating(registry: UserRegistry) -> None:
    with pytest.raises(NotFoundError):
        registry.update_rating(EMAIL, URL, 3)
    with pytest.raises(NotFoundError):
        registry.delete_rating(EMAIL, URL)
    assert registry.list_ratings(EMAIL) == {}


def test_delete_rating(registry: UserRegistry) -> None:
    registry.create_rating(EMAIL, URL, 3)
    registry.delete_rating(EMAIL, URL)
    assert registry.list_ratings(EMAIL) == {}

    with pytest.raises(NotFoundError):
        registry.delete_rating(EMAIL, URL)


@pytest.mark.parametrize("value", [0, 6, -1, 100, True, 3.0, "5", None])
def test_invalid_ratings_are_rejected(registry: UserRegistry, value: object) -> None:
    with pytest.raises(ValidationError):
        registry.create_rating(EMAIL, URL, value)  # type: ignore[arg-type]

    registry.create_rating(EMAIL, URL, 1)
    with pytest.raises(ValidationError):
        registry.update_rating(EMAIL, URL, value)  # type: ignore[arg-type]
    assert registry.list_ratings(EMAIL) == {URL: 1}


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
def test_boundary_ratings_are_accepted(value: int) -> None:
    assert validate_rating(value) == value


def test_operations_on_unknown_user(registry: UserRegistry) -> None:
    stranger = "stranger@example.com"
    with pytest.raises(NotFoundError):
        registry.create_rating(stranger, URL, 3)
    with pytest.raises(NotFoundError):
        registry.list_ratings(stranger)
    with pytest.raises(NotFoundError):
        registry.update_rating(stranger, URL, 3)
    with pytest.raises(NotFoundError):
        registry.delete_rating(stranger, URL)


def test_empty_fields_fail_before_user_lookup(registry: UserRegistry) -> None:
    with pytest.raises(ValidationError):
        registry.create_rating("", URL, 3)
    with pytest.raises(ValidationError):
        registry.create_rating("stranger@example.com", "  ", 3)
    with pytest.raises(ValidationError):
        registry.list_ratings("")
    with pytest.raises(ValidationError):
        registry.delete_rating(EMAIL, "")


def test_ratings_are_isolated_per_user(registry: UserRegistry) -> None:
    registry.create_user("other@example.com")
    registry.create_rating(EMAIL, URL, 5)
    registry.create_rating("other@example.com", URL, 1)

    assert registry.list_ratings(EMAIL) == {URL: 5}
    assert registry.list_ratings("other@example.com") == {URL: 1}


def test_concurrent_creates_for_distinct_urls_are_all_kept(registry: UserRegistry) -> None:
    urls = [f"https://img/{index}" for index in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda url: registry.create_rating(EMAIL, url, 3), urls))

    listing = registry.list_ratings(EMAIL)
    assert len(listing) == len(urls)
    assert set(listing) == set(urls)


def test_rating_on_record_resolved_before_user_deletion(registry: UserRegistry) -> None:
    record = registry.get_user(EMAIL)
    registry.delete_user(EMAIL)

    with pytest.raises(NotFoundError):
        record.ledger.create(URL, 4)
    with pytest.raises(NotFoundError):
        record.ledger.snapshot()
    assert len(record.ledger) == 0
    assert record.ledger.closed is True


def test_ledger_close_reports_dropped_ratings() -> None:
    ledger = RatingLedger("owner@example.com")
    ledger.create("https://img/1", 5)
    ledger.create("https://img/2", 4)

    assert ledger.close() == 2
    assert len(ledger) == 0
