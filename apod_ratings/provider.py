"""HTTP client for NASA's Astronomy Picture of the Day API."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .errors import ProviderError
from .models import Image

logger = logging.getLogger("apod_ratings.provider")

DEFAULT_API_URL = "https://api.nasa.gov/planetary/apod"
DEFAULT_TIMEOUT = 10.0


@dataclass
class _ClientConfig:
    api_url: str
    api_key: str
    timeout: float


def _normalize_api_url(api_url: str) -> str:
    cleaned = (api_url or "").strip()
    if not cleaned:
        raise ValueError("APOD API URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            payload = error
        for key in ("msg", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


class APODClient:
    """Fetch a single random picture record from the APOD API."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._config = _ClientConfig(
            api_url=_normalize_api_url(api_url),
            api_key=(api_key or "").strip(),
            timeout=timeout,
        )
        if not self._config.api_key:
            raise ValueError("API key must not be empty when using APODClient")

    def fetch_random(self) -> Image:
        params = {"api_key": self._config.api_key, "count": "1"}

        try:
            response = httpx.get(
                self._config.api_url,
                params=params,
                timeout=self._config.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # httpx includes the full URL (and the key) in some messages.
            raise ProviderError(
                f"Failed to contact the APOD API: {type(exc).__name__}"
            ) from exc

        if response.status_code >= 400:
            message = f"APOD API request failed with status {response.status_code}"
            try:
                parsed = response.json()
            except ValueError:
                parsed = None
            raise ProviderError(_extract_error_message(parsed, message))

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("APOD API returned an invalid JSON response") from exc

        # count=1 still yields an array; a bare object is accepted as well.
        if isinstance(data, list):
            if not data:
                raise ProviderError("APOD API returned no images")
            record = data[0]
        else:
            record = data

        image = Image.from_payload(record)
        logger.debug("Fetched APOD image %s (%s)", image.url, image.date)
        return image

    __call__ = fetch_random


__all__ = ["APODClient", "DEFAULT_API_URL", "DEFAULT_TIMEOUT"]
