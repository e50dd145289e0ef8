"""In-memory cache of astronomy images fetched from the provider."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from .errors import ProviderError
from .models import Image

logger = logging.getLogger("apod_ratings.images")

ImageProvider = Callable[[], Image]


class ImageStore:
    """Cache images by url, populated one provider fetch at a time."""

    def __init__(self, provider: ImageProvider) -> None:
        self._provider = provider
        self._images: Dict[str, Image] = {}
        self._lock = threading.Lock()

    def fetch_and_cache(self) -> Image:
        """Fetch one image from the provider and store it under its url.

        Failures propagate as :class:`ProviderError` and leave the cache
        untouched. Nothing is retried.
        """

        try:
            image = self._provider()
        except ProviderError:
            raise
        except ValueError as exc:
            raise ProviderError(f"Image provider returned invalid data: {exc}") from exc

        if not isinstance(image, Image):
            raise ProviderError("Image provider returned an unexpected record")

        with self._lock:
            replaced = image.url in self._images
            self._images[image.url] = image

        logger.info(
            "Cached image %s (%s)%s",
            image.url,
            image.title,
            " replacing previous entry" if replaced else "",
        )
        return image

    def get(self, url: str) -> Optional[Image]:
        with self._lock:
            return self._images.get(url)

    def list_images(self) -> List[Image]:
        with self._lock:
            return list(self._images.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)


__all__ = ["ImageStore", "ImageProvider"]
