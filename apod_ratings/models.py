"""Domain models for the ratings service."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Mapping

from .errors import ProviderError

_IMAGE_FIELDS = ("date", "explanation", "title", "url")


@dataclass(frozen=True)
class Image:
    """An astronomy picture record, keyed by its ``url``."""

    date: str
    explanation: str
    title: str
    url: str

    @staticmethod
    def from_payload(data: Mapping[str, object]) -> "Image":
        """Create an :class:`Image` from a raw provider record."""

        if not isinstance(data, Mapping):
            raise ProviderError("Image record must be a JSON object")

        missing = [name for name in _IMAGE_FIELDS if name not in data]
        if missing:
            raise ProviderError(f"Image record is missing fields: {', '.join(missing)}")

        values: Dict[str, str] = {}
        for name in _IMAGE_FIELDS:
            value = data[name]
            if not isinstance(value, str):
                raise ProviderError(f"Image field '{name}' must be a string")
            values[name] = value

        if not values["url"].strip():
            raise ProviderError("Image record has an empty url")

        return Image(**values)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


__all__ = ["Image"]
