"""
In-memory TTL cache for normalized weather results.

Only successful, fully normalized results are stored. Expiration is checked
lazily on read; there is no background eviction.
"""

import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from unified_weather.logging_config import get_logger

logger = get_logger(__name__)


class CacheCategory(str, Enum):
    """Cache entry categories, each with its own lifetime."""

    CURRENT = "current"
    FORECAST = "forecast"
    GEOCODING = "geocoding"


# Seconds
DEFAULT_TTL: dict[CacheCategory, float] = {
    CacheCategory.CURRENT: 5 * 60,
    CacheCategory.FORECAST: 30 * 60,
    CacheCategory.GEOCODING: 24 * 60 * 60,
}


class CacheTTL(BaseModel):
    """Per-category lifetime overrides in seconds."""

    current: float | None = Field(None, gt=0)
    forecast: float | None = Field(None, gt=0)
    geocoding: float | None = Field(None, gt=0)

    def resolve(self) -> dict[CacheCategory, float]:
        """Merge overrides with the defaults."""
        return {
            category: getattr(self, category.value) or default
            for category, default in DEFAULT_TTL.items()
        }


class CacheConfig(BaseModel):
    """Response cache settings for a WeatherService."""

    enabled: bool = False
    ttl: CacheTTL = Field(default_factory=CacheTTL)


class TTLCache:
    """A lightweight per-entry TTL cache keyed by composite strings."""

    def __init__(
        self,
        ttl: CacheTTL | None = None,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = (ttl or CacheTTL()).resolve()
        self._time_func = time_func
        # key -> (expires_at, value)
        self._storage: dict[str, tuple[float, Any]] = {}

    @staticmethod
    def create_key(
        provider: str,
        category: CacheCategory | str,
        location: str,
        extra: str | int | None = None,
    ) -> str:
        """
        Build a deterministic cache key.

        Format: ``<provider>:<category>:<location>[:<extra>]`` where the
        location is case-folded and stripped so equivalent inputs collide.
        """
        category_value = (
            category.value if isinstance(category, CacheCategory) else category
        )
        parts = [provider, category_value, location.strip().lower()]
        if extra is not None:
            parts.append(str(extra))
        return ":".join(parts)

    def ttl_for(self, category: CacheCategory) -> float:
        return self._ttl[CacheCategory(category)]

    def get(self, key: str) -> Any:
        """Return the stored value, or None when missing or expired."""
        item = self._storage.get(key)
        if item is None:
            return None
        expires_at, value = item
        if self._time_func() > expires_at:
            self._storage.pop(key, None)
            logger.debug(f"Cache entry expired: {key}")
            return None
        return value

    def set(self, key: str, value: Any, category: CacheCategory) -> None:
        """Store ``value`` with the lifetime of ``category``."""
        expires_at = self._time_func() + self.ttl_for(category)
        self._storage[key] = (expires_at, value)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        return self._storage.pop(key, None) is not None

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        # Includes expired entries that have not been read yet
        return len(self._storage)


__all__ = ["CacheCategory", "CacheConfig", "CacheTTL", "DEFAULT_TTL", "TTLCache"]
