"""工具结果缓存：按工具名与归一化参数缓存成功结果。

Tool result cache.

Successful results are stored under the tool name plus a canonical form
of the arguments: object keys trimmed, lower-cased and sorted. Entries
expire after a TTL. When the cache is full the oldest tenth of the
entries is evicted.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from dataclasses import dataclass
from typing import Any

from zai_lib_python.telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached tool result.

    Attributes:
        tool_name: Tool that produced the value
        value: The tool's JSON result
        created_at: Monotonic creation time
        ttl: Time-to-live in seconds (None never expires)
        hits: Times the entry was served
    """

    tool_name: str
    value: Any
    created_at: float
    ttl: float | None = None
    hits: int = 0

    @property
    def is_expired(self) -> bool:
        if self.ttl is None:
            return False
        return time.monotonic() > self.created_at + self.ttl

    @property
    def age_seconds(self) -> float:
        return time.monotonic() - self.created_at


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        hits: Lookups answered from the cache
        misses: Lookups that found nothing usable
        sets: Values stored
        evictions: Entries dropped to make room
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0.0 to 1.0)."""
        total = self.total_requests
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "evictions": self.evictions,
            "total_requests": self.total_requests,
            "hit_rate": self.hit_rate,
        }

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.evictions = 0


@dataclass
class CacheConfig:
    """Cache configuration.

    Attributes:
        enabled: Whether lookups and stores take effect
        default_ttl: TTL in seconds for new entries (None never expires)
        max_size: Maximum number of entries
    """

    enabled: bool = True
    default_ttl: float | None = 300.0
    max_size: int = 1000

    @classmethod
    def disabled(cls) -> CacheConfig:
        return cls(enabled=False)


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).strip().lower(): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def cache_key(tool_name: str, arguments: dict[str, Any]) -> str:
    """Deterministic key for a tool call.

    Example:
        >>> cache_key("get_weather", {"City": "Beijing"}) == cache_key("get_weather", {"city": "Beijing"})
        True
    """
    canonical = json.dumps(
        _normalize(arguments),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        default=str,
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]
    return f"tool:{tool_name}:{digest}"


class ToolCallCache:
    """In-memory cache of successful tool results.

    Example:
        >>> cache = ToolCallCache(CacheConfig(default_ttl=60))
        >>> executor = ToolExecutor(registry, cache=cache)
        >>> await executor.execute("get_weather", {"city": "Beijing"})  # runs the tool
        >>> await executor.execute("get_weather", {"city": "Beijing"})  # served from cache
        >>> cache.stats.hits
        1
    """

    def __init__(self, config: CacheConfig | None = None) -> None:
        self._config = config or CacheConfig()
        self._entries: dict[str, CacheEntry] = {}
        self._stats = CacheStats()
        self._lock = asyncio.Lock()

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, tool_name: str, arguments: dict[str, Any]) -> CacheEntry | None:
        """Look up a cached result.

        Returns:
            The live entry (``entry.value`` is the result), or None on a
            miss; expired entries are dropped
        """
        if not self._config.enabled:
            self._stats.misses += 1
            return None

        key = cache_key(tool_name, arguments)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired:
                del self._entries[key]
                entry = None
            if entry is None:
                self._stats.misses += 1
                return None
            entry.hits += 1
            self._stats.hits += 1
            return entry

    async def set(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        value: Any,
        ttl: float | None = None,
    ) -> None:
        """Store a result, evicting old entries when full."""
        if not self._config.enabled:
            return

        key = cache_key(tool_name, arguments)
        async with self._lock:
            if key not in self._entries and len(self._entries) >= self._config.max_size:
                self._evict()
            self._entries[key] = CacheEntry(
                tool_name=tool_name,
                value=value,
                created_at=time.monotonic(),
                ttl=ttl if ttl is not None else self._config.default_ttl,
            )
            self._stats.sets += 1

    def _evict(self) -> None:
        expired = [k for k, e in self._entries.items() if e.is_expired]
        for key in expired:
            del self._entries[key]
        if len(self._entries) < self._config.max_size:
            return

        count = max(self._config.max_size // 10, 1)
        oldest = sorted(self._entries, key=lambda k: self._entries[k].created_at)[:count]
        for key in oldest:
            del self._entries[key]
        self._stats.evictions += len(oldest)
        logger.debug("Tool cache evicted entries", count=len(oldest))

    async def invalidate_tool(self, tool_name: str) -> int:
        """Drop every entry for one tool. Returns the number removed."""
        async with self._lock:
            keys = [k for k, e in self._entries.items() if e.tool_name == tool_name]
            for key in keys:
                del self._entries[key]
        if keys:
            logger.debug("Tool cache invalidated", tool_name=tool_name, count=len(keys))
        return len(keys)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
