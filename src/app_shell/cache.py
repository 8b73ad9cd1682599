"""
In-process TTL cache for hot read paths (leaderboards, boards).

Entries expire individually. Writers invalidate by exact key or by a
pattern where `*` matches any run of characters, e.g. ``leaderboard:*``.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Any

from src.adapters.clock import SystemClock
from src.ports.clock import ClockPort

LEADERBOARD_PREFIX = "leaderboard"
BOARD_PREFIX = "board"


def leaderboard_key(*parts: object) -> str:
    return ":".join([LEADERBOARD_PREFIX, *(str(p) for p in parts)])


def board_key(team_id: object) -> str:
    return f"{BOARD_PREFIX}:{team_id}"


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    keys: int = 0


class TTLCache:
    def __init__(self, default_ttl: int = 10, time_port: ClockPort | None = None) -> None:
        self.default_ttl = default_ttl
        self._time = time_port if time_port is not None else SystemClock()
        self._entries: dict[str, tuple[datetime, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            expires_at, value = entry
            if self._time.now_utc() >= expires_at:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (self._time.now_utc() + timedelta(seconds=ttl), value)

    def invalidate(self, key_or_pattern: str) -> int:
        """Drop one key, or every key matching a `*` pattern. Returns the count removed."""
        with self._lock:
            if "*" not in key_or_pattern:
                return 1 if self._entries.pop(key_or_pattern, None) is not None else 0
            matched = [k for k in self._entries if fnmatch.fnmatchcase(k, key_or_pattern)]
            for key in matched:
                del self._entries[key]
            return len(matched)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, keys=len(self._entries))
