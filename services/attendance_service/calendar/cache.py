"""TTL caches for calendar data.

Instances are created once per process (or per test) and injected; nothing
here is module-global. Concurrent misses on the same key are coalesced: the
first caller builds while the others wait on a per-key lock and then read
the fresh entry.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Generic, Hashable, Mapping, Optional, TypeVar

from libs.common.datetime_utils import utc_now
from services.attendance_service.schemas import CustomHolidayEntry, PublicHoliday

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class MonthKey:
    year: int
    month: int
    country_code: str


@dataclass(frozen=True)
class MonthCalendar:
    """Sundays and holidays of one month, built in one pass."""

    key: MonthKey
    sundays: frozenset[str]
    public_holidays: Mapping[str, PublicHoliday]
    custom_holidays: Mapping[str, CustomHolidayEntry]
    fetched_at: datetime
    expires_at: datetime
    complete: bool = True

    @property
    def non_working_dates(self) -> set[str]:
        return set(self.sundays) | set(self.public_holidays) | set(self.custom_holidays)


@dataclass
class _Entry(Generic[V]):
    value: V
    expires_at: datetime


class TTLCache(Generic[K, V]):
    def __init__(self, ttl_seconds: int, clock: Clock = utc_now):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self._entries: dict[K, _Entry[V]] = {}
        self._locks: dict[K, asyncio.Lock] = {}

    def get(self, key: K) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self.clock() + self.ttl)

    def _lock_for(self, key: K) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def get_or_build(
        self,
        key: K,
        build: Callable[[], Awaitable[V]],
        cacheable: Callable[[V], bool] = lambda _: True,
    ) -> V:
        cached = self.get(key)
        if cached is not None:
            return cached

        async with self._lock_for(key):
            # Another waiter may have rebuilt while we queued
            cached = self.get(key)
            if cached is not None:
                return cached
            value = await build()
            if cacheable(value):
                self.set(key, value)
            return value

    def invalidate(self, predicate: Callable[[K], bool] = lambda _: True) -> int:
        stale = [k for k in self._entries if predicate(k)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


class MonthCalendarCache(TTLCache[MonthKey, MonthCalendar]):
    """Month calendars keyed by (year, month, country)."""

    def invalidate_month(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> int:
        return self.invalidate(
            lambda key: (year is None or key.year == year)
            and (month is None or key.month == month)
        )
