# =============================================================================
# File: poller.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Adaptive polling wrapper around one cached value.

A poller re-checks its value only when the current delay has elapsed. Each
check that finds a change shrinks the delay towards `min_delay`; each check
that finds nothing grows it towards `max_delay`, scaled by how long it has
actually been since the previous check. Busy runs therefore converge to a
check every few seconds while finished ones drift out to hours.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Protocol, TypeVar, Union

T = TypeVar("T")

DEFAULT_MIN_DELAY = 5.0
DEFAULT_MAX_DELAY = 2 * 60 * 60.0
DEFAULT_BACKOFF_FACTOR = 1.5


class Unchanged:
    """Load result meaning the backing data did not change."""

    _instance: Optional["Unchanged"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED = Unchanged()


@dataclass(frozen=True)
class Updated(Generic[T]):
    """Load result carrying a freshly loaded value."""

    value: T


LoadResult = Union[Unchanged, Updated[T]]


class Loader(Protocol[T]):
    async def load_if_updated(self, original: Optional[T]) -> LoadResult[T]:
        ...


class AdaptivePoller(Generic[T]):
    """Caches one value and decides when to ask its loader for a newer one."""

    def __init__(
        self,
        loader: Loader[T],
        min_delay: float = DEFAULT_MIN_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.loader = loader
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self._clock = clock

        self._cached: Optional[T] = None
        self._loaded = False
        self._last_loaded: Optional[float] = None
        self._delay = min_delay
        self._refresh: Optional[asyncio.Task] = None
        self._generation = 0
        self._refresh_generation = 0

    @property
    def cached(self) -> Optional[T]:
        return self._cached

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def last_loaded(self) -> Optional[float]:
        return self._last_loaded

    @property
    def is_refreshing(self) -> bool:
        return self._refresh is not None

    def is_due(self, now: Optional[float] = None) -> bool:
        if not self._loaded or self._last_loaded is None:
            return True
        if now is None:
            now = self._clock()
        return now >= self._last_loaded + self._delay

    async def get(self) -> Optional[T]:
        """Return the cached value, refreshing it first when it is due.

        Callers arriving while a refresh is in flight wait for that refresh
        instead of starting their own. A refresh that was started before the
        last `reset` does not count; its waiters go on to load again.
        """
        while True:
            if self._refresh is None and self.is_due():
                self._refresh_generation = self._generation
                self._refresh = asyncio.ensure_future(
                    self._do_refresh(self._generation)
                )

            refresh = self._refresh
            if refresh is None:
                break

            generation = self._refresh_generation
            # Shielded so one cancelled caller does not abort the shared refresh.
            await asyncio.shield(refresh)
            if generation == self._generation:
                break

        return self._cached

    def reset(self) -> None:
        """Drop the cached value; the next `get` loads unconditionally."""
        self._cached = None
        self._loaded = False
        self._generation += 1

    async def _do_refresh(self, generation: int) -> None:
        try:
            now = self._clock()
            result = await self.loader.load_if_updated(self._cached)
            # Results of a load that a reset overtook are discarded.
            if generation == self._generation:
                self._apply(result, now)
        finally:
            self._refresh = None

    def _apply(self, result: LoadResult[T], now: float) -> None:
        if isinstance(result, Updated):
            self._cached = result.value
            self._delay = max(self.min_delay, self._delay / self.backoff_factor)
        else:
            elapsed = 0.0 if self._last_loaded is None else now - self._last_loaded
            self._delay = min(
                self.max_delay, max(self.min_delay, elapsed * self.backoff_factor)
            )

        self._last_loaded = now
        self._loaded = True
