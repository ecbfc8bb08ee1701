# =============================================================================
# File: run_cache.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Two-level run cache: one poller for the experiments folder listing and one
poller per run uuid, created lazily the first time the run is requested."""

import time
from asyncio import gather
from typing import Any, Callable, Dict, List, Optional

from labboard.config.appsettings import CacheConfig
from labboard.exceptions import ExperimentNotFoundError, RunNotFoundError
from labboard.logger import get_logger
from labboard.models.run_model import RunCollection, RunModel
from labboard.modules.concurrent_dict import ConcurrentDict
from labboard.services.cache.poller import AdaptivePoller
from labboard.services.cache.run_loader import RunLoader
from labboard.services.cache.runs_set_loader import RunsSet, RunsSetLoader
from labboard.services.lab_storage import LabStorage
from labboard.services.run_reader import RunReader
from labboard.utils.log_sanitizer import sanitize_for_log
from labboard.utils.performance_tracker import PerformanceTracker, perf_tracker

logger = get_logger("run_cache")


def find_experiment(
    runs_set: RunsSet, uuid: str, preferred: Optional[str] = None
) -> Optional[str]:
    """Name of the experiment listing `uuid`, favouring `preferred` if it still does."""
    if preferred is not None and uuid in runs_set.get(preferred, ()):
        return preferred
    for name, runs in runs_set.items():
        if uuid in runs:
            return name
    return None


class RunCache:
    def __init__(
        self,
        storage: LabStorage,
        settings: Optional[CacheConfig] = None,
        reader: Optional[RunReader] = None,
        clock: Callable[[], float] = time.monotonic,
        tracker: PerformanceTracker = perf_tracker,
    ):
        self.storage = storage
        self.settings = settings or CacheConfig()
        self.reader = reader or RunReader(storage)
        self.clock = clock
        self.tracker = tracker

        self.runs_set: AdaptivePoller[RunsSet] = AdaptivePoller(
            RunsSetLoader(storage),
            min_delay=self.settings.min_delay_seconds,
            max_delay=self.settings.runs_set_max_delay_seconds,
            backoff_factor=self.settings.backoff_factor,
            clock=clock,
        )
        self.runs = ConcurrentDict()

    def _new_run_poller(self, name: str, uuid: str) -> AdaptivePoller[RunModel]:
        loader = RunLoader(
            name,
            uuid,
            self.storage,
            reader=self.reader,
            slow_load_ms=self.settings.slow_load_ms,
            tracker=self.tracker,
        )
        return AdaptivePoller(
            loader,
            min_delay=self.settings.min_delay_seconds,
            max_delay=self.settings.max_delay_seconds,
            backoff_factor=self.settings.backoff_factor,
            clock=self.clock,
        )

    async def _get_runs_set(self) -> RunsSet:
        runs_set = await self.runs_set.get()
        return runs_set if runs_set is not None else {}

    async def get_run(self, uuid: str) -> Optional[RunModel]:
        """Snapshot of run `uuid`, or None when it cannot be read right now.

        Raises RunNotFoundError when no experiment has ever listed the uuid.
        """
        poller: Optional[AdaptivePoller[RunModel]] = self.runs.get(uuid)
        current = poller.loader.name if poller is not None else None

        name = find_experiment(await self._get_runs_set(), uuid, preferred=current)
        if name is None:
            if poller is None:
                raise RunNotFoundError(uuid)
        elif name != current:
            if current is not None:
                logger.info(
                    "Run %s moved from %s to %s",
                    sanitize_for_log(uuid),
                    sanitize_for_log(current),
                    sanitize_for_log(name),
                )
            poller = self.runs.get_or_add(
                uuid,
                lambda: self._new_run_poller(name, uuid),
                replace_if=lambda existing: existing.loader.name != name,
            )

        return await poller.get()

    async def _get_run_or_none(self, uuid: str) -> Optional[RunModel]:
        try:
            return await self.get_run(uuid)
        except RunNotFoundError:
            # Dropped from the listing by a concurrent invalidation.
            return None

    async def get_experiment(self, name: str) -> List[RunModel]:
        runs_set = await self._get_runs_set()
        if name not in runs_set:
            raise ExperimentNotFoundError(name)

        runs = await gather(*(self._get_run_or_none(r) for r in runs_set[name]))
        return [r for r in runs if r is not None]

    async def get_all(self) -> RunCollection:
        runs_set = await self._get_runs_set()
        uuids = [uuid for runs in runs_set.values() for uuid in runs]

        runs = await gather(*(self._get_run_or_none(r) for r in uuids))
        return RunCollection(r for r in runs if r is not None)

    def invalidate(self, uuid: str) -> None:
        """Forget run `uuid` and re-list the experiments folder on next access."""
        self.runs.remove(uuid)
        self.runs_set.reset()

    def stats(self) -> Dict[str, Any]:
        pollers = self.runs.values()
        runs_set = self.runs_set.cached or {}
        return {
            "experiments": len(runs_set),
            "runs_listed": sum(len(runs) for runs in runs_set.values()),
            "runs_tracked": len(pollers),
            "runs_loaded": sum(1 for p in pollers if p.cached is not None),
            "runs_set_delay_seconds": self.runs_set.delay,
        }
