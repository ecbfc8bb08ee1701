# =============================================================================
# File: experiments_service.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Process-wide access point to the run cache for the HTTP layer."""

import threading
import time
from typing import Any, Dict, List, Optional

from labboard.logger import get_logger
from labboard.models.run_model import RunCollection, RunModel
from labboard.services.cache.run_cache import RunCache
from labboard.services.lab_storage import LabStorage
from labboard.utils.log_sanitizer import sanitize_for_log
from labboard.utils.performance_tracker import perf_tracker

logger = get_logger("experiments_service")


class ExperimentsService:
    """Thin facade over one `RunCache` that times and logs collection loads."""

    def __init__(self, cache: RunCache):
        self.cache = cache

    async def load(self) -> RunCollection:
        start = time.perf_counter()
        with perf_tracker.track("collection_load"):
            collection = await self.cache.get_all()
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Loaded runs in {elapsed_ms:.0f} ms")
        return collection

    async def get_run(self, uuid: str) -> Optional[RunModel]:
        return await self.cache.get_run(uuid)

    async def get_experiment(self, name: str) -> List[RunModel]:
        return await self.cache.get_experiment(name)

    def cache_reset(self, uuid: str) -> None:
        logger.debug("Resetting cache for run %s", sanitize_for_log(uuid))
        self.cache.invalidate(uuid)

    def stats(self) -> Dict[str, Any]:
        return self.cache.stats()


_INIT_LOCK = threading.Lock()
_SERVICE: Optional[ExperimentsService] = None


def _build_default_service() -> ExperimentsService:
    # Lazy import so tests can use the service without loading appsettings.
    from labboard.app_init import APP_SETTINGS

    storage = LabStorage(
        APP_SETTINGS.lab.experiments_path, APP_SETTINGS.lab.analytics_path
    )
    return ExperimentsService(RunCache(storage, APP_SETTINGS.cache))


def get_experiments_service() -> ExperimentsService:
    """Return the process-wide service, building it from APP_SETTINGS on first use."""
    global _SERVICE
    if _SERVICE is not None:
        return _SERVICE

    with _INIT_LOCK:
        if _SERVICE is None:
            _SERVICE = _build_default_service()
    return _SERVICE


def set_experiments_service(service: Optional[ExperimentsService]) -> None:
    """Install `service` as the process-wide instance; None rebuilds lazily."""
    global _SERVICE
    with _INIT_LOCK:
        _SERVICE = service
