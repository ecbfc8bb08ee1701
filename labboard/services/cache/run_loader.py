# =============================================================================
# File: run_loader.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import time
from asyncio import gather
from typing import Optional

import yaml

from labboard.exceptions import StorageException
from labboard.logger import get_logger
from labboard.models.run_model import RunModel
from labboard.services.cache.poller import UNCHANGED, LoadResult, Updated
from labboard.services.lab_storage import (
    ARTIFACTS_DIR,
    CHECKPOINTS_DIR,
    RUN_FILE,
    SQLITE_FILE,
    TENSORBOARD_DIR,
    LabStorage,
)
from labboard.services.run_reader import RunReader
from labboard.services.run_schema import fix_run_model
from labboard.utils.error_handler import ErrorHandler
from labboard.utils.log_sanitizer import sanitize_for_log
from labboard.utils.performance_tracker import PerformanceTracker, perf_tracker

logger = get_logger("run_loader")

SLOW_LOAD_MS = 100.0


class RunLoader:
    """Loads one run, using its step signal to skip reloads of idle runs."""

    def __init__(
        self,
        name: str,
        uuid: str,
        storage: LabStorage,
        reader: Optional[RunReader] = None,
        slow_load_ms: float = SLOW_LOAD_MS,
        tracker: PerformanceTracker = perf_tracker,
    ):
        self.name = name
        self.uuid = uuid
        self.storage = storage
        self.reader = reader or RunReader(storage)
        self.slow_load_ms = slow_load_ms
        self.tracker = tracker

    async def load_if_updated(self, original: Optional[RunModel]) -> LoadResult[RunModel]:
        if original is None:
            return await self.watched_load()

        try:
            max_step = await self.reader.read_max_step(self.name, self.uuid)
        except Exception as e:
            ErrorHandler.handle_exception(e, f"Step check of run {self.name} - {self.uuid}")
            return UNCHANGED

        if max_step != original.max_step:
            return await self.watched_load()

        return UNCHANGED

    async def watched_load(self) -> LoadResult[RunModel]:
        start = time.perf_counter()
        with self.tracker.track("run_load"):
            loaded = await self.load()
        elapsed_ms = (time.perf_counter() - start) * 1000
        if elapsed_ms > self.slow_load_ms:
            logger.warning(
                "Loaded run %s %s in %.0f ms",
                sanitize_for_log(self.name),
                sanitize_for_log(self.uuid),
                elapsed_ms,
            )

        if loaded is None:
            return UNCHANGED
        return Updated(loaded)

    async def load(self) -> Optional[RunModel]:
        """Full load of the run; None when it cannot be read right now."""
        run_file = self.storage.run_path(self.name, self.uuid, RUN_FILE)
        try:
            contents = await self.storage.read_text(run_file)
        except StorageException:
            logger.info(
                "Failed to read run %s - %s",
                sanitize_for_log(self.name),
                sanitize_for_log(self.uuid),
            )
            return None

        try:
            raw = yaml.safe_load(contents)
            data = fix_run_model(self.name, raw)

            run_path = self.storage.run_path
            (
                total_size,
                artifacts_size,
                checkpoints_size,
                tensorboard_size,
                sqlite_size,
                analytics_size,
                values,
                configs,
            ) = await gather(
                self.storage.disk_usage(run_path(self.name, self.uuid)),
                self.storage.disk_usage(run_path(self.name, self.uuid, ARTIFACTS_DIR)),
                self.storage.disk_usage(run_path(self.name, self.uuid, CHECKPOINTS_DIR)),
                self.storage.disk_usage(run_path(self.name, self.uuid, TENSORBOARD_DIR)),
                self.storage.disk_usage(run_path(self.name, self.uuid, SQLITE_FILE)),
                self.storage.disk_usage(self.storage.run_analytics_path(self.name, self.uuid)),
                self.reader.read_values(self.name, self.uuid),
                self.reader.read_configs(self.name, self.uuid),
            )

            return RunModel(
                **data,
                uuid=self.uuid,
                values=values,
                configs=configs,
                total_size=total_size,
                artifacts_size=artifacts_size,
                checkpoints_size=checkpoints_size,
                tensorboard_size=tensorboard_size,
                sqlite_size=sqlite_size,
                analytics_size=analytics_size,
            )
        except Exception as e:
            # Malformed files of one run must not fail the loads of its siblings.
            ErrorHandler.handle_exception(e, f"Load of run {self.name} - {self.uuid}")
            return None
