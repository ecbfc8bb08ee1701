# =============================================================================
# File: runs_set_loader.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Dict, Optional, Set

from labboard.exceptions import StorageException
from labboard.logger import get_logger
from labboard.services.cache.poller import UNCHANGED, LoadResult, Updated
from labboard.services.lab_storage import LabStorage
from labboard.utils.log_sanitizer import sanitize_for_log

logger = get_logger("runs_set_loader")

# Experiment name -> uuids of the runs found in its folder.
RunsSet = Dict[str, Set[str]]

RUNS_SET_MAX_DELAY = 30.0


def is_hidden_experiment(name: str) -> bool:
    return name.startswith("_") or name.startswith(".")


def is_updated(original: Optional[RunsSet], loaded: RunsSet) -> bool:
    """True when `loaded` has an experiment or run that `original` lacks.

    Runs that disappeared do not count as a change. Lookups of a deleted
    run keep resolving through the old set until it is reset.
    """
    if original is None:
        return True

    for name, runs in loaded.items():
        if name not in original:
            return True
        known = original[name]
        for uuid in runs:
            if uuid not in known:
                return True

    return False


class RunsSetLoader:
    """Enumerates experiments and their runs under the experiments folder."""

    def __init__(self, storage: LabStorage):
        self.storage = storage

    async def load_if_updated(self, original: Optional[RunsSet]) -> LoadResult[RunsSet]:
        try:
            loaded = await self.load()
        except StorageException as e:
            logger.warning(
                "Failed to list experiments: %s", sanitize_for_log(e.message)
            )
            return UNCHANGED

        if is_updated(original, loaded):
            count = sum(len(runs) for runs in loaded.values())
            logger.info(f"Found {count} runs")
            return Updated(loaded)

        return UNCHANGED

    async def load(self) -> RunsSet:
        res: RunsSet = {}
        for name in await self.storage.list_dir(self.storage.experiments_path):
            if is_hidden_experiment(name):
                continue

            exp_path = self.storage.experiment_path(name)
            try:
                if not await self.storage.is_dir(exp_path):
                    continue
                entries = await self.storage.list_dir(exp_path)
            except StorageException as e:
                # Removed or renamed while listing; picked up on the next poll.
                logger.debug(
                    "Skipping experiment %s: %s",
                    sanitize_for_log(name),
                    sanitize_for_log(e.message),
                )
                continue

            res[name] = {r for r in entries if not r.startswith(".")}

        return res
