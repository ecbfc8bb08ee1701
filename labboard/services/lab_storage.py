# =============================================================================
# File: lab_storage.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Filesystem access for the lab folder.

Every call runs the blocking `os` operation in the default executor so the
event loop keeps serving other requests while a slow disk answers.
"""

import os
import stat
from asyncio import get_running_loop
from typing import Callable, List, TypeVar

from labboard.exceptions import StorageReadError
from labboard.logger import get_logger
from labboard.utils.log_sanitizer import sanitize_for_log

logger = get_logger("lab_storage")

T = TypeVar("T")

RUN_FILE = "run.yaml"
CONFIGS_FILE = "configs.yaml"
SQLITE_FILE = "sqlite.db"
ARTIFACTS_DIR = "artifacts"
CHECKPOINTS_DIR = "checkpoints"
TENSORBOARD_DIR = "tensorboard"


class LabStorage:
    """Async view of the experiments and analytics folders."""

    def __init__(self, experiments_path: str, analytics_path: str):
        self.experiments_path = experiments_path
        self.analytics_path = analytics_path

    def experiment_path(self, name: str) -> str:
        return os.path.join(self.experiments_path, name)

    def run_path(self, name: str, uuid: str, *parts: str) -> str:
        return os.path.join(self.experiments_path, name, uuid, *parts)

    def run_analytics_path(self, name: str, uuid: str) -> str:
        return os.path.join(self.analytics_path, name, uuid)

    async def run_blocking(self, func: Callable[..., T], *args) -> T:
        loop = get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def list_dir(self, path: str) -> List[str]:
        try:
            return await self.run_blocking(os.listdir, path)
        except OSError as e:
            raise StorageReadError(f"Cannot list {path}: {e}") from e

    async def is_dir(self, path: str) -> bool:
        """True for a real directory; symlinks are not followed."""
        try:
            st = await self.run_blocking(os.lstat, path)
        except OSError as e:
            raise StorageReadError(f"Cannot stat {path}: {e}") from e
        return stat.S_ISDIR(st.st_mode)

    async def read_text(self, path: str) -> str:
        try:
            return await self.run_blocking(_read_file, path)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Cannot read {path}: {e}") from e

    async def disk_usage(self, path: str) -> int:
        """Recursive size in bytes; a missing path measures 0."""
        return await self.run_blocking(_disk_usage, path)


def _read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _disk_usage(path: str) -> int:
    try:
        st = os.lstat(path)
    except OSError:
        return 0
    if not stat.S_ISDIR(st.st_mode):
        return st.st_size

    total = 0
    for root, dirs, files in os.walk(path, onerror=_log_walk_error):
        for file_name in files:
            try:
                total += os.lstat(os.path.join(root, file_name)).st_size
            except OSError:
                # Removed between listing and stat.
                continue
    return total


def _log_walk_error(error: OSError) -> None:
    logger.debug("Skipping unreadable path: %s", sanitize_for_log(str(error)))
