# =============================================================================
# File: conftest.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import logging
import os
import sqlite3
import sys
import tempfile
import types

# Keep test log files out of the working tree.
os.environ.setdefault("LABBOARD_LOG_FOLDER", tempfile.mkdtemp(prefix="labboard-logs-"))

# Provide a lightweight `labboard.app_init` shim at import time to avoid running
# ConfigLoader during test collection.
if "labboard.app_init" not in sys.modules:
    shim = types.ModuleType("labboard.app_init")
    shim.APP_SETTINGS = types.SimpleNamespace(
        server=types.SimpleNamespace(
            host="localhost",
            port=5005,
            keepalive_timeout=5,
            graceful_timeout=5,
        ),
        app=types.SimpleNamespace(
            name="Labboard Test",
            description="Test",
            version="0.0.0",
            is_production=False,
            debug=True,
            cors_origins=["*"],
        ),
        lab=types.SimpleNamespace(
            experiments_path=os.path.join(tempfile.gettempdir(), "labboard-experiments"),
            analytics_path=os.path.join(tempfile.gettempdir(), "labboard-analytics"),
        ),
        cache=types.SimpleNamespace(
            min_delay_seconds=5.0,
            max_delay_seconds=7200.0,
            runs_set_max_delay_seconds=30.0,
            backoff_factor=1.5,
            slow_load_ms=100.0,
        ),
        logging=types.SimpleNamespace(folder=os.environ["LABBOARD_LOG_FOLDER"]),
    )
    sys.modules["labboard.app_init"] = shim

import pytest
import yaml

from labboard.config.appsettings import CacheConfig
from labboard.services.cache.run_cache import RunCache
from labboard.services.lab_storage import LabStorage
from labboard.utils.performance_tracker import PerformanceTracker


@pytest.fixture(autouse=True, scope="session")
def silence_noisy_loggers():
    """Raise log level for loggers that report expected failures in tests."""
    noisy_loggers = ["run_loader", "runs_set_loader", "config_loader", "error_handler"]
    previous_levels = {}
    for name in noisy_loggers:
        logger = logging.getLogger(name)
        previous_levels[name] = logger.level
        logger.setLevel(logging.ERROR)

    yield

    for name, level in previous_levels.items():
        logging.getLogger(name).setLevel(level)


class FakeClock:
    """Monotonic clock that only moves when a test advances it."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class LabBuilder:
    """Writes experiment runs in the on-disk layout the cache reads."""

    def __init__(self, root):
        self.experiments_path = str(root / "experiments")
        self.analytics_path = str(root / "analytics")
        os.makedirs(self.experiments_path)
        os.makedirs(self.analytics_path)

    def run_dir(self, experiment: str, uuid: str) -> str:
        return os.path.join(self.experiments_path, experiment, uuid)

    def add_run(self, experiment, uuid, run=None, scalars=None, configs=None):
        path = self.run_dir(experiment, uuid)
        os.makedirs(path, exist_ok=True)
        meta = {
            "name": experiment,
            "comment": f"run {uuid}",
            "trial_date": "2026-01-01",
            "trial_time": "10:00:00",
        }
        meta.update(run or {})
        with open(os.path.join(path, "run.yaml"), "w", encoding="utf-8") as f:
            yaml.safe_dump(meta, f)
        if scalars:
            self.add_scalars(experiment, uuid, scalars)
        if configs is not None:
            with open(os.path.join(path, "configs.yaml"), "w", encoding="utf-8") as f:
                yaml.safe_dump(configs, f)
        return path

    def add_scalars(self, experiment, uuid, rows):
        """Append (indicator, step, value) rows to the run's sqlite.db."""
        db_path = os.path.join(self.run_dir(experiment, uuid), "sqlite.db")
        conn = sqlite3.connect(db_path)
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS scalars (indicator text, step integer, value real)"
            )
            conn.executemany("INSERT INTO scalars VALUES (?, ?, ?)", rows)
            conn.commit()
        finally:
            conn.close()

    def write_file(self, relative_path: str, size: int) -> str:
        path = os.path.join(self.experiments_path, relative_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(b"x" * size)
        return path

    def add_analytics(self, experiment, uuid, file_name: str, size: int) -> str:
        path = os.path.join(self.analytics_path, experiment, uuid, file_name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(b"x" * size)
        return path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lab(tmp_path):
    return LabBuilder(tmp_path)


@pytest.fixture
def storage(lab):
    return LabStorage(lab.experiments_path, lab.analytics_path)


@pytest.fixture
def cache_settings():
    return CacheConfig(
        min_delay_seconds=5.0,
        max_delay_seconds=7200.0,
        runs_set_max_delay_seconds=30.0,
        backoff_factor=1.5,
        slow_load_ms=100.0,
    )


@pytest.fixture
def run_cache(storage, cache_settings, clock):
    return RunCache(
        storage, cache_settings, clock=clock, tracker=PerformanceTracker()
    )
