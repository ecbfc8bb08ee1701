# =============================================================================
# File: run_model.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Bumped whenever `fix_run_model` learns to backfill a new field.
RUN_SCHEMA_VERSION = 3


class ScalarValue(BaseModel):
    """Latest value of one indicator series."""

    step: int = Field(0, description="Training step of the latest value.")
    value: Optional[float] = Field(None, description="Latest value of the series.")


class ConfigItem(BaseModel):
    """One entry of a run's configuration."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Configuration key.")
    computed: Any = Field(None, description="Value computed by the run.")
    value: Any = Field(None, description="Value or option name selected for the run.")
    options: List[str] = Field(default_factory=list)
    order: int = Field(-1, description="Definition order within the run.")
    type: str = Field("", description="Type name reported by the run.")
    is_hyperparam: Optional[bool] = Field(None)
    is_explicitly_specified: bool = Field(False)


class RunModel(BaseModel):
    """Materialized snapshot of one experiment run."""

    model_config = ConfigDict(extra="allow")

    uuid: str = Field(..., description="Unique identifier of the run.")
    name: str = Field(..., description="Name of the experiment the run belongs to.")
    schema_version: int = Field(RUN_SCHEMA_VERSION)

    comment: str = Field("")
    notes: str = Field("")
    tags: List[str] = Field(default_factory=list)
    commit: str = Field("unknown")
    commit_message: str = Field("")
    is_dirty: bool = Field(True)
    python_file: str = Field("")
    start_step: int = Field(0)
    trial_date: str = Field("")
    trial_time: str = Field("")
    load_run: Optional[str] = Field(None)

    values: Dict[str, ScalarValue] = Field(default_factory=dict)
    configs: Dict[str, ConfigItem] = Field(default_factory=dict)

    total_size: int = Field(0)
    artifacts_size: int = Field(0)
    checkpoints_size: int = Field(0)
    tensorboard_size: int = Field(0)
    sqlite_size: int = Field(0)
    analytics_size: int = Field(0)

    @property
    def max_step(self) -> int:
        """Largest step over all indicator series; 0 for a run with no values."""
        return get_max_step(self.values)


def get_max_step(values: Dict[str, ScalarValue]) -> int:
    max_step = 0
    for value in values.values():
        max_step = max(max_step, value.step)
    return max_step


class RunCollection:
    """Order-independent set of loaded runs, keyed by uuid."""

    def __init__(self, runs: Iterable[RunModel] = ()):
        self._runs: Dict[str, RunModel] = {r.uuid: r for r in runs}

    def __len__(self) -> int:
        return len(self._runs)

    def __iter__(self):
        return iter(self._runs.values())

    def __contains__(self, uuid: str) -> bool:
        return uuid in self._runs

    def get(self, uuid: str) -> Optional[RunModel]:
        return self._runs.get(uuid)

    def uuids(self) -> List[str]:
        return list(self._runs.keys())

    def experiments(self) -> List[str]:
        return sorted({r.name for r in self._runs.values()})

    def sorted_runs(self) -> List[RunModel]:
        """Runs ordered newest first, for stable serialization."""
        return sorted(
            self._runs.values(),
            key=lambda r: (r.trial_date, r.trial_time, r.uuid),
            reverse=True,
        )
