# =============================================================================
# File: run_schema.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Backfill run metadata written by older versions of the training tracker."""

from typing import Any, Dict, List

from labboard.models.run_model import RUN_SCHEMA_VERSION

# Filled in by the loader from the lab folder, never trusted from run.yaml.
_DERIVED_KEYS = (
    "uuid",
    "values",
    "configs",
    "total_size",
    "artifacts_size",
    "checkpoints_size",
    "tensorboard_size",
    "sqlite_size",
    "analytics_size",
)

_DEFAULTS: Dict[str, Any] = {
    "comment": "",
    "notes": "",
    "commit": "unknown",
    "commit_message": "",
    "is_dirty": True,
    "python_file": "",
    "start_step": 0,
    "trial_date": "",
    "trial_time": "",
    "load_run": None,
}


def fix_run_model(name: str, raw: Any) -> Dict[str, Any]:
    """Return run metadata in the current schema.

    `name` is the experiment folder the run was found in; it wins over any
    name recorded in the file because runs can be moved between experiments.
    """
    data: Dict[str, Any] = {}
    if isinstance(raw, dict):
        data = {str(k): v for k, v in raw.items()}

    for key in _DERIVED_KEYS:
        data.pop(key, None)

    # v1 stored "YYYY-MM-DD HH:MM:SS" in trial_time only.
    trial_time = data.get("trial_time")
    if not data.get("trial_date") and isinstance(trial_time, str) and " " in trial_time:
        date, _, time_of_day = trial_time.partition(" ")
        data["trial_date"] = date
        data["trial_time"] = time_of_day

    for key, default in _DEFAULTS.items():
        if data.get(key) is None:
            data[key] = default

    for key in (
        "trial_date",
        "trial_time",
        "comment",
        "notes",
        "commit",
        "commit_message",
        "python_file",
    ):
        data[key] = str(data[key])

    data["start_step"] = _to_int(data["start_step"])
    data["is_dirty"] = bool(data["is_dirty"])
    data["tags"] = _to_tags(data.get("tags"))
    data["name"] = name
    data["schema_version"] = RUN_SCHEMA_VERSION

    return data


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(t) for t in value]
    return [str(value)]
