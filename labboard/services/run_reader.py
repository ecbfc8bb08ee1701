# =============================================================================
# File: run_reader.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Readers for the indicator values and configurations of a run."""

import os
import sqlite3
from typing import Any, Dict, List
from urllib.parse import quote

import yaml

from labboard.exceptions import StorageReadError
from labboard.models.run_model import ConfigItem, ScalarValue
from labboard.services.lab_storage import CONFIGS_FILE, SQLITE_FILE, LabStorage

# SQLite returns the bare `value` column from the row holding MAX(step).
_LATEST_VALUES_SQL = "SELECT indicator, MAX(step), value FROM scalars GROUP BY indicator"
_MAX_STEP_SQL = "SELECT MAX(step) FROM scalars"


class RunReader:
    """Reads the indicator series and configuration of a run."""

    def __init__(self, storage: LabStorage):
        self.storage = storage

    async def read_values(self, name: str, uuid: str) -> Dict[str, ScalarValue]:
        """Latest value and step of every indicator of the run."""
        db_path = self.storage.run_path(name, uuid, SQLITE_FILE)
        rows = await self.storage.run_blocking(_query, db_path, _LATEST_VALUES_SQL)
        values: Dict[str, ScalarValue] = {}
        for indicator, step, value in rows:
            values[indicator] = ScalarValue(step=int(step or 0), value=value)
        return values

    async def read_max_step(self, name: str, uuid: str) -> int:
        """Largest step recorded for any indicator; 0 when nothing is recorded."""
        db_path = self.storage.run_path(name, uuid, SQLITE_FILE)
        rows = await self.storage.run_blocking(_query, db_path, _MAX_STEP_SQL)
        if not rows or rows[0][0] is None:
            return 0
        try:
            return int(rows[0][0])
        except (TypeError, ValueError) as e:
            raise StorageReadError(f"Invalid step in {db_path}: {rows[0][0]!r}") from e

    async def read_configs(self, name: str, uuid: str) -> Dict[str, ConfigItem]:
        path = self.storage.run_path(name, uuid, CONFIGS_FILE)
        try:
            contents = await self.storage.read_text(path)
        except StorageReadError:
            if not os.path.exists(path):
                return {}
            raise

        try:
            raw = yaml.safe_load(contents)
        except yaml.YAMLError as e:
            raise StorageReadError(f"Invalid configs file {path}: {e}") from e

        return parse_configs(raw)


def parse_configs(raw: Any) -> Dict[str, ConfigItem]:
    """Turn the parsed configs file into `ConfigItem`s.

    Older runs stored plain `key: value` pairs instead of descriptor
    mappings; those are wrapped so both shapes look the same downstream.
    """
    if not isinstance(raw, dict):
        return {}

    configs: Dict[str, ConfigItem] = {}
    for order, (key, entry) in enumerate(raw.items()):
        key = str(key)
        if isinstance(entry, dict):
            item = {str(k): v for k, v in entry.items()}
            item.setdefault("name", key)
            item.setdefault("order", order)
            item["options"] = _to_options(item.get("options"))
            if item.get("type") is None:
                item["type"] = ""
            configs[key] = ConfigItem(**item)
        else:
            configs[key] = ConfigItem(
                name=key,
                computed=entry,
                value=entry,
                order=order,
                is_explicitly_specified=True,
            )
    return configs


def _to_options(options: Any) -> List[str]:
    if options is None:
        return []
    if isinstance(options, (list, tuple, set)):
        return [str(o) for o in options]
    return [str(options)]


def _query(db_path: str, sql: str) -> list:
    if not os.path.exists(db_path):
        return []
    try:
        conn = sqlite3.connect(
            f"file:{quote(os.path.abspath(db_path))}?mode=ro", uri=True
        )
    except sqlite3.Error as e:
        raise StorageReadError(f"Cannot open {db_path}: {e}") from e
    try:
        return conn.execute(sql).fetchall()
    except sqlite3.OperationalError as e:
        # A run that has not logged anything yet has no scalars table.
        if "no such table" in str(e):
            return []
        raise StorageReadError(f"Cannot query {db_path}: {e}") from e
    except sqlite3.Error as e:
        raise StorageReadError(f"Cannot query {db_path}: {e}") from e
    finally:
        conn.close()
