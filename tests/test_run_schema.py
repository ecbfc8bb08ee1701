# =============================================================================
# File: test_run_schema.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from labboard.models.run_model import RUN_SCHEMA_VERSION, RunModel
from labboard.services.run_schema import fix_run_model


def test_defaults_for_empty_file():
    data = fix_run_model("mnist", None)

    assert data["name"] == "mnist"
    assert data["schema_version"] == RUN_SCHEMA_VERSION
    assert data["commit"] == "unknown"
    assert data["is_dirty"] is True
    assert data["tags"] == []
    assert data["start_step"] == 0
    assert data["load_run"] is None


def test_folder_name_wins_over_recorded_name():
    assert fix_run_model("cifar", {"name": "mnist"})["name"] == "cifar"


def test_legacy_trial_time_is_split():
    data = fix_run_model("mnist", {"trial_time": "2019-05-01 12:30:00"})

    assert data["trial_date"] == "2019-05-01"
    assert data["trial_time"] == "12:30:00"


def test_derived_keys_are_dropped():
    data = fix_run_model("mnist", {"uuid": "forged", "total_size": 1, "values": {}})

    assert "uuid" not in data
    assert "total_size" not in data
    assert "values" not in data


def test_values_are_coerced():
    data = fix_run_model(
        "mnist",
        {"tags": "cnn, small,", "start_step": "12", "is_dirty": 0, "commit": 1234},
    )

    assert data["tags"] == ["cnn", "small"]
    assert data["start_step"] == 12
    assert data["is_dirty"] is False
    assert data["commit"] == "1234"


def test_bad_start_step_falls_back_to_zero():
    assert fix_run_model("mnist", {"start_step": "latest"})["start_step"] == 0


def test_unknown_keys_survive_into_model():
    data = fix_run_model("mnist", {"custom": {"a": 1}})
    run = RunModel(uuid="r1", **data)

    assert run.model_dump()["custom"] == {"a": 1}


def test_non_string_keys_are_stringified():
    data = fix_run_model("mnist", {1: "x", "comment": "ok"})
    run = RunModel(uuid="r1", **data)

    assert data["1"] == "x"
    assert run.comment == "ok"
