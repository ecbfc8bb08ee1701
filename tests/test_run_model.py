# =============================================================================
# File: test_run_model.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from labboard.models.run_model import RunCollection, RunModel, ScalarValue, get_max_step


def make_run(uuid, name="mnist", date="2026-01-01", time="10:00:00"):
    return RunModel(uuid=uuid, name=name, trial_date=date, trial_time=time)


def test_max_step_of_run_without_values():
    assert make_run("r1").max_step == 0


def test_get_max_step():
    values = {"loss": ScalarValue(step=4, value=0.1), "acc": ScalarValue(step=9)}
    assert get_max_step(values) == 9


def test_collection_is_keyed_by_uuid():
    collection = RunCollection([make_run("r1"), make_run("r2", name="cifar"), make_run("r1")])

    assert len(collection) == 2
    assert "r1" in collection
    assert collection.get("r3") is None
    assert collection.experiments() == ["cifar", "mnist"]


def test_sorted_runs_newest_first():
    collection = RunCollection(
        [
            make_run("old", date="2025-12-31"),
            make_run("new", date="2026-02-01"),
            make_run("mid", date="2026-01-15", time="08:00:00"),
        ]
    )

    assert [r.uuid for r in collection.sorted_runs()] == ["new", "mid", "old"]
