# =============================================================================
# File: test_run_cache.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import asyncio
import os
import shutil

import pytest

from labboard.exceptions import ExperimentNotFoundError, RunNotFoundError
from labboard.services.cache.run_cache import find_experiment


def test_find_experiment_prefers_current_experiment():
    runs_set = {"a": {"r1"}, "b": {"r1", "r2"}}

    assert find_experiment(runs_set, "r1", preferred="b") == "b"
    assert find_experiment(runs_set, "r2") == "b"
    assert find_experiment(runs_set, "r2", preferred="a") == "b"
    assert find_experiment(runs_set, "r9") is None


@pytest.mark.asyncio
async def test_get_all_skips_unreadable_runs(lab, run_cache):
    lab.add_run("A", "r1")
    os.makedirs(lab.run_dir("A", "r2"))  # no run.yaml yet
    lab.add_run("B", "r3")

    collection = await run_cache.get_all()

    assert len(collection) == 2
    assert sorted(collection.uuids()) == ["r1", "r3"]
    assert collection.experiments() == ["A", "B"]


@pytest.mark.asyncio
async def test_get_all_skips_malformed_runs(lab, run_cache):
    lab.add_run("A", "r1")
    lab.add_run("A", "r2", configs={"lr": {"value": 1, "options": 5}})
    lab.add_run("A", "r5", configs={"lr": {"value": 1, "name": [1, 2]}})
    lab.add_run("B", "r3", run={1: "x", "comment": ["not", "a", "string"]})
    path = lab.add_run("B", "r4")
    with open(os.path.join(path, "run.yaml"), "w", encoding="utf-8") as f:
        f.write("- just\n- a list\n")

    collection = await run_cache.get_all()

    assert sorted(collection.uuids()) == ["r1", "r2", "r3", "r4"]
    assert collection.get("r2").configs["lr"].options == ["5"]
    assert collection.get("r3").comment == "['not', 'a', 'string']"
    assert await run_cache.get_run("r5") is None


@pytest.mark.asyncio
async def test_bad_step_column_keeps_cached_run(lab, run_cache, clock):
    lab.add_run("A", "r1", scalars=[("loss", 1, 0.5)])
    first = await run_cache.get_run("r1")

    lab.add_scalars("A", "r1", [("loss", "eleven", 0.4)])
    clock.advance(5.0)

    assert await run_cache.get_run("r1") is first


@pytest.mark.asyncio
async def test_get_run_loads_once_until_due(lab, run_cache, clock):
    lab.add_run("A", "r1", scalars=[("loss", 1, 1.0)])

    first = await run_cache.get_run("r1")
    lab.add_scalars("A", "r1", [("loss", 2, 0.5)])
    second = await run_cache.get_run("r1")
    assert second is first

    clock.advance(5.0)
    third = await run_cache.get_run("r1")
    assert third.max_step == 2


@pytest.mark.asyncio
async def test_unknown_run_raises(lab, run_cache):
    lab.add_run("A", "r1")

    with pytest.raises(RunNotFoundError) as exc_info:
        await run_cache.get_run("nope")

    assert exc_info.value.uuid == "nope"
    assert run_cache.runs.get("nope") is None


@pytest.mark.asyncio
async def test_run_moved_then_invalidated(lab, run_cache, clock):
    lab.add_run("A", "r1")
    run = await run_cache.get_run("r1")
    assert run.name == "A"

    os.makedirs(os.path.join(lab.experiments_path, "B"))
    shutil.move(lab.run_dir("A", "r1"), lab.run_dir("B", "r1"))
    run_cache.invalidate("r1")

    moved = await run_cache.get_run("r1")
    assert moved.name == "B"
    assert run_cache.runs.get("r1").loader.name == "B"


@pytest.mark.asyncio
async def test_run_moved_is_found_on_next_listing(lab, run_cache, clock):
    lab.add_run("A", "r1")
    assert (await run_cache.get_run("r1")).name == "A"
    old_poller = run_cache.runs.get("r1")

    os.makedirs(os.path.join(lab.experiments_path, "B"))
    shutil.move(lab.run_dir("A", "r1"), lab.run_dir("B", "r1"))
    assert (await run_cache.get_run("r1")).name == "A"

    clock.advance(5.0)
    moved = await run_cache.get_run("r1")

    assert moved.name == "B"
    assert run_cache.runs.get("r1") is not old_poller
    assert run_cache.runs.get("r1").loader.name == "B"


@pytest.mark.asyncio
async def test_invalidate_reloads_run(lab, run_cache):
    lab.add_run("A", "r1", run={"comment": "before"})
    assert (await run_cache.get_run("r1")).comment == "before"

    lab.add_run("A", "r1", run={"comment": "after"})
    assert (await run_cache.get_run("r1")).comment == "before"

    run_cache.invalidate("r1")
    assert (await run_cache.get_run("r1")).comment == "after"


@pytest.mark.asyncio
async def test_invalidate_unknown_run_is_harmless(lab, run_cache):
    lab.add_run("A", "r1")
    await run_cache.get_all()

    run_cache.invalidate("never-seen")

    assert len(await run_cache.get_all()) == 1


@pytest.mark.asyncio
async def test_new_run_found_after_runs_set_delay(lab, run_cache, clock):
    lab.add_run("A", "r1")
    await run_cache.get_all()

    lab.add_run("A", "r2")
    with pytest.raises(RunNotFoundError):
        await run_cache.get_run("r2")

    clock.advance(5.0)
    assert (await run_cache.get_run("r2")).uuid == "r2"


@pytest.mark.asyncio
async def test_concurrent_first_access_creates_one_poller(lab, run_cache):
    lab.add_run("A", "r1")

    runs = await asyncio.gather(*(run_cache.get_run("r1") for _ in range(10)))

    assert all(r is runs[0] for r in runs)
    assert len(run_cache.runs.values()) == 1


@pytest.mark.asyncio
async def test_get_experiment(lab, run_cache):
    lab.add_run("A", "r1")
    lab.add_run("A", "r2")
    lab.add_run("B", "r3")

    runs = await run_cache.get_experiment("A")

    assert sorted(r.uuid for r in runs) == ["r1", "r2"]
    with pytest.raises(ExperimentNotFoundError):
        await run_cache.get_experiment("C")


@pytest.mark.asyncio
async def test_stats(lab, run_cache):
    lab.add_run("A", "r1")
    os.makedirs(lab.run_dir("A", "r2"))
    lab.add_run("B", "r3")

    await run_cache.get_all()
    stats = run_cache.stats()

    assert stats["experiments"] == 2
    assert stats["runs_listed"] == 3
    assert stats["runs_tracked"] == 3
    assert stats["runs_loaded"] == 2
    assert stats["runs_set_delay_seconds"] == 5.0
