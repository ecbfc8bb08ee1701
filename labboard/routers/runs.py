# =============================================================================
# File: runs.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import time

from fastapi import APIRouter, Depends

from labboard.exceptions import RunUnavailableError
from labboard.logger import get_logger
from labboard.models.runs_response import (
    InvalidateResponse,
    RunResponse,
    RunsResponse,
)
from labboard.services.experiments_service import (
    ExperimentsService,
    get_experiments_service,
)
from labboard.utils.log_sanitizer import sanitize_for_log

router = APIRouter()
logger = get_logger("router")

# Lookup and storage errors propagate as LabboardBaseException and are
# rendered with their error code by the application exception handler.


@router.get("/runs", response_model=RunsResponse)
async def list_runs(
    service: ExperimentsService = Depends(get_experiments_service),
) -> RunsResponse:
    start = time.perf_counter()
    collection = await service.load()
    runs = collection.sorted_runs()
    return RunsResponse(
        message=f"Loaded {len(runs)} runs",
        count=len(runs),
        runs=runs,
        time_taken=time.perf_counter() - start,
    )


@router.get("/runs/{uuid}", response_model=RunResponse)
async def get_run(
    uuid: str, service: ExperimentsService = Depends(get_experiments_service)
) -> RunResponse:
    logger.debug("Run request: %s", sanitize_for_log(uuid))
    start = time.perf_counter()
    run = await service.get_run(uuid)
    if run is None:
        raise RunUnavailableError(uuid)

    return RunResponse(
        message="Run loaded", run=run, time_taken=time.perf_counter() - start
    )


@router.get("/experiments/{name}/runs", response_model=RunsResponse)
async def list_experiment_runs(
    name: str, service: ExperimentsService = Depends(get_experiments_service)
) -> RunsResponse:
    start = time.perf_counter()
    runs = await service.get_experiment(name)
    runs = sorted(runs, key=lambda r: (r.trial_date, r.trial_time, r.uuid), reverse=True)
    return RunsResponse(
        message=f"Loaded {len(runs)} runs of {name}",
        count=len(runs),
        runs=runs,
        time_taken=time.perf_counter() - start,
    )


@router.post("/runs/{uuid}/invalidate", response_model=InvalidateResponse)
async def invalidate_run(
    uuid: str, service: ExperimentsService = Depends(get_experiments_service)
) -> InvalidateResponse:
    """Drop the cached copy of a run after it was edited or deleted."""
    service.cache_reset(uuid)
    return InvalidateResponse(message="Run cache reset", uuid=uuid)
