# =============================================================================
# File: health.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import os
import time
from datetime import datetime, timezone
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends, HTTPException

from labboard.logger import get_logger
from labboard.services.experiments_service import (
    ExperimentsService,
    get_experiments_service,
)
from labboard.utils.performance_tracker import perf_tracker

logger = get_logger("health")
router = APIRouter()

# Track service start time
SERVICE_START_TIME = time.time()


def get_memory_info() -> Dict[str, Any]:
    """Memory of this process and of the host, in MB."""
    try:
        process = psutil.Process(os.getpid())
        memory = psutil.virtual_memory()
        return {
            "process_rss_mb": process.memory_info().rss / (1024**2),
            "system_available_mb": memory.available / (1024**2),
            "system_percent": memory.percent,
        }
    except psutil.Error as e:
        logger.error(f"Failed to get memory info: {e}")
        return {}


@router.get("/health")
async def health_check(
    service: ExperimentsService = Depends(get_experiments_service),
):
    """Service status with cache and load timing statistics."""
    try:
        experiments_path = service.cache.storage.experiments_path
        lab_ok = os.path.isdir(experiments_path)
        return {
            "status": "healthy" if lab_ok else "degraded",
            "service": "Labboard",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": time.time() - SERVICE_START_TIME,
            "components": {"lab": "healthy" if lab_ok else "unhealthy"},
            "memory": get_memory_info(),
            "cache": service.stats(),
            "performance": perf_tracker.get_all_stats(),
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")
