# =============================================================================
# File: runs_response.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import List, Optional

from pydantic import BaseModel, Field

from labboard.models.run_model import RunModel


class BaseResponse(BaseModel):
    success: bool = Field(True, description="Whether the request succeeded.")
    message: str = Field("", description="Human readable status message.")
    time_taken: float = Field(0.0, description="Server-side handling time in seconds.")


class RunResponse(BaseResponse):
    """
    Response model for a single run.
    """

    run: Optional[RunModel] = Field(None, description="The requested run.")


class RunsResponse(BaseResponse):
    """
    Response model for a list of runs.
    """

    count: int = Field(0, description="Number of runs returned.")
    runs: List[RunModel] = Field(default_factory=list)


class InvalidateResponse(BaseResponse):
    uuid: str = Field(..., description="Run whose cache entry was dropped.")
