# =============================================================================
# File: appsettings.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import List

from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    name: str = Field(default="Labboard")
    description: str = Field(default="Experiment dashboard API")
    version: str = Field(default="0.1.0")
    is_production: bool = Field(default=False)
    debug: bool = Field(default=False)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class ServerConfig(BaseModel):
    type: str = Field(default="uvicorn")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5005)
    keepalive_timeout: int = Field(default=5)
    graceful_timeout: int = Field(default=10)


class LabConfig(BaseModel):
    experiments_path: str = Field(default="logs/experiments")
    analytics_path: str = Field(default="logs/analytics")


class CacheConfig(BaseModel):
    min_delay_seconds: float = Field(default=5.0, gt=0)
    max_delay_seconds: float = Field(default=2 * 60 * 60, gt=0)
    runs_set_max_delay_seconds: float = Field(default=30.0, gt=0)
    backoff_factor: float = Field(default=1.5, gt=1.0)
    slow_load_ms: float = Field(default=100.0, ge=0)


class LoggingConfig(BaseModel):
    folder: str = Field(default="logs")
    app_log_file: str = Field(default="labboard.log")


class AppSettings(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    lab: LabConfig = Field(default_factory=LabConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
