# =============================================================================
# File: app_init.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from labboard.config.config_loader import ConfigLoader
from labboard.logger import configure_log_file, get_logger

APP_SETTINGS = ConfigLoader.get_app_settings()

configure_log_file(APP_SETTINGS.logging.folder, APP_SETTINGS.logging.app_log_file)

logger = get_logger("app_init")

logger.info(
    "Labboard settings loaded (experiments: %s, production: %s, log: %s)",
    APP_SETTINGS.lab.experiments_path,
    APP_SETTINGS.app.is_production,
    APP_SETTINGS.logging.app_log_file,
)
