# =============================================================================
# File: logger.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import logging
import os
from typing import Optional, Set

# Destination of loggers created without an explicit log file; set from the
# `logging` section of appsettings by `configure_log_file`.
_log_dir: Optional[str] = None
_log_file = "labboard.log"
_default_loggers: Set[str] = set()


def get_logger(
    name: str = "labboard", log_file: str = None, log_dir: str = None
) -> logging.Logger:
    """Return a named logger writing to the console and a log file.

    Without arguments the file is the configured app log, in the configured
    folder or `LABBOARD_LOG_FOLDER` (or `logs`) before settings are loaded.
    """
    if log_file is None and log_dir is None:
        _default_loggers.add(name)
    if log_dir is None:
        log_dir = _log_dir or os.getenv("LABBOARD_LOG_FOLDER", "logs")
    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)
    if log_file is None:
        log_file = _log_file
    log_path = os.path.join(log_dir, log_file)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Console handler
    if not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    ):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    # File handler
    if not any(
        isinstance(h, logging.FileHandler)
        and h.baseFilename == os.path.abspath(log_path)
        for h in logger.handlers
    ):
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def configure_log_file(log_dir: str, log_file: str) -> None:
    """Move the app log to `log_dir/log_file`.

    Loggers already handed out by `get_logger` with default arguments have
    their file handler replaced; later calls use the new location.
    """
    global _log_dir, _log_file
    _log_dir = log_dir
    _log_file = log_file

    for name in list(_default_loggers):
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            logger.removeHandler(handler)
            handler.close()
        get_logger(name)
