# =============================================================================
# File: exceptions.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Custom exceptions for the Labboard application."""
from typing import Optional


class LabboardBaseException(Exception):
    """Base exception for all Labboard errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)


class LookupException(LabboardBaseException):
    """Requested entity is not known to the cache."""

    pass


class RunNotFoundError(LookupException):
    """Run uuid was never observed under any experiment."""

    def __init__(self, uuid: str, error_code: Optional[str] = None):
        self.uuid = uuid
        super().__init__(f"Run not found: {uuid}", error_code or "RUN_NOT_FOUND")


class ExperimentNotFoundError(LookupException):
    """Experiment directory is not present in the lab."""

    def __init__(self, name: str, error_code: Optional[str] = None):
        self.name = name
        super().__init__(
            f"Experiment not found: {name}", error_code or "EXPERIMENT_NOT_FOUND"
        )


class RunUnavailableError(LabboardBaseException):
    """Run is known but its data could not be read."""

    def __init__(self, uuid: str, error_code: Optional[str] = None):
        self.uuid = uuid
        super().__init__(
            f"Run data currently unavailable: {uuid}", error_code or "RUN_UNAVAILABLE"
        )


class StorageException(LabboardBaseException):
    """Errors raised by the lab storage layer."""

    pass


class StorageReadError(StorageException):
    """A file or directory in the lab could not be read."""

    pass


class ConfigurationException(LabboardBaseException):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationException):
    """Invalid configuration parameters."""

    pass


class MissingConfigError(ConfigurationException):
    """Required configuration missing."""

    pass
