# =============================================================================
# File: config_loader.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import json
import os

from pydantic import ValidationError

from labboard.config.appsettings import AppSettings
from labboard.exceptions import InvalidConfigError, MissingConfigError
from labboard.logger import get_logger
from labboard.utils.log_sanitizer import sanitize_for_log

logger = get_logger("config_loader")


class ConfigLoader:

    @staticmethod
    def get_app_settings() -> AppSettings:
        """
        Loads AppSettings from appsettings.json and environment-specific override in the same folder.
        Performs a deep merge for nested config sections, then applies environment variables.
        """
        data = ConfigLoader._load_config_data("appsettings.json", True)
        try:
            settings = AppSettings(**data)
        except ValidationError as e:
            logger.error("Invalid appsettings: %s", sanitize_for_log(str(e)))
            raise InvalidConfigError(f"Invalid appsettings: {e}")

        settings.app.is_production = os.getenv(
            "LABBOARD_ENV", "Production"
        ).lower() in ["production", "enterprise"]
        settings.app.debug = (
            os.getenv("APP_DEBUG_MODE", "1" if settings.app.debug else "0") == "1"
        )

        settings.server.host = os.getenv("SERVER_HOST", settings.server.host)
        settings.server.port = ConfigLoader._env_number(
            "SERVER_PORT", settings.server.port, int
        )

        settings.lab.experiments_path = os.getenv(
            "LABBOARD_EXPERIMENTS_PATH", settings.lab.experiments_path
        )
        settings.lab.analytics_path = os.getenv(
            "LABBOARD_ANALYTICS_PATH", settings.lab.analytics_path
        )

        settings.cache.min_delay_seconds = ConfigLoader._env_number(
            "LABBOARD_MIN_DELAY", settings.cache.min_delay_seconds, float
        )
        settings.cache.max_delay_seconds = ConfigLoader._env_number(
            "LABBOARD_MAX_DELAY", settings.cache.max_delay_seconds, float
        )
        settings.cache.runs_set_max_delay_seconds = ConfigLoader._env_number(
            "LABBOARD_RUNS_SET_MAX_DELAY",
            settings.cache.runs_set_max_delay_seconds,
            float,
        )
        settings.cache.backoff_factor = ConfigLoader._env_number(
            "LABBOARD_BACKOFF_FACTOR", settings.cache.backoff_factor, float
        )
        settings.cache.slow_load_ms = ConfigLoader._env_number(
            "LABBOARD_SLOW_LOAD_MS", settings.cache.slow_load_ms, float
        )

        settings.logging.folder = os.getenv(
            "LABBOARD_LOG_FOLDER", settings.logging.folder
        )

        ConfigLoader._validate_cache_settings(settings)
        ConfigLoader._validate_paths(settings)

        return settings

    @staticmethod
    def _env_number(key: str, default, cast):
        raw = os.getenv(key)
        if raw is None:
            return default
        try:
            return cast(raw)
        except ValueError:
            raise InvalidConfigError(
                f"Environment variable {key} must be a number, got {raw!r}"
            )

    @staticmethod
    def _validate_cache_settings(settings: AppSettings):
        cache = settings.cache
        if cache.min_delay_seconds <= 0:
            raise InvalidConfigError("cache.min_delay_seconds must be positive")
        if cache.backoff_factor <= 1.0:
            raise InvalidConfigError("cache.backoff_factor must be greater than 1")
        for key in ("max_delay_seconds", "runs_set_max_delay_seconds"):
            if getattr(cache, key) < cache.min_delay_seconds:
                raise InvalidConfigError(
                    f"cache.{key} must not be smaller than cache.min_delay_seconds"
                )

    @staticmethod
    def _validate_paths(settings: AppSettings):
        """Warn about lab folders that are missing; the cache tolerates them."""
        for label, path in (
            ("experiments", settings.lab.experiments_path),
            ("analytics", settings.lab.analytics_path),
        ):
            if not os.path.exists(path):
                logger.warning(
                    "Lab %s path does not exist yet: %s", label, sanitize_for_log(path)
                )
            elif not os.path.isdir(path):
                raise InvalidConfigError(f"Lab {label} path is not a directory: {path}")
            else:
                logger.info(
                    "Validated lab %s path: %s", label, sanitize_for_log(path)
                )

    @staticmethod
    def _load_config_data(config_file_name: str, check_env_file: bool = False) -> dict:
        """
        Loads a config file and merges with environment-specific override if present.
        Performs a deep merge for nested config sections.
        """
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, config_file_name)

        logger.debug(f"Loading config from {config_file_name}")

        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and isinstance(d.get(k), dict):
                    deep_update(d[k], v)
                else:
                    d[k] = v

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, FileNotFoundError) as e:
            logger.error("Config file not accessible: %s", sanitize_for_log(str(e)))
            raise MissingConfigError(f"Cannot access config file {config_file_name}: {e}")
        except (json.JSONDecodeError, ValueError) as e:
            logger.error("Invalid config format: %s", sanitize_for_log(str(e)))
            raise InvalidConfigError(f"Config file format error: {e}")

        if check_env_file:
            env = os.getenv("LABBOARD_ENV", "Production")
            name, ext = os.path.splitext(config_file_name)
            env_file = f"{name}.{env.lower()}{ext}"
            env_path = os.path.join(base_dir, env_file)
            logger.debug(f"Loading config from {env_file}")
            try:
                with open(env_path, "r", encoding="utf-8") as f:
                    env_data = json.load(f)
                deep_update(data, env_data)
            except (OSError, FileNotFoundError):
                logger.info(
                    f"Environment-specific config file not found: {env_file}. Using base config."
                )
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(
                    "Invalid environment config format in %s: %s",
                    sanitize_for_log(env_file),
                    sanitize_for_log(str(e)),
                )
                raise InvalidConfigError(f"Environment config format error: {e}")

        return data
