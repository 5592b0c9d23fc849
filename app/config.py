"""
Configuration for the Plant Care Engine
=======================================
Main application runtime settings, loaded from environment variables.
Sets up the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from app.constants import RESCAN_BATCH_SIZE


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("PLANTCARE_ENV", "development"))
    database_path: str = field(default_factory=lambda: os.getenv("PLANTCARE_DATABASE_PATH", "database/plantcare.db"))

    DEBUG: bool = field(default_factory=lambda: _env_bool("PLANTCARE_DEBUG", False))
    log_dir: str = field(default_factory=lambda: os.getenv("PLANTCARE_LOG_DIR", "logs"))

    # Background rescans of stored analyses
    rescan_batch_size: int = field(default_factory=lambda: _env_int("PLANTCARE_RESCAN_BATCH_SIZE", RESCAN_BATCH_SIZE))
    rescan_on_startup: bool = field(default_factory=lambda: _env_bool("PLANTCARE_RESCAN_ON_STARTUP", True))

    # Care reminders
    reminder_time: str = field(default_factory=lambda: os.getenv("PLANTCARE_REMINDER_TIME", "09:00"))
    reminders_paused: bool = field(default_factory=lambda: _env_bool("PLANTCARE_REMINDERS_PAUSED", False))
    reminder_timezone: str = field(default_factory=lambda: os.getenv("PLANTCARE_REMINDER_TZ", "UTC"))

    # Worker pools: small bounded pool for storage work, larger one for network calls
    storage_workers: int = field(default_factory=lambda: _env_int("PLANTCARE_STORAGE_WORKERS", 2))
    network_workers: int = field(default_factory=lambda: _env_int("PLANTCARE_NETWORK_WORKERS", 8))

    # Reject request bodies larger than this (photos are uploaded to the quality gate)
    max_upload_mb: int = field(default_factory=lambda: _env_int("PLANTCARE_MAX_UPLOAD_MB", 16))

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "DATABASE_PATH": self.database_path,
            "DEBUG": self.DEBUG,
            "MAX_CONTENT_LENGTH": self.max_upload_mb * 1024 * 1024,
        }


def validate_config(config: AppConfig) -> list[str]:
    """Return a list of configuration warnings (empty when everything looks sane)."""
    warnings: list[str] = []

    if config.rescan_batch_size < 1:
        warnings.append(f"rescan_batch_size must be positive (got {config.rescan_batch_size}); using 1")
        config.rescan_batch_size = 1

    try:
        hour, minute = (int(part) for part in config.reminder_time.split(":"))
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError(config.reminder_time)
    except ValueError:
        warnings.append(f"Invalid reminder_time {config.reminder_time!r}; falling back to 09:00")
        config.reminder_time = "09:00"

    if config.storage_workers < 1:
        warnings.append("storage_workers must be at least 1")
        config.storage_workers = 1
    if config.network_workers < config.storage_workers:
        warnings.append("network_workers should not be smaller than storage_workers")

    return warnings


def setup_logging(debug: bool = False, log_dir: str | None = "logs") -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "plantcare_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "plantcare_file" for h in root.handlers)
    added_handler = False

    # Console handler (force UTF-8 to avoid UnicodeEncodeError on Windows terminals)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "plantcare_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    # File handler (skipped when log_dir is None, e.g. in tests)
    if not has_file and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "plantcare.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "plantcare_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"plantcare_console", "plantcare_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info(f"Logging initialized at level: {logging.getLevelName(log_level)}")

    if _env_bool("PLANTCARE_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    # Pillow logs every chunk it reads at DEBUG level
    logging.getLogger("PIL").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    import logging

    config = AppConfig()
    logger = logging.getLogger("config_loader")
    for warning in validate_config(config):
        logger.warning(warning)
    return config
