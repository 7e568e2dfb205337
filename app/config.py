"""
Configuration for the Greenhouse Log
====================================
Runtime settings for the entry store, draft storage and audit trail.
All values come from environment variables with local-first defaults.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field

from app.domain.exceptions import ConfigurationError
from app.enums.common import StoreBackend


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "t", "yes", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "off", ""}:
        return False
    raise ConfigurationError(f"Environment variable {name} must be a boolean.", detail={"value": value})


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer.", detail={"value": value}) from None


def _env_backend(name: str, default: StoreBackend) -> StoreBackend:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return StoreBackend(value.strip().lower())
    except ValueError:
        allowed = ", ".join(b.value for b in StoreBackend)
        raise ConfigurationError(
            f"Environment variable {name} must be one of: {allowed}.", detail={"value": value}
        ) from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("GREENHOUSE_LOG_ENV", "development"))
    data_dir: str = field(default_factory=lambda: os.getenv("GREENHOUSE_LOG_DATA_DIR", "var"))
    database_path: str = field(
        default_factory=lambda: os.getenv("GREENHOUSE_LOG_DATABASE_PATH", "database/greenhouse_log.db")
    )
    store_backend: StoreBackend = field(
        default_factory=lambda: _env_backend("GREENHOUSE_LOG_STORE_BACKEND", StoreBackend.AUTO)
    )

    # SQLite memory tuning, kept small for single-operator devices.
    db_cache_size_kb: int = field(default_factory=lambda: _env_int("GREENHOUSE_LOG_DB_CACHE_SIZE_KB", 8_000))
    # Move an unreadable database aside and start fresh instead of failing startup.
    db_quarantine_corrupt: bool = field(
        default_factory=lambda: _env_bool("GREENHOUSE_LOG_DB_QUARANTINE_CORRUPT", False)
    )

    DEBUG: bool = field(default_factory=lambda: _env_bool("GREENHOUSE_LOG_DEBUG", False))
    audit_log_path: str = field(
        default_factory=lambda: os.getenv("GREENHOUSE_LOG_AUDIT_LOG_PATH", "logs/audit.log")
    )
    log_level: str = field(default_factory=lambda: os.getenv("GREENHOUSE_LOG_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("GREENHOUSE_LOG_LOG_FILE", "logs/greenhouse_log.log"))
    log_max_bytes: int = field(default_factory=lambda: _env_int("GREENHOUSE_LOG_LOG_MAX_BYTES", 10 * 1024 * 1024))
    log_backup_count: int = field(default_factory=lambda: _env_int("GREENHOUSE_LOG_LOG_BACKUP_COUNT", 5))

    def __post_init__(self) -> None:
        if isinstance(self.store_backend, str) and not isinstance(self.store_backend, StoreBackend):
            try:
                self.store_backend = StoreBackend(self.store_backend)
            except ValueError:
                raise ConfigurationError(
                    f"Unknown store backend: {self.store_backend}", detail={"value": self.store_backend}
                ) from None
        if self.db_cache_size_kb <= 0:
            raise ConfigurationError("db_cache_size_kb must be positive.", detail={"value": self.db_cache_size_kb})


def setup_logging(config: AppConfig | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    config = config or AppConfig()
    if config.DEBUG:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid duplicates when called more than once
    has_console = any(getattr(h, "name", "") == "greenhouse_log_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "greenhouse_log_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "greenhouse_log_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file and config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
        file_handler.name = "greenhouse_log_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"greenhouse_log_console", "greenhouse_log_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    import logging

    config = AppConfig()
    logging.getLogger("config_loader").debug(
        "Loaded configuration (env=%s, backend=%s)", config.environment, config.store_backend.value
    )
    return config
