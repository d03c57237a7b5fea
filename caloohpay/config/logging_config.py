"""Logging setup for CalOohPay, driven by the LOG_* environment variables."""

import json
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from caloohpay.utils.logging_utils import ContextFilter

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_FORMATS = ("standard", "json")

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Attributes every LogRecord has; anything else came from extra= or log_context
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with context and extra fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Decimal totals and datetimes are written with str()
        return json.dumps(entry, default=str)


class LoggingConfig(BaseSettings):
    """
    Logging settings, loaded from LOG_* environment variables and .env.

    Keyword arguments take precedence over the environment, which is how the
    CLI forces DEBUG for --debug while keeping LOG_FORMAT and LOG_FILE.

    Environment Variables:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: WARNING)
        LOG_FORMAT: standard or json (default: standard)
        LOG_FILE: Path of the rotating log file (default: unset)
        LOG_CONSOLE: Log to stderr (default: true)
        LOG_FILE_ENABLED: Log to LOG_FILE (default: false)
        LOG_MAX_FILE_SIZE: Bytes before the file rotates (default: 10485760)
        LOG_BACKUP_COUNT: Rotated files kept (default: 5)
    """

    level: str = Field(default="WARNING", description="Root log level")
    format: str = Field(default="standard", description="standard or json")
    file: Optional[str] = Field(default=None, description="Log file path")
    console: bool = Field(default=True, description="Log to stderr")
    file_enabled: bool = Field(default=False, description="Log to file")
    max_file_size: int = Field(default=10 * 1024 * 1024, gt=0)
    backup_count: int = Field(default=5, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept any case; store upper case."""
        if v.upper() not in VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of {', '.join(VALID_LEVELS)}"
            )
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in VALID_FORMATS:
            raise ValueError(
                f"Invalid log format: {v}. Must be one of {', '.join(VALID_FORMATS)}"
            )
        return v.lower()

    @model_validator(mode="after")
    def validate_file_output(self) -> "LoggingConfig":
        if self.file_enabled and not self.file:
            raise ValueError("LOG_FILE must be set when LOG_FILE_ENABLED is true")
        return self


def _build_handlers(config: LoggingConfig) -> list:
    handlers = []
    if config.console:
        # stderr, so the payment tables on stdout stay clean
        handlers.append(logging.StreamHandler())
    if config.file_enabled:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )
    return handlers


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Install the root handlers described by config.

    Existing root handlers are closed and replaced, so calling this again
    reconfigures rather than duplicating output. Every handler gets the
    ContextFilter, so fields bound with log_context (such as rota_id) reach
    both the standard and the JSON output.

    Args:
        config: Logging settings; read from the environment when omitted
    """
    config = config or LoggingConfig()
    level = getattr(logging, config.level)

    if config.format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    reset_logging()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in _build_handlers(config):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
        root_logger.addHandler(handler)


def reset_logging() -> None:
    """Close and remove all root handlers and restore the WARNING level."""
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(logging.WARNING)
