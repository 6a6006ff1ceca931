import json
import logging
import os
import re
import sys
import traceback
from datetime import UTC, datetime
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from url_inbox.core.settings import get_settings

_STANDARD_LOG_RECORD_KEYS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys())
_STANDARD_LOG_RECORD_KEYS.update({"message", "asctime"})
_STRUCTURED_LOG_KEYS = {"component", "operation", "context_data", "error_type", "error_message"}

_SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "token",
    "access_token",
    "refresh_token",
    "password",
    "secret",
    "code",
}

# Auth callbacks carry credentials in the query string (urlinbox://login-callback?token=...)
_SENSITIVE_QUERY_RE = re.compile(
    r"(?i)([?&#](?:access_token|refresh_token|token|code|password)=)[^&#\s]+"
)


def _sanitize_filename(value: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9._-]+", "_", value.strip().lower())
    return cleaned.strip("._-") or "app"


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_KEYS:
                out[key] = "<redacted>"
            else:
                out[key] = _redact_value(v)
        return out

    if isinstance(value, list):
        return [_redact_value(v) for v in value]

    if isinstance(value, tuple):
        return tuple(_redact_value(v) for v in value)

    if isinstance(value, str):
        redacted = re.sub(
            r"(?i)\bbearer\s+[a-z0-9\-._~+/]+=*",
            "Bearer <redacted>",
            value,
        )
        return _SENSITIVE_QUERY_RE.sub(r"\1<redacted>", redacted)

    return value


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    extra_fields: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_KEYS or key in _STRUCTURED_LOG_KEYS:
            continue
        extra_fields[key] = value
    return extra_fields


def _build_error_json_payload(record: logging.LogRecord) -> dict[str, Any]:
    message = _redact_value(record.getMessage())

    exc_type = None
    exc_value = None
    exc_tb = None
    if record.exc_info and len(record.exc_info) == 3:
        exc_type, exc_value, exc_tb = record.exc_info

    error_type = getattr(record, "error_type", None)
    if not error_type and exc_type:
        error_type = exc_type.__name__
    if not error_type:
        error_type = "LogError"

    error_message = getattr(record, "error_message", None)
    if not error_message and exc_value:
        error_message = str(exc_value)
    if not error_message:
        error_message = str(message)

    stack_trace = None
    if exc_type and exc_value and exc_tb:
        stack_trace = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))

    context_data = getattr(record, "context_data", None)
    extra_fields = _extract_extra_fields(record)
    if extra_fields:
        context_data = {**extra_fields, **(context_data or {})}
    if context_data is not None:
        context_data = _redact_value(context_data)

    component = getattr(record, "component", None) or record.name

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "component": component,
        "operation": getattr(record, "operation", None),
        "error_type": error_type,
        "error_message": _redact_value(error_message),
        "stack_trace": stack_trace,
        "message": message,
        "context_data": context_data,
        "source_file": record.filename,
        "source_line": record.lineno,
        "source_function": record.funcName,
        "process": record.process,
    }

    return {k: v for k, v in payload.items() if v is not None}


class _JsonLineErrorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = _build_error_json_payload(record)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return _redact_value(super().format(record))


def _rotate_jsonl_namer(default_name: str) -> str:
    marker = ".jsonl."
    if marker not in default_name:
        return default_name
    before, after = default_name.split(marker, 1)
    return f"{before}_{after}.jsonl"


def _create_error_jsonl_handler(*, errors_dir: Path, logger_name: str) -> logging.Handler:
    errors_dir.mkdir(parents=True, exist_ok=True)
    prefix = _sanitize_filename(logger_name)
    base_file = errors_dir / f"{prefix}_errors_{os.getpid()}.jsonl"

    handler = TimedRotatingFileHandler(
        filename=str(base_file),
        when="D",
        interval=1,
        backupCount=0,
        encoding="utf-8",
        delay=True,
        utc=True,
    )
    handler.setLevel(logging.ERROR)
    handler.setFormatter(_JsonLineErrorFormatter())
    handler.suffix = "%Y%m%d_%H%M%S"
    handler.namer = _rotate_jsonl_namer
    return handler


@lru_cache
def setup_logging(name: str | None = None, level: str | None = None) -> logging.Logger:
    """
    Set up logging configuration for the whole service.

    Args:
        name: Logger name (defaults to app name from settings)
        level: Log level (defaults to settings.log_level)

    Returns:
        Configured logger instance
    """
    settings = get_settings()
    logger_name = name or settings.app_name
    log_level = getattr(logging, (level or settings.log_level).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        _RedactingFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    root_logger.addHandler(
        _create_error_jsonl_handler(
            errors_dir=settings.logs_dir / "errors",
            logger_name=logger_name,
        )
    )

    app_logger = logging.getLogger(logger_name)
    app_logger.setLevel(log_level)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
