"""Logging utilities for permgraph.

This module provides:
- Logging configuration from ResolverConfig
- Bounded previews of permission sets for log lines
- Structured (JSON) or plain-text formatting
- Automatic subject_id propagation
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .config import ResolverConfig


# LogRecord attributes that are not user-supplied extras
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "subject_id",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Held permission sets can be large; this keeps log lines readable.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class ResolverFormatter(logging.Formatter):
    """Formatter that includes subject_id and can emit JSON.

    Extra fields attached to a record are rendered through
    :func:`safe_preview`.
    """

    def __init__(
        self,
        include_subject: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_subject = include_subject
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        subject_id = getattr(record, "subject_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_subject and subject_id:
            log_data["subject_id"] = str(subject_id)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "subject_id" in log_data:
            parts.append(f"subject_id={log_data['subject_id']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class PermissionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds the subject being authorized to log records.

    Usage:
        logger = get_resolver_logger(__name__, subject_id="user-42")
        logger.info("Grant refused")
        logger.info("Grant refused", subject_id="user-43")  # per-call override
    """

    def __init__(self, logger: logging.Logger, subject_id: Optional[str] = None):
        super().__init__(logger, {})
        self.subject_id = subject_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        subject_id = kwargs.pop("subject_id", self.subject_id)

        extra = dict(kwargs.get("extra") or {})
        if subject_id:
            extra["subject_id"] = subject_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[ResolverConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger from a ResolverConfig.

    Replaces existing root handlers with a single console handler using
    :class:`ResolverFormatter`.

    Args:
        config: ResolverConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    from .config import LogLevel

    log_level = getattr(logging, LogLevel(config.log_level).value)
    if json_format is None:
        json_format = config.log_json

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ResolverFormatter(json_format=json_format))
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_resolver_logger(name: str, subject_id: Optional[str] = None) -> PermissionLoggerAdapter:
    """Get a logger adapter that tags records with ``subject_id``.

    Example:
        logger = get_resolver_logger(__name__, subject_id=user.id)
        if not graph.can_grant(held, "edit"):
            logger.info("Grant of edit refused")
    """
    return PermissionLoggerAdapter(logging.getLogger(name), subject_id=subject_id)


__all__ = [
    "safe_preview",
    "ResolverFormatter",
    "PermissionLoggerAdapter",
    "setup_logging",
    "get_resolver_logger",
]
