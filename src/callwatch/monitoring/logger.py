"""
Logging setup for instrumented calls, with text and JSON output.

The level and format come from callwatch settings, which read the
LOG_LEVEL and LOG_FORMAT environment variables.
"""
import sys
import json
import logging
import threading
from typing import Any, Dict, Optional, Union
from datetime import datetime, timezone

from callwatch.config import get_config

# Default log format
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Name of the stdout handler get_logger installs
HANDLER_NAME = "callwatch.stdout"

_configure_lock = threading.Lock()

# Attributes every LogRecord has; anything else was passed via ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Formatter that renders a record, and its extras, as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_record[key] = value

        return json.dumps(log_record, ensure_ascii=False, default=str)


def _resolve_level(level: Optional[Union[str, int]], config) -> int:
    if level is None:
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    return level


def _find_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


def get_logger(
    name: str,
    level: Optional[Union[str, int]] = None,
    json_format: Optional[bool] = None,
    reconfigure: bool = False,
) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Name of the logger
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the LOG_LEVEL setting.
        json_format: If True, use JSON formatting. If None, use the
            LOG_FORMAT setting.
        reconfigure: If True and the logger already has the stdout handler
            added here, apply the current level and format to it again.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    with _configure_lock:
        handler = _find_handler(logger)

        # Leave loggers configured elsewhere, or already configured here, alone
        if handler is None and logger.handlers:
            return logger
        if handler is not None and not reconfigure:
            return logger

        config = get_config()
        logger.setLevel(_resolve_level(level, config))

        use_json = json_format if json_format is not None else (config.LOG_FORMAT == "json")

        if handler is None:
            handler = logging.StreamHandler(sys.stdout)
            handler.set_name(HANDLER_NAME)
            logger.addHandler(handler)
        handler.setFormatter(JsonFormatter() if use_json else logging.Formatter(DEFAULT_LOG_FORMAT))

        # Prevent duplicate logs through the root logger
        logger.propagate = False

    return logger
