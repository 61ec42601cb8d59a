"""
Logging configuration for the topology service.

Provides consistent logging setup for the service launcher and re-applies
level and format when the config file is reloaded.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, msg and any extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def parse_log_level(name) -> int:
    """Map a level name (or number) to a logging level; unknown names give INFO."""
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _build_formatter(component_name: str, log_format: str, format_string: Optional[str] = None) -> logging.Formatter:
    if str(log_format).lower() == "json":
        return JsonFormatter()
    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(levelname)s - %(message)s'
    return logging.Formatter(format_string, datefmt=DATE_FORMAT)


def setup_logging(
    component_name: str,
    level=logging.INFO,
    log_file: Optional[str] = None,
    log_format: str = "text",
    format_string: Optional[str] = None
):
    """
    Configure root logging for a service component.

    Args:
        component_name: Component identifier (e.g., 'topology')
        level: Logging level name or number (DEBUG, INFO, WARNING, ...)
        log_file: Optional file path for log output
        log_format: 'json' for JSON lines, anything else for text
        format_string: Custom text format string (default provided)
    """
    level = parse_log_level(level)
    formatter = _build_formatter(component_name, log_format, format_string)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handlers = [handler]

    # Add file handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger(component_name)
    logger.info(f"{component_name.upper()} logging initialized (level={logging.getLevelName(level)}, format={log_format})")

    return logger


def update_log_settings(component_name: str, level, log_format: str = "text") -> None:
    """Re-apply level and formatter to the handlers installed by setup_logging."""
    root = logging.getLogger()
    root.setLevel(parse_log_level(level))
    formatter = _build_formatter(component_name, log_format)
    for handler in root.handlers:
        handler.setFormatter(formatter)
