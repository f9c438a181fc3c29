"""Log line formatting and root logger setup for the push2tweet process."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

# logops level names not known to the logging module
_LEVEL_ALIASES = {
    "WARN": "WARNING",
    "FATAL": "CRITICAL",
}

_CONTEXT_FIELDS = ("corr", "trans", "op")


def level_from_name(name: str) -> int:
    level_name = name.strip().upper()
    level_name = _LEVEL_ALIASES.get(level_name, level_name)
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


class ContextFormatter(logging.Formatter):
    """Renders the request context of a record alongside its message."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"time={datetime.now(timezone.utc).isoformat()}",
            f"lvl={record.levelname}",
        ]
        for field in _CONTEXT_FIELDS:
            parts.append(f"{field}={getattr(record, field, 'NA')}")
        parts.append(f"msg={record.getMessage()}")
        line = " | ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(level_from_name(level))

    # uvicorn ships its own handlers; route everything through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
