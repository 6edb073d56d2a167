"""Loguru sinks for the API server and CLI.

Ordinary records go to stderr as text. Vote outcomes are bound with
``audit=True`` (see :func:`audit_logger`) and are written as JSON lines
instead, so ballot acceptance and rejection can be shipped and queried
separately. With ``log_dir`` set, both streams are also written to files
that rotate daily and are kept for a week.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

_TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
_APP_LOG = "voting-portal.log"
_AUDIT_LOG = "vote-audit.jsonl"


def _is_audit(record: Any) -> bool:
    return bool(record["extra"].get("audit", False))


def _is_plain(record: Any) -> bool:
    return not _is_audit(record)


def audit_logger(event: str, **fields: object) -> Any:
    """Return a logger whose records land in the JSON audit stream."""
    return logger.bind(audit=True, event=event, **fields)


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Replace all Loguru sinks with the portal's text and audit sinks.

    Args:
        log_level: Minimum level, case-insensitive.
        log_dir: Directory for rotating log files; created if missing.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_TEXT_FORMAT, filter=_is_plain)
    logger.add(sys.stderr, level=level, serialize=True, filter=_is_audit)

    if not log_dir:
        return
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    rotation = {"rotation": "24h", "retention": "7 days"}
    logger.add(log_path / _APP_LOG, level=level, format=_TEXT_FORMAT, filter=_is_plain, **rotation)
    logger.add(log_path / _AUDIT_LOG, level=level, serialize=True, filter=_is_audit, **rotation)
