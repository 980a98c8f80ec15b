"""Rotating error log file for failed jobs, opcodes and deliveries."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from statusbot.config import resolve_path

if TYPE_CHECKING:
    from statusbot.config import BotConfig


_error_file_handler: RotatingFileHandler | None = None


def setup_error_log_file(config: "BotConfig") -> RotatingFileHandler | None:
    """Attach a rotating WARNING+ file handler to the root logger.

    Returns:
        The configured RotatingFileHandler, or None if disabled or the
        file cannot be created.
    """
    global _error_file_handler

    if not config.error_log_file_enabled:
        return None
    if _error_file_handler is not None:
        return _error_file_handler

    log_level = getattr(logging, config.error_log_level.upper(), logging.WARNING)
    log_file = resolve_path(config.error_log_file_path)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=config.error_log_max_bytes,
            backupCount=config.error_log_backup_count,
            encoding="utf-8",
        )
    except (OSError, PermissionError) as e:
        print(f"Warning: Cannot create error log file {log_file}: {e}", file=sys.stderr)
        return None

    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logging.getLogger().addHandler(handler)
    _error_file_handler = handler

    logging.getLogger(__name__).info(
        "Error log file handler initialized: %s (level=%s)", log_file, config.error_log_level
    )
    return handler


def log_job_error(
    stage: str,
    error: Exception | str,
    *,
    request_id: str | None = None,
    requester: str | None = None,
    extra: dict | None = None,
) -> None:
    """Log a job failure with its context in one greppable line.

    Args:
        stage: Pipeline stage that failed (e.g. "automation", "delivery").
        error: The exception or error message.
        request_id: Optional request id for correlation.
        requester: Optional requester alias.
        extra: Additional context to include in the log.
    """
    logger = logging.getLogger(f"statusbot.jobs.{stage}")

    error_type = type(error).__name__ if isinstance(error, Exception) else "Error"
    context_parts = [f"stage={stage}", f"error_type={error_type}"]
    if request_id:
        context_parts.append(f"request_id={request_id}")
    if requester:
        context_parts.append(f"requester={requester}")
    for k, v in (extra or {}).items():
        context_parts.append(f"{k}={v}")

    logger.error("[%s] %s", " ".join(context_parts), error)
