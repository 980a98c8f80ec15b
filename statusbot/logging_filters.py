"""Logging helpers and filters.

Applied from both entrypoints (`python -m statusbot.main` and
`uvicorn statusbot.asgi:app`).
"""

from __future__ import annotations

import logging
from typing import Any

HEALTH_PATH = "/"


class SuppressHealthCheckAccessLog(logging.Filter):
    """Drop Uvicorn access log records for the health check endpoint.

    Load balancers poll `GET /` constantly; lines like
        INFO: 127.0.0.1:36130 - "GET / HTTP/1.1" 200 OK
    are dropped while every other route is still logged.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (filter)
        # Uvicorn's access logger passes
        #   (client_addr, method, full_path, http_version, status_code)
        try:
            args: Any = record.args
            if isinstance(args, tuple) and len(args) >= 3:
                path = str(args[2])
                if path == HEALTH_PATH or path.startswith(f"{HEALTH_PATH}?"):
                    return False

            message = record.getMessage()
            if '"GET / ' in message or '"HEAD / ' in message:
                return False
        except Exception:
            return True

        return True


def install_uvicorn_access_log_filters() -> None:
    """Install filters for Uvicorn loggers.

    Safe to call multiple times.
    """
    access_logger = logging.getLogger("uvicorn.access")

    for existing in access_logger.filters:
        if isinstance(existing, SuppressHealthCheckAccessLog):
            return

    access_logger.addFilter(SuppressHealthCheckAccessLog())
