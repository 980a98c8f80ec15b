"""Session sweep task for scheduled execution.

Removes sessions whose last access is older than the configured maximum
age, deleting their artifact folders and releasing any browser they hold.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from statusbot.config import BotConfig
    from statusbot.sessions.manager import SessionManager

logger = logging.getLogger(__name__)


async def session_sweep_task(
    session_manager: "SessionManager",
    config: "BotConfig",
) -> int:
    """Execute the session sweep.

    Args:
        session_manager: Owner of the session table.
        config: Application configuration with the session age limit.

    Returns:
        Number of sessions removed.
    """
    logger.debug(
        "Starting session sweep (max age: %d minutes)",
        config.session_max_age_minutes,
    )

    try:
        removed = session_manager.sweep_expired(config.session_max_age_seconds)
        return len(removed)
    except Exception as e:
        logger.error("Session sweep task failed: %s", e)
        raise
