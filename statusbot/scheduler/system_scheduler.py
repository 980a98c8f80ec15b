"""System scheduler for background system tasks.

This module provides the SystemScheduler that runs the periodic session
sweep alongside the job queue.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from statusbot.config import BotConfig
    from statusbot.sessions.manager import SessionManager

logger = logging.getLogger(__name__)


class SystemScheduler:
    """Scheduler for system-level periodic tasks.

    The sweep never touches a session younger than the age limit, and
    every job refreshes its session on acquisition, so it can run while a
    job is in progress.
    """

    def __init__(
        self,
        config: "BotConfig",
        session_manager: "SessionManager",
    ) -> None:
        """Initialize the system scheduler.

        Args:
            config: Application configuration.
            session_manager: SessionManager to sweep.
        """
        self.config = config
        self.session_manager = session_manager
        self.interval_seconds = config.session_sweep_interval_seconds
        self._running = False
        self._sweep_task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

        logger.info("SystemScheduler initialized")

    async def start(self) -> None:
        """Start the session sweep background task."""
        if self._running:
            logger.warning("SystemScheduler is already running")
            return

        self._running = True
        self._stop_event.clear()
        self._sweep_task = asyncio.create_task(self._run_session_sweep_loop())

        logger.info(
            "SystemScheduler started, session sweep every %d seconds",
            self.interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the system scheduler gracefully."""
        if not self._running:
            logger.warning("SystemScheduler is not running")
            return

        logger.info("Stopping SystemScheduler...")
        self._running = False
        self._stop_event.set()

        if self._sweep_task:
            try:
                await asyncio.wait_for(self._sweep_task, timeout=10.0)
            except asyncio.TimeoutError:
                logger.warning(
                    "SystemScheduler task did not stop gracefully, cancelling"
                )
                self._sweep_task.cancel()
                try:
                    await self._sweep_task
                except asyncio.CancelledError:
                    pass
            except asyncio.CancelledError:
                pass
            finally:
                self._sweep_task = None

        logger.info("SystemScheduler stopped")

    async def _run_session_sweep_loop(self) -> None:
        """Main loop: sweep, then wait for the interval or a stop signal."""
        logger.info("Session sweep loop started")

        while self._running:
            try:
                await self._execute_session_sweep()
            except Exception as e:
                logger.exception("Error in session sweep loop: %s", e)

            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self.interval_seconds,
                )
                break
            except asyncio.TimeoutError:
                continue

        logger.info("Session sweep loop ended")

    async def _execute_session_sweep(self) -> None:
        from statusbot.scheduler.session_sweep_task import session_sweep_task

        try:
            removed = await session_sweep_task(
                session_manager=self.session_manager,
                config=self.config,
            )
            if removed:
                logger.info("Session sweep: removed %d expired sessions", removed)
        except Exception as e:
            logger.error("Session sweep failed: %s", e)

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is currently running."""
        return self._running
