"""Scheduler module for background system tasks."""

from statusbot.scheduler.session_sweep_task import session_sweep_task
from statusbot.scheduler.system_scheduler import SystemScheduler

__all__ = ["SystemScheduler", "session_sweep_task"]
