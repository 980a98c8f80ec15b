"""Request audit log.

Every status-check request gets one row tracking its lifecycle
(queued, started, completed or error) and one row per credential run.
The log is observational: a failing write is logged and never fails the
request it describes.
"""

import logging
from datetime import UTC, datetime

from statusbot.dao.request_log_dao import RequestLogDAO
from statusbot.enums import RequestLogStatus
from statusbot.models.domain import JournalRun, RequestLog

logger = logging.getLogger(__name__)


class RequestLogService:
    """Request log business logic, backed by RequestLogDAO."""

    def __init__(self, dao: RequestLogDAO) -> None:
        self.dao = dao

    async def _write(self, request_id: str, status: RequestLogStatus, **fields) -> None:
        try:
            await self.dao.upsert(request_id, status=status, **fields)
        except Exception as e:
            logger.error("Failed to write request log %s (%s): %s", request_id, status, e)

    async def record_queued(
        self, request_id: str, requester: str, search_query: str, position: int
    ) -> None:
        await self._write(
            request_id,
            RequestLogStatus.QUEUED,
            requester=requester,
            search_query=search_query,
            queue_position=position,
        )

    async def record_started(self, request_id: str, started_at: datetime) -> None:
        await self._write(request_id, RequestLogStatus.STARTED, start_time=started_at)

    async def record_journal(self, request_id: str, run: JournalRun) -> None:
        """Record the outcome of one credential run."""
        try:
            await self.dao.add_journal_run(request_id, run)
        except Exception as e:
            logger.error("Failed to record %s for request %s: %s", run.name, request_id, e)

    async def record_finished(
        self, request_id: str, started_at: datetime, error: str | None = None
    ) -> None:
        """Mark the request completed, or errored if `error` is given."""
        finished_at = datetime.now(UTC)
        await self._write(
            request_id,
            RequestLogStatus.ERROR if error else RequestLogStatus.COMPLETED,
            completion_time=finished_at,
            total_duration=(finished_at - started_at).total_seconds(),
            error=error,
        )

    async def get(self, request_id: str) -> RequestLog | None:
        return await self.dao.get(request_id)
