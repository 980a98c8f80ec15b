"""Request log data access operations."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from statusbot.dao.base import BaseDAO
from statusbot.enums import RequestLogStatus
from statusbot.models.domain import JournalRun, RequestLog
from statusbot.models.orm import JournalRunModel, RequestLogModel


class RequestLogDAO(BaseDAO[RequestLog]):
    """Data access object for request logs and their journal runs."""

    async def upsert(
        self,
        request_id: str,
        *,
        status: RequestLogStatus,
        requester: str | None = None,
        search_query: str | None = None,
        queue_position: int | None = None,
        start_time: datetime | None = None,
        completion_time: datetime | None = None,
        total_duration: float | None = None,
        error: str | None = None,
    ) -> RequestLog:
        """Create the request row or merge new non-None fields into it."""
        fields = {
            "requester": requester,
            "search_query": search_query,
            "queue_position": queue_position,
            "start_time": start_time,
            "completion_time": completion_time,
            "total_duration": total_duration,
            "error": error,
        }
        async with self._db.session() as session:
            model = await session.get(RequestLogModel, request_id)
            if model is None:
                model = RequestLogModel(request_id=request_id, status=status.value)
                session.add(model)
            model.status = status.value
            for name, value in fields.items():
                if value is not None:
                    setattr(model, name, value)
            await session.flush()
            return self._to_domain(model, journals=[])

    async def add_journal_run(self, request_id: str, run: JournalRun) -> JournalRun:
        """Record the outcome of one credential run."""
        async with self._db.session() as session:
            if await session.get(RequestLogModel, request_id) is None:
                session.add(
                    RequestLogModel(
                        request_id=request_id, status=RequestLogStatus.STARTED.value
                    )
                )
            session.add(
                JournalRunModel(
                    request_id=request_id,
                    url=run.url,
                    name=run.name,
                    start_time=run.start_time,
                    completion_time=run.completion_time,
                    status=run.status.value,
                    error=run.error,
                )
            )
            await session.flush()
        return run

    async def get(self, request_id: str) -> RequestLog | None:
        """Get a request log with its journal runs."""
        async with self._db.session() as session:
            result = await session.execute(
                select(RequestLogModel)
                .options(selectinload(RequestLogModel.journals))
                .where(RequestLogModel.request_id == request_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            journals = [
                JournalRun(
                    url=j.url,
                    name=j.name,
                    start_time=j.start_time,
                    completion_time=j.completion_time,
                    status=RequestLogStatus(j.status),
                    error=j.error,
                )
                for j in model.journals
            ]
            return self._to_domain(model, journals=journals)

    @staticmethod
    def _to_domain(model: RequestLogModel, *, journals: list[JournalRun]) -> RequestLog:
        return RequestLog(
            request_id=model.request_id,
            requester=model.requester,
            search_query=model.search_query,
            status=RequestLogStatus(model.status),
            queue_position=model.queue_position,
            start_time=model.start_time,
            completion_time=model.completion_time,
            total_duration=model.total_duration,
            error=model.error,
            journals=journals,
        )
