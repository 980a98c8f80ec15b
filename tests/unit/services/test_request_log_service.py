"""Unit tests for RequestLogService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from statusbot.enums import RequestLogStatus
from statusbot.models.domain import JournalRun
from statusbot.services.request_log_service import RequestLogService


@pytest.fixture
def mock_dao():
    return AsyncMock()


@pytest.fixture
def service(mock_dao):
    return RequestLogService(mock_dao)


async def test_record_queued(service, mock_dao):
    await service.record_queued("req-1", "alice", "alice", 3)

    mock_dao.upsert.assert_awaited_once_with(
        "req-1",
        status=RequestLogStatus.QUEUED,
        requester="alice",
        search_query="alice",
        queue_position=3,
    )


async def test_record_finished_success(service, mock_dao):
    started = datetime.now(UTC) - timedelta(seconds=5)

    await service.record_finished("req-1", started)

    kwargs = mock_dao.upsert.await_args.kwargs
    assert kwargs["status"] is RequestLogStatus.COMPLETED
    assert kwargs["error"] is None
    assert kwargs["total_duration"] >= 5


async def test_record_finished_with_error(service, mock_dao):
    await service.record_finished("req-1", datetime.now(UTC), "boom")

    kwargs = mock_dao.upsert.await_args.kwargs
    assert kwargs["status"] is RequestLogStatus.ERROR
    assert kwargs["error"] == "boom"


async def test_write_failure_is_swallowed(service, mock_dao):
    mock_dao.upsert.side_effect = RuntimeError("database is locked")

    await service.record_started("req-1", datetime.now(UTC))

    mock_dao.upsert.assert_awaited_once()


async def test_journal_failure_is_swallowed(service, mock_dao):
    mock_dao.add_journal_run.side_effect = RuntimeError("disk full")
    run = JournalRun(url="https://x", name="Journal 1", start_time=datetime.now(UTC))

    await service.record_journal("req-1", run)

    mock_dao.add_journal_run.assert_awaited_once_with("req-1", run)
