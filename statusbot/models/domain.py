"""Pydantic domain models.

DAOs return these models; SQLAlchemy ORM objects never leave the DAO layer.
"""

from datetime import UTC, datetime

from pydantic import Field

from statusbot.enums import JobStatus, RequestLogStatus
from statusbot.models.base import JsonModel


class EncryptedCredential(JsonModel):
    """A credential row as stored: each field individually encrypted."""

    url: str | None = None
    username: str | None = None
    password: str | None = None


class Credential(JsonModel):
    """A decrypted portal login."""

    url: str
    username: str
    password: str = Field(repr=False)


class AutomationJob(JsonModel):
    """One status-check request for a requester."""

    request_id: str
    requester: str
    destination: str
    credentials: list[Credential] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: JobStatus = JobStatus.QUEUED


class JournalRun(JsonModel):
    """Outcome of automating one credential within a job."""

    url: str
    name: str
    start_time: datetime
    completion_time: datetime | None = None
    status: RequestLogStatus = RequestLogStatus.STARTED
    error: str | None = None


class RequestLog(JsonModel):
    """Request log entry."""

    request_id: str
    requester: str | None = None
    search_query: str | None = None
    status: RequestLogStatus
    queue_position: int | None = None
    start_time: datetime | None = None
    completion_time: datetime | None = None
    total_duration: float | None = None
    error: str | None = None
    journals: list[JournalRun] = Field(default_factory=list)
