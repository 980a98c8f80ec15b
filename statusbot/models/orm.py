"""SQLAlchemy ORM models.

`journal_data` is the operator-maintained credential table; its column
names are fixed by the tooling that populates it.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from statusbot.database import Base


class JournalAccountModel(Base):
    """Encrypted journal portal credentials for a client."""

    __tablename__ = "journal_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_name = Column("Client_Name", String, nullable=True, index=True)
    personal_email = Column("Personal_Email", String, nullable=True, index=True)
    journal_link = Column("Journal_Link", Text, nullable=True)
    username = Column("Username", Text, nullable=True)
    password = Column("Password", Text, nullable=True)


class RequestLogModel(Base):
    """One inbound status-check request."""

    __tablename__ = "request_logs"

    request_id = Column(String, primary_key=True)
    requester = Column(String, nullable=True, index=True)
    search_query = Column(String, nullable=True)
    status = Column(String, nullable=False)
    queue_position = Column(Integer, nullable=True)
    start_time = Column(DateTime, nullable=True)
    completion_time = Column(DateTime, nullable=True)
    total_duration = Column(Float, nullable=True)
    error = Column(Text, nullable=True)

    journals = relationship(
        "JournalRunModel",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="JournalRunModel.id",
    )


class JournalRunModel(Base):
    """Outcome of one credential run inside a request."""

    __tablename__ = "journal_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(
        String, ForeignKey("request_logs.request_id"), nullable=False, index=True
    )
    url = Column(Text, nullable=False)
    name = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))
    completion_time = Column(DateTime, nullable=True)
    status = Column(String, nullable=False)
    error = Column(Text, nullable=True)

    request = relationship("RequestLogModel", back_populates="journals")
