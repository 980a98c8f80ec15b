"""Session and artifact lifecycle."""

from statusbot.sessions.manager import (
    NOTHING_NEW_TEXT,
    Artifact,
    MessageSender,
    Session,
    SessionManager,
)

__all__ = [
    "NOTHING_NEW_TEXT",
    "Artifact",
    "MessageSender",
    "Session",
    "SessionManager",
]
