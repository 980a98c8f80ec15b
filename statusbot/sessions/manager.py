"""Per-requester browser sessions and screenshot artifacts.

A session belongs to one requester. It holds the browser driver used by the
job currently running for that requester and a folder of screenshots
waiting to be delivered:

    <screenshot_folder>/<requester>/<session id>/<label>_<timestamp>.png

The table is touched from two places: the queue worker thread (captures)
and the event loop (acquire, delivery, sweeps), so it is guarded by a lock.
The periodic sweep only removes sessions idle for longer than the age
threshold, and every job refreshes last-access on acquisition.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from statusbot.automation.driver import RemoteUIDriver

logger = logging.getLogger(__name__)

NOTHING_NEW_TEXT = "No new screenshots available."

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def safe_name(value: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return _UNSAFE_CHARS.sub("_", value)


class MessageSender(Protocol):
    """Outbound messaging channel used for delivery."""

    async def send_text(self, to: str, body: str) -> None: ...

    async def send_image(self, to: str, image_path: Path, caption: str = "") -> None: ...


@dataclass
class Artifact:
    """A captured screenshot awaiting delivery."""

    path: Path
    label: str
    captured_at: datetime


@dataclass
class Session:
    """One requester's browser handle and artifact namespace."""

    id: str
    requester: str
    folder: Path
    created_at: float
    last_accessed: float
    artifacts: dict[Path, Artifact] = field(default_factory=dict)
    driver: "RemoteUIDriver | None" = None

    @property
    def artifact_paths(self) -> set[Path]:
        return set(self.artifacts)


class SessionManager:
    """Owns the session table, artifact folders and driver release.

    Args:
        base_folder: Root folder for all artifact namespaces.
        sender: Delivery channel for artifacts and notices.
        grace_seconds: Pause after the last delivery before files are removed.
        clock: Wall-clock source in seconds, injectable for tests.
    """

    def __init__(
        self,
        base_folder: str | Path,
        sender: MessageSender,
        *,
        grace_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_folder = Path(base_folder)
        self.sender = sender
        self.grace_seconds = grace_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def init(self) -> None:
        """Create the base folder."""
        self.base_folder.mkdir(parents=True, exist_ok=True)
        logger.info("Screenshot folder ready: %s", self.base_folder)

    def get(self, requester: str) -> Session | None:
        with self._lock:
            return self._sessions.get(requester)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def requester_folder(self, requester: str) -> Path:
        if not requester:
            raise ValueError("Requester id is required")
        return self.base_folder / safe_name(requester)

    def acquire_session(self, requester: str) -> Session:
        """Return the requester's session, creating it if needed.

        Refreshes last-access time either way.

        Raises:
            ValueError: if `requester` is empty.
        """
        folder_root = self.requester_folder(requester)
        now = self._clock()
        with self._lock:
            session = self._sessions.get(requester)
            if session is None:
                session_id = str(uuid.uuid4())
                session = Session(
                    id=session_id,
                    requester=requester,
                    folder=folder_root / session_id,
                    created_at=now,
                    last_accessed=now,
                )
                self._sessions[requester] = session
                logger.info("Created session %s for %s", session_id, requester)
            session.last_accessed = now
            return session

    def attach_driver(self, session: Session, driver: "RemoteUIDriver") -> None:
        """Hand a driver to the session; the session becomes its only owner."""
        self.release_driver(session)
        session.driver = driver

    def release_driver(self, session: Session) -> None:
        """Quit the session's driver, if any. Never raises."""
        driver, session.driver = session.driver, None
        if driver is None:
            return
        try:
            driver.quit()
            logger.info("Released browser for session %s", session.id)
        except Exception as e:
            logger.warning("Error quitting browser for session %s: %s", session.id, e)

    def _new_artifact_path(self, session: Session, label: str) -> Path:
        session.folder.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
        stem = f"{safe_name(label)}_{stamp}"
        path = session.folder / f"{stem}.png"
        counter = 1
        while path.exists() or path in session.artifacts:
            path = session.folder / f"{stem}_{counter}.png"
            counter += 1
        return path

    def _register(self, session: Session, path: Path, label: str) -> None:
        with self._lock:
            session.artifacts[path] = Artifact(
                path=path, label=label, captured_at=datetime.now(UTC)
            )
            session.last_accessed = self._clock()

    def capture(
        self, session: Session, label: str, driver: "RemoteUIDriver | None" = None
    ) -> Path:
        """Screenshot the driver's current view into the session's folder.

        Returns:
            Path of the written PNG.
        """
        driver = driver or session.driver
        if driver is None:
            raise RuntimeError(f"Session {session.id} has no browser attached")

        image = driver.screenshot_png()
        path = self._new_artifact_path(session, label)
        path.write_bytes(image)
        self._register(session, path, label)
        logger.info("Screenshot saved: %s", path)
        return path

    def import_artifact(self, session: Session, source: Path, label: str) -> Path | None:
        """Move an externally produced image into the session's folder.

        Returns:
            The new path, or None if `source` does not exist.
        """
        if not source.exists():
            logger.warning("Helper screenshot not found: %s", source)
            return None
        path = self._new_artifact_path(session, label)
        shutil.move(str(source), path)
        self._register(session, path, label)
        return path

    def ordered_artifacts(self, session: Session) -> list[Artifact]:
        """Existing artifacts, oldest capture first.

        Missing files are logged and skipped. Equal timestamps keep
        registration order.
        """
        with self._lock:
            artifacts = list(session.artifacts.values())

        existing = []
        for artifact in artifacts:
            try:
                if artifact.path.exists():
                    existing.append(artifact)
                else:
                    logger.warning("File not found: %s", artifact.path)
            except OSError as e:
                logger.warning("Could not stat %s: %s", artifact.path, e)
        return sorted(existing, key=lambda a: a.captured_at)

    async def deliver_and_clear(self, session: Session, destination: str) -> int:
        """Deliver the session's artifacts, then empty its namespace.

        With no artifacts only a "nothing new" notice is sent and the
        filesystem is left untouched. Per-artifact delivery failures are
        logged and do not stop the remaining deliveries.

        Returns:
            Number of artifacts delivered successfully.
        """
        artifacts = self.ordered_artifacts(session)
        if not artifacts:
            logger.info("No screenshots for %s", session.requester)
            self.release_driver(session)
            await self.sender.send_text(destination, NOTHING_NEW_TEXT)
            return 0

        logger.info("Sending %d screenshots to %s", len(artifacts), destination)
        delivered = 0
        for artifact in artifacts:
            caption = f"Status update: {artifact.path.stem}"
            try:
                await self.sender.send_image(destination, artifact.path, caption)
                delivered += 1
                logger.info("Successfully sent: %s", artifact.path.name)
            except Exception as e:
                logger.error("Error sending screenshot %s: %s", artifact.path.name, e)

        await asyncio.sleep(self.grace_seconds)
        logger.info("Cleanup delay completed, removing session files")
        self._clear_namespace(session)
        self.release_driver(session)
        return delivered

    def _clear_namespace(self, session: Session) -> None:
        with self._lock:
            session.artifacts.clear()
        shutil.rmtree(session.folder, ignore_errors=True)

    def _drop(self, requester: str) -> Session | None:
        with self._lock:
            session = self._sessions.pop(requester, None)
        if session is None:
            return None
        # Distinct requesters can sanitize to the same parent folder; only
        # this session's namespace is removed, the parent only once empty.
        self._clear_namespace(session)
        self._prune_requester_folder(session.folder.parent)
        self.release_driver(session)
        return session

    def _prune_requester_folder(self, folder: Path) -> None:
        try:
            folder.rmdir()
        except OSError:
            pass

    def release_session(self, requester: str) -> None:
        """Tear down a requester's session regardless of its age."""
        session = self._drop(requester)
        if session is not None:
            logger.info("Released session %s for %s", session.id, requester)

    def sweep_expired(self, max_age_seconds: float) -> list[str]:
        """Remove sessions idle for longer than `max_age_seconds`.

        Returns:
            Requesters whose sessions were removed.
        """
        now = self._clock()
        with self._lock:
            expired = [
                requester
                for requester, session in self._sessions.items()
                if now - session.last_accessed > max_age_seconds
            ]
        for requester in expired:
            try:
                self._drop(requester)
            except Exception as e:
                logger.error("Error cleaning up old session for %s: %s", requester, e)
        if expired:
            logger.info("Swept %d expired sessions", len(expired))
        return expired

    def release_all(self) -> None:
        """Tear down every session (process shutdown)."""
        with self._lock:
            requesters = list(self._sessions)
        for requester in requesters:
            self.release_session(requester)
        logger.info("Released %d sessions", len(requesters))
