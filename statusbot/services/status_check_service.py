"""Status-check orchestration.

A request becomes an AutomationJob on the serial queue. When the job runs:

1. the alias is looked up and the requester told if nothing usable exists;
2. each credential is automated in turn on the queue's worker thread,
   either by replaying the portal's script or by an external helper;
3. whatever screenshots were captured are delivered oldest-first,
   followed by a completion notice;
4. the browser is released whatever happened.

A failing credential run is recorded and the job moves on to the next one.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from statusbot.automation.context import RunContext, sleep_ms
from statusbot.automation.driver import RemoteUIDriver
from statusbot.automation.helper import AlternateStrategyRunner
from statusbot.automation.interpreter import InstructionInterpreter
from statusbot.automation.portals import PortalRule, resolve_portal
from statusbot.automation.script import ScriptCatalogue
from statusbot.enums import AutomationStrategy, JobStatus, RequestLogStatus
from statusbot.errors import (
    AccountNotFound,
    HelperProcessFailure,
    IncompleteCredentials,
    NoCredentialsFound,
)
from statusbot.models.domain import AutomationJob, Credential, JournalRun
from statusbot.observability import log_job_error
from statusbot.queue.job_queue import JobQueue, QueueTicket
from statusbot.services.credential_service import CredentialService
from statusbot.services.request_log_service import RequestLogService
from statusbot.sessions.manager import MessageSender, Session, SessionManager

logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = (
    "No account information found for the provided identifier. "
    "Please verify your Client Name or Email address and try again."
)
INCOMPLETE_TEXT = (
    "We found your account, but there appear to be missing or incomplete "
    "journal credentials. Please contact support for assistance."
)
ALL_SENT_TEXT = "All new status updates have been sent."

_NOTICES: dict[type[NoCredentialsFound], str] = {
    AccountNotFound: NOT_FOUND_TEXT,
    IncompleteCredentials: INCOMPLETE_TEXT,
}


class StatusCheckService:
    """Turns status-check requests into queued automation jobs.

    Args:
        credentials: Alias lookup and decryption.
        sessions: Session table and artifact delivery.
        queue: Serial job queue.
        sender: Channel for requester notices.
        request_log: Request audit log.
        interpreter: Script interpreter.
        catalogue: Per-portal script files.
        helper_runner: Runner for helper-strategy portals.
        driver_factory: Builds one browser per credential run.
        navigation_timeout_seconds: Bound on the initial page load.
        post_navigation_delay_ms: Settle time after the initial page load.
        sleep: Blocking millisecond sleep, injectable for tests.
    """

    def __init__(
        self,
        *,
        credentials: CredentialService,
        sessions: SessionManager,
        queue: JobQueue,
        sender: MessageSender,
        request_log: RequestLogService,
        interpreter: InstructionInterpreter,
        catalogue: ScriptCatalogue,
        helper_runner: AlternateStrategyRunner,
        driver_factory: Callable[[], RemoteUIDriver],
        navigation_timeout_seconds: float = 30.0,
        post_navigation_delay_ms: int = 5000,
        sleep: Callable[[int], None] = sleep_ms,
    ) -> None:
        self.credentials = credentials
        self.sessions = sessions
        self.queue = queue
        self.sender = sender
        self.request_log = request_log
        self.interpreter = interpreter
        self.catalogue = catalogue
        self.helper_runner = helper_runner
        self.driver_factory = driver_factory
        self.navigation_timeout_seconds = navigation_timeout_seconds
        self.post_navigation_delay_ms = post_navigation_delay_ms
        self.sleep = sleep

    async def handle_request(self, alias: str, destination: str) -> QueueTicket:
        """Queue a status check for `alias`, replying to `destination`.

        Raises:
            ValueError: if either argument is empty.
        """
        alias = alias.strip()
        destination = destination.strip()
        if not alias or not destination:
            raise ValueError("Both requester alias and destination are required")

        job = AutomationJob(
            request_id=str(uuid.uuid4()),
            requester=alias,
            destination=destination,
        )
        ticket = self.queue.submit(job, self.run_job)
        await self.request_log.record_queued(job.request_id, alias, alias, ticket.position)
        return ticket

    async def capture(self, alias: str, destination: str) -> tuple[int, JobStatus]:
        """Check credentials up front, then run a status check and wait for it.

        Returns:
            Number of usable credentials and the finished job's status.

        Raises:
            ValueError: if either argument is empty.
            AccountNotFound, IncompleteCredentials: nothing was queued.
        """
        alias = alias.strip()
        if not alias or not destination.strip():
            raise ValueError("Both requester alias and destination are required")

        credentials = await self.resolve_credentials(alias)
        ticket = await self.handle_request(alias, destination)
        status = await ticket.future
        return len(credentials), status

    async def resolve_credentials(self, alias: str) -> list[Credential]:
        """Usable credentials for `alias`.

        Raises:
            AccountNotFound: no records match.
            IncompleteCredentials: records match but none decrypts fully.
        """
        records = await self.credentials.find_records(alias)
        if not records:
            raise AccountNotFound(f"No account found for {alias}")

        credentials = self.credentials.decrypt_records(records)
        if not credentials:
            raise IncompleteCredentials(f"Incomplete credentials for {alias}")
        return credentials

    async def run_job(self, job: AutomationJob) -> JobStatus:
        """Job body executed by the queue worker."""
        started = datetime.now(UTC)
        await self.request_log.record_started(job.request_id, started)
        session = self.sessions.acquire_session(job.requester)
        job.status = JobStatus.RUNNING
        logger.info("Processing request %s for %s", job.request_id, job.requester)

        error: str | None = None
        notified = False
        try:
            job.credentials = await self._lookup(job)
            await self._run_credentials(job, session)
        except NoCredentialsFound as e:
            error = str(e)
            notified = True
        except Exception as e:
            error = str(e) or type(e).__name__
            log_job_error(
                "automation", e, request_id=job.request_id, requester=job.requester
            )

        try:
            # Partial artifacts still go out after an aborted job.
            if not notified:
                await self._deliver(job, session)
        except Exception as e:
            error = error or str(e)
            log_job_error("delivery", e, request_id=job.request_id, requester=job.requester)
            self.sessions.release_session(job.requester)
        finally:
            self.sessions.release_driver(session)
            job.status = JobStatus.FAILED if error else JobStatus.COMPLETED
            await self.request_log.record_finished(job.request_id, started, error)

        logger.info("Request %s finished: %s", job.request_id, job.status)
        return job.status

    async def _lookup(self, job: AutomationJob) -> list[Credential]:
        """Find usable credentials, notifying the requester when there are none.

        Raises:
            NoCredentialsFound: after the notice has been sent.
        """
        try:
            return await self.resolve_credentials(job.requester)
        except NoCredentialsFound as e:
            logger.info("%s", e)
            await self.sender.send_text(job.destination, _NOTICES[type(e)])
            raise

    async def _run_credentials(self, job: AutomationJob, session: Session) -> None:
        for index, credential in enumerate(job.credentials, start=1):
            run = JournalRun(
                url=credential.url,
                name=f"Journal {index}",
                start_time=datetime.now(UTC),
            )
            try:
                await self.queue.run_blocking(self.run_credential, session, credential)
                run.status = RequestLogStatus.COMPLETED
            except Exception as e:
                run.status = RequestLogStatus.ERROR
                run.error = str(e)
                log_job_error(
                    "journal",
                    e,
                    request_id=job.request_id,
                    requester=job.requester,
                    extra={"journal": run.name},
                )
            run.completion_time = datetime.now(UTC)
            await self.request_log.record_journal(job.request_id, run)

    async def _deliver(self, job: AutomationJob, session: Session) -> None:
        await self.sessions.deliver_and_clear(session, job.destination)
        await self.sender.send_text(job.destination, ALL_SENT_TEXT)

    def run_credential(self, session: Session, credential: Credential) -> None:
        """Automate one portal login. Blocking; runs on the worker thread.

        Raises:
            UnknownPortal, NavigationTimeout, OpcodeExecutionFailure,
            HelperProcessFailure: the run is abandoned.
        """
        rule = resolve_portal(credential.url)
        logger.info("Automating %s for %s", rule.portal, session.requester)

        if rule.strategy is AutomationStrategy.HELPER:
            self._run_helper(session, rule, credential)
            return

        opcodes = self.catalogue.load(rule)
        driver = self.driver_factory()
        self.sessions.attach_driver(session, driver)
        try:
            driver.navigate(credential.url, self.navigation_timeout_seconds)
            self.sleep(self.post_navigation_delay_ms)
            ctx = RunContext(
                driver=driver,
                credential=credential,
                portal=rule,
                capture=lambda label: self.sessions.capture(session, label, driver),
                sleep=self.sleep,
            )
            self.interpreter.run(opcodes, ctx)
        finally:
            self.sessions.release_driver(session)

    def _run_helper(self, session: Session, rule: PortalRule, credential: Credential) -> None:
        if not rule.helper:
            raise HelperProcessFailure(f"No helper configured for {rule.portal}")

        result = self.helper_runner.run(
            rule.helper, credential.url, credential.username, credential.password
        )
        for path in result.artifact_paths:
            self.sessions.import_artifact(session, path, f"{rule.helper}_status")
