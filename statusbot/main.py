"""Application entry point and bootstrap.

This module initializes all application components, wires dependencies,
and provides the main entry point for running the application.
"""

import asyncio
import logging
import signal
import sys
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import AsyncGenerator

from fastapi import FastAPI

from statusbot.automation.driver import SeleniumDriverFactory
from statusbot.automation.helper import AlternateStrategyRunner
from statusbot.automation.interpreter import InstructionInterpreter
from statusbot.automation.routines import default_routines
from statusbot.automation.script import ScriptCatalogue
from statusbot.config import BotConfig
from statusbot.dao import CredentialDAO, RequestLogDAO
from statusbot.database import Database
from statusbot.logging_filters import install_uvicorn_access_log_filters
from statusbot.observability.error_log_file import setup_error_log_file
from statusbot.queue.job_queue import JobQueue
from statusbot.routers import (
    create_diagnostics_router,
    create_status_router,
    create_webhook_router,
)
from statusbot.scheduler.system_scheduler import SystemScheduler
from statusbot.services import (
    CredentialCipher,
    CredentialService,
    RequestLogService,
    StatusCheckService,
    WebhookService,
    WhatsAppDeliveryService,
)
from statusbot.sessions.manager import SessionManager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Suppress verbose HTTP and webdriver request logs
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("selenium").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


class Application:
    """Main application container.

    Owns the session table, the job queue and the scheduler for the life of
    the process, and tears them down on shutdown.
    """

    def __init__(self, config: BotConfig) -> None:
        """Initialize the application with configuration.

        Args:
            config: Application configuration.
        """
        self.config = config
        self._shutdown_event = asyncio.Event()
        self._shut_down = False

        # Core components (initialized in setup)
        self.database: Database | None = None
        self.fastapi_app: FastAPI | None = None

        # DAOs
        self.credential_dao: CredentialDAO | None = None
        self.request_log_dao: RequestLogDAO | None = None

        # Services
        self.delivery_service: WhatsAppDeliveryService | None = None
        self.credential_service: CredentialService | None = None
        self.request_log_service: RequestLogService | None = None
        self.status_service: StatusCheckService | None = None
        self.webhook_service: WebhookService | None = None

        # Owned state
        self.session_manager: SessionManager | None = None
        self.job_queue: JobQueue | None = None

        # System scheduler (session sweep)
        self.system_scheduler: SystemScheduler | None = None

    async def setup(self) -> None:
        """Initialize all application components.

        Raises:
            ValueError: if the encryption settings are unusable.
        """
        logger.info("Setting up application components...")
        setup_error_log_file(self.config)

        self.database = Database(self.config.database_url)
        if self.config.auto_create_tables:
            await self.database.init_db()
            logger.info("Database tables created")

        self.credential_dao = CredentialDAO(self.database)
        self.request_log_dao = RequestLogDAO(self.database)

        cipher = CredentialCipher(
            self.config.encryption_key,
            self.config.encryption_iv,
            self.config.encryption_algorithm,
        )
        self.credential_service = CredentialService(self.credential_dao, cipher)
        self.request_log_service = RequestLogService(self.request_log_dao)
        self.delivery_service = WhatsAppDeliveryService(self.config)

        self.session_manager = SessionManager(
            self.config.screenshot_folder,
            self.delivery_service,
            grace_seconds=self.config.delivery_grace_seconds,
        )
        self.session_manager.init()
        self.job_queue = JobQueue()

        self.status_service = StatusCheckService(
            credentials=self.credential_service,
            sessions=self.session_manager,
            queue=self.job_queue,
            sender=self.delivery_service,
            request_log=self.request_log_service,
            interpreter=InstructionInterpreter(
                default_routines(),
                unknown_opcode_delay_ms=self.config.unknown_opcode_delay_ms,
            ),
            catalogue=ScriptCatalogue(self.config.scripts_dir),
            helper_runner=AlternateStrategyRunner(
                self.config.helpers_dir,
                python=self.config.helper_python,
                timeout_seconds=self.config.helper_timeout_seconds,
            ),
            driver_factory=SeleniumDriverFactory(self.config),
            navigation_timeout_seconds=self.config.navigation_timeout_seconds,
            post_navigation_delay_ms=self.config.post_navigation_delay_ms,
        )
        self.webhook_service = WebhookService(
            self.status_service, self.config.whatsapp_verify_token
        )
        self.system_scheduler = SystemScheduler(self.config, self.session_manager)

        logger.info("Application setup complete")

    def create_fastapi_app(self) -> FastAPI:
        """Create and configure FastAPI application.

        Returns:
            Configured FastAPI application.
        """

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
            """Manage application lifespan."""
            logger.info("FastAPI application starting...")
            yield
            logger.info("FastAPI application shutting down...")

        self.fastapi_app = FastAPI(
            title="Manuscript Status Bot",
            description="Journal submission status checks delivered over WhatsApp",
            version="1.0.0",
            lifespan=lifespan,
        )
        register_routes(self.fastapi_app, self)
        return self.fastapi_app

    async def start_background_services(self) -> None:
        """Start the job queue worker and the session sweep."""
        logger.info("Starting background services...")

        if self.job_queue:
            self.job_queue.start()
            logger.info("Job queue started")

        if self.system_scheduler:
            await self.system_scheduler.start()
            logger.info("System scheduler started")

    async def shutdown(self) -> None:
        """Gracefully shutdown all application components.

        Safe to call more than once.
        """
        if self._shut_down:
            return
        self._shut_down = True
        logger.info("Initiating graceful shutdown...")

        self._shutdown_event.set()

        if self.system_scheduler and self.system_scheduler.is_running:
            await self.system_scheduler.stop()
            logger.info("System scheduler stopped")

        if self.job_queue:
            await self.job_queue.stop()

        if self.session_manager:
            self.session_manager.release_all()
            logger.info("Sessions released")

        if self.delivery_service:
            await self.delivery_service.close()

        if self.database:
            await self.database.close()
            logger.info("Database connection closed")

        logger.info("Graceful shutdown complete")

    def setup_signal_handlers(self, on_signal=None) -> None:
        """Register SIGINT and SIGTERM handlers.

        Args:
            on_signal: Optional callback run before shutdown starts, e.g.
                to tell the HTTP server to exit.
        """
        loop = asyncio.get_running_loop()

        def signal_handler(sig: signal.Signals) -> None:
            logger.info("Received signal %s, initiating shutdown...", sig.name)
            if on_signal is not None:
                on_signal()
            asyncio.create_task(self.shutdown())

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

        logger.info("Signal handlers registered")


def register_routes(fastapi_app: FastAPI, application: Application) -> None:
    """Attach routers and the health endpoint to a FastAPI app."""
    if application.webhook_service:
        fastapi_app.include_router(create_webhook_router(application.webhook_service))
        logger.info("Webhook router registered")

    if application.status_service:
        fastapi_app.include_router(
            create_status_router(
                application.status_service,
                default_destination=application.config.default_whatsapp_number,
            )
        )
        logger.info("Status router registered")

    if application.credential_service:
        fastapi_app.include_router(
            create_diagnostics_router(
                application.credential_service.cipher, application.config
            )
        )
        logger.info("Diagnostics router registered")

    @fastapi_app.get("/")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "message": "Server is running",
            "timestamp": datetime.now(UTC).isoformat(),
            "port": application.config.api_port,
        }


# Global application instance
_app: Application | None = None


def get_application() -> Application:
    """Get the global application instance.

    Raises:
        RuntimeError: If application not initialized.
    """
    if _app is None:
        raise RuntimeError("Application not initialized")
    return _app


async def create_app(config: BotConfig | None = None) -> Application:
    """Create and setup the application.

    Args:
        config: Optional configuration. If not provided, loads from
                config.json with environment variable overrides.

    Returns:
        Initialized Application instance.
    """
    global _app

    if config is None:
        config = BotConfig.from_json_file()

    _app = Application(config)
    await _app.setup()
    _app.create_fastapi_app()

    return _app


async def main() -> None:
    """Run the application until a shutdown signal arrives."""
    import uvicorn

    logger.info("Starting Manuscript Status Bot...")

    try:
        config = BotConfig.from_json_file()
        logger.info("Configuration loaded")

        app = await create_app(config)
        await app.start_background_services()

        logger.info(
            "Application running. API available at http://%s:%d",
            config.api_host,
            config.api_port,
        )

        uvicorn_config = uvicorn.Config(
            app.fastapi_app,
            host=config.api_host,
            port=config.api_port,
            log_level="info",
        )

        # Ensure Uvicorn logging is configured, then suppress health-check access logs.
        uvicorn_config.load()
        install_uvicorn_access_log_filters()

        server = uvicorn.Server(uvicorn_config)

        # We handle signals
        server.install_signal_handlers = lambda: None
        app.setup_signal_handlers(on_signal=lambda: setattr(server, "should_exit", True))

        await server.serve()

    except Exception as e:
        logger.exception("Application error: %s", e)
        raise
    finally:
        if _app:
            await _app.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
