"""ASGI entry point for uvicorn.

Usage:
    uvicorn statusbot.asgi:app --host 0.0.0.0 --port 8004
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from statusbot.config import BotConfig
from statusbot.logging_filters import install_uvicorn_access_log_filters
from statusbot.main import Application, register_routes

# Global application instance for lifespan management
_application: Application | None = None


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan for ASGI server."""
    global _application

    config = BotConfig.from_json_file()
    install_uvicorn_access_log_filters()
    _application = Application(config)
    await _application.setup()

    register_routes(fastapi_app, _application)

    await _application.start_background_services()

    yield

    await _application.shutdown()
    _application = None


app = FastAPI(
    title="Manuscript Status Bot",
    description="Journal submission status checks delivered over WhatsApp",
    version="1.0.0",
    lifespan=lifespan,
)
