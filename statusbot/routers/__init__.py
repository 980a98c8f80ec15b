"""HTTP routers package."""

from .diagnostics_router import CryptoInfoResponse, create_diagnostics_router
from .status_router import (
    CaptureRequest,
    CaptureResponse,
    CheckStatusDetails,
    CheckStatusRequest,
    CheckStatusResponse,
    create_status_router,
)
from .webhook_router import WebhookResponse, create_webhook_router

__all__ = [
    "create_diagnostics_router",
    "create_status_router",
    "create_webhook_router",
    "CaptureRequest",
    "CaptureResponse",
    "CheckStatusDetails",
    "CheckStatusRequest",
    "CheckStatusResponse",
    "CryptoInfoResponse",
    "WebhookResponse",
]
