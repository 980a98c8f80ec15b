"""WhatsApp webhook endpoints.

Routers handle HTTP concerns only - no business logic.
All business logic is delegated to WebhookService.
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from statusbot.models.base import JsonModel

if TYPE_CHECKING:
    from statusbot.services.webhook_service import WebhookService


class WebhookResponse(JsonModel):
    """Webhook response model."""

    status: str
    result: dict | None = None


def create_webhook_router(webhook_service: "WebhookService") -> APIRouter:
    """Create webhook router with injected service.

    Args:
        webhook_service: WebhookService instance for business logic

    Returns:
        APIRouter with webhook endpoints configured
    """
    router = APIRouter(prefix="/webhook", tags=["webhooks"])

    @router.get("", response_class=PlainTextResponse)
    async def verify_webhook(
        mode: str | None = Query(default=None, alias="hub.mode"),
        token: str | None = Query(default=None, alias="hub.verify_token"),
        challenge: str | None = Query(default=None, alias="hub.challenge"),
    ) -> str:
        """Answer the Cloud API subscription handshake.

        Raises:
            HTTPException: 403 if the verify token does not match
        """
        echoed = webhook_service.verify(mode, token, challenge)
        if echoed is None:
            raise HTTPException(status_code=403, detail="Verification failed")
        return echoed

    @router.post("", response_model=WebhookResponse)
    async def handle_webhook(request: Request) -> WebhookResponse:
        """Handle an inbound message delivery.

        Raises:
            HTTPException: 400 for a payload without a message, 500 for
                server errors
        """
        try:
            body = await request.json()
            if not isinstance(body, dict):
                raise ValueError("Webhook body must be a JSON object")
            result = await webhook_service.process_payload(body)
            return WebhookResponse(status="success", result=result)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
