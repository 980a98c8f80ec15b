"""WhatsApp webhook processing.

This service handles the webhook business logic: subscription
verification, extracting the inbound message from the Cloud API envelope,
ignoring redelivered messages, and turning text messages into status-check
requests.
"""

import logging
from collections import OrderedDict
from typing import Any

from statusbot.services.status_check_service import StatusCheckService

logger = logging.getLogger(__name__)

MAX_REMEMBERED_MESSAGES = 10_000


def extract_message(payload: dict[str, Any]) -> dict[str, Any] | None:
    """Return `entry[0].changes[0].value.messages[0]`, or None if absent."""
    try:
        message = payload["entry"][0]["changes"][0]["value"]["messages"][0]
    except (KeyError, IndexError, TypeError):
        return None
    return message if isinstance(message, dict) else None


class WebhookService:
    """Webhook business logic.

    WhatsApp redelivers messages it has not seen acknowledged, so message
    ids already handled are remembered (most recent
    `MAX_REMEMBERED_MESSAGES`) and acknowledged without reprocessing.
    """

    def __init__(self, status_service: StatusCheckService, verify_token: str) -> None:
        """Initialize the webhook service.

        Args:
            status_service: Queues status checks for text messages.
            verify_token: Token expected during subscription verification.
        """
        self.status_service = status_service
        self.verify_token = verify_token
        self._processed: OrderedDict[str, None] = OrderedDict()

    def verify(self, mode: str | None, token: str | None, challenge: str | None) -> str | None:
        """Check a subscription verification request.

        Returns:
            The challenge to echo back, or None if the token does not match.
        """
        if token and self.verify_token and token == self.verify_token:
            logger.info("Webhook verified (mode=%s)", mode)
            return challenge or ""
        logger.warning("Webhook verification failed")
        return None

    def _seen(self, message_id: str | None) -> bool:
        if not message_id:
            return False
        if message_id in self._processed:
            return True
        self._processed[message_id] = None
        while len(self._processed) > MAX_REMEMBERED_MESSAGES:
            self._processed.popitem(last=False)
        return False

    async def process_payload(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Process a webhook delivery.

        Args:
            payload: Raw Cloud API webhook body.

        Returns:
            Dictionary with processing result:
            - {"handled": True, "requestId": ..., "position": ...} for queued checks
            - {"handled": False, "reason": "..."} for ignored messages

        Raises:
            ValueError: if the payload carries no message.
        """
        message = extract_message(payload)
        if message is None:
            raise ValueError("Webhook payload contains no message")

        message_id = message.get("id")
        if self._seen(message_id):
            logger.info("Message %s already processed", message_id)
            return {"handled": False, "reason": "duplicate"}

        match message.get("type"):
            case "text":
                return await self._handle_text(message)
            case other:
                logger.info("Ignoring %s message %s", other, message_id)
                return {"handled": False, "reason": "unsupported_message_type"}

    async def _handle_text(self, message: dict[str, Any]) -> dict[str, Any]:
        sender = str(message.get("from") or "")
        body = str((message.get("text") or {}).get("body") or "")
        alias = body.strip()
        if not alias or not sender:
            return {"handled": False, "reason": "missing_required_fields"}

        ticket = await self.status_service.handle_request(alias, sender)
        return {"handled": True, "position": ticket.position}
