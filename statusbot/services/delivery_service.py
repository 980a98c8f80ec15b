"""WhatsApp Cloud API delivery.

Text goes out as a single `messages` call. Images take two calls: the file
is uploaded to `media`, then a message references the returned media id.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from statusbot.config import BotConfig
from statusbot.errors import DeliveryFailure

logger = logging.getLogger(__name__)


class WhatsAppDeliveryService:
    """Sends text and image messages through the Graph API.

    Args:
        config: Bot configuration (phone number id, token, API version).
        client: Optional pre-built client, mainly for tests.
    """

    def __init__(self, config: BotConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self.base_url = (
            f"{config.whatsapp_api_base_url.rstrip('/')}/"
            f"{config.whatsapp_api_version}/{config.whatsapp_phone_number_id}"
        )
        self._client = client or httpx.AsyncClient(
            timeout=config.whatsapp_request_timeout_seconds
        )

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.whatsapp_token}"}

    async def _post(self, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await self._client.post(url, headers=self._auth_headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "WhatsApp %s call failed with %d: %s",
                endpoint,
                e.response.status_code,
                e.response.text[:500],
            )
            raise DeliveryFailure(
                f"WhatsApp {endpoint} call failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("WhatsApp %s call failed: %s", endpoint, e)
            raise DeliveryFailure(f"WhatsApp {endpoint} call failed: {e}") from e

        try:
            return response.json()
        except ValueError:
            return {}

    async def send_message(self, message: dict[str, Any]) -> dict[str, Any]:
        """Send a raw message payload."""
        return await self._post("messages", json=message)

    async def send_text(self, to: str, body: str) -> None:
        """Send a plain text message."""
        await self.send_message(
            {
                "messaging_product": "whatsapp",
                "recipient_type": "individual",
                "to": to,
                "type": "text",
                "text": {"body": body},
            }
        )
        logger.info("Text message sent to %s", to)

    async def upload_media(self, image_path: Path) -> str:
        """Upload an image and return its media id."""
        logger.info("Uploading media to WhatsApp: %s", image_path.name)
        try:
            content = image_path.read_bytes()
        except OSError as e:
            raise DeliveryFailure(f"Cannot read {image_path}: {e}") from e

        data = await self._post(
            "media",
            data={"messaging_product": "whatsapp"},
            files={"file": (image_path.name, content, "image/png")},
        )
        media_id = data.get("id")
        if not media_id:
            raise DeliveryFailure("Media upload returned no id")
        return str(media_id)

    async def send_image(self, to: str, image_path: Path, caption: str = "") -> None:
        """Upload `image_path` and send it as an image message."""
        media_id = await self.upload_media(image_path)
        await self.send_message(
            {
                "messaging_product": "whatsapp",
                "recipient_type": "individual",
                "to": to,
                "type": "image",
                "image": {"id": media_id, "caption": caption},
            }
        )
        logger.info("Image sent to %s", to)

    async def close(self) -> None:
        await self._client.aclose()
