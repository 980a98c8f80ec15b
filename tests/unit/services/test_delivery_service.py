"""Unit tests for WhatsAppDeliveryService using httpx.MockTransport."""

import json

import httpx
import pytest

from statusbot.config import BotConfig
from statusbot.errors import DeliveryFailure
from statusbot.services.delivery_service import WhatsAppDeliveryService

BASE = "https://graph.facebook.com/v21.0/12345"


@pytest.fixture
def config():
    return BotConfig(whatsapp_phone_number_id="12345", whatsapp_token="wa-token")


def _service(config, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WhatsAppDeliveryService(config, client=client)


async def test_send_text(config):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    service = _service(config, handler)
    await service.send_text("15550001111", "No new screenshots available.")
    await service.close()

    assert len(requests) == 1
    assert str(requests[0].url) == f"{BASE}/messages"
    assert requests[0].headers["Authorization"] == "Bearer wa-token"
    assert json.loads(requests[0].content) == {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": "15550001111",
        "type": "text",
        "text": {"body": "No new screenshots available."},
    }


async def test_send_image_uploads_then_references_media(config, tmp_path):
    image = tmp_path / "status.png"
    image.write_bytes(b"\x89PNG")
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/media"):
            return httpx.Response(200, json={"id": "media-42"})
        return httpx.Response(200, json={})

    service = _service(config, handler)
    await service.send_image("15550001111", image, "Status update: status")

    assert [r.url.path.rsplit("/", 1)[-1] for r in requests] == ["media", "messages"]
    upload = requests[0]
    assert upload.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="messaging_product"' in upload.content
    assert b"\x89PNG" in upload.content
    message = json.loads(requests[1].content)
    assert message["type"] == "image"
    assert message["image"] == {"id": "media-42", "caption": "Status update: status"}


async def test_http_error_raises_delivery_failure(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "bad token"}})

    service = _service(config, handler)

    with pytest.raises(DeliveryFailure, match="401"):
        await service.send_text("1555", "hi")


async def test_transport_error_raises_delivery_failure(config):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(config, handler)

    with pytest.raises(DeliveryFailure):
        await service.send_text("1555", "hi")


async def test_upload_without_id_fails(config, tmp_path):
    image = tmp_path / "status.png"
    image.write_bytes(b"png")

    service = _service(config, lambda request: httpx.Response(200, json={}))

    with pytest.raises(DeliveryFailure):
        await service.send_image("1555", image)


async def test_missing_image_fails(config, tmp_path):
    service = _service(config, lambda request: httpx.Response(200, json={"id": "x"}))

    with pytest.raises(DeliveryFailure):
        await service.send_image("1555", tmp_path / "missing.png")
