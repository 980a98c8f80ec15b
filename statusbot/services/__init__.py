"""Business logic services package."""

from .credential_service import CredentialCipher, CredentialService
from .delivery_service import WhatsAppDeliveryService
from .request_log_service import RequestLogService
from .status_check_service import (
    ALL_SENT_TEXT,
    INCOMPLETE_TEXT,
    NOT_FOUND_TEXT,
    StatusCheckService,
)
from .webhook_service import WebhookService

__all__ = [
    "ALL_SENT_TEXT",
    "CredentialCipher",
    "CredentialService",
    "INCOMPLETE_TEXT",
    "NOT_FOUND_TEXT",
    "RequestLogService",
    "StatusCheckService",
    "WebhookService",
    "WhatsAppDeliveryService",
]
