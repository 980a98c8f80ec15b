"""Data Access Objects package."""

from .base import BaseDAO
from .credential_dao import CredentialDAO
from .request_log_dao import RequestLogDAO

__all__ = [
    "BaseDAO",
    "CredentialDAO",
    "RequestLogDAO",
]
