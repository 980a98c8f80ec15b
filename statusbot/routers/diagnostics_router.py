"""Diagnostics endpoints for checking the credential cipher setup.

Only sizes and presence flags are reported; key material never leaves the
process.
"""

import platform
from typing import TYPE_CHECKING

import cryptography
from fastapi import APIRouter

from statusbot.models.base import JsonModel

if TYPE_CHECKING:
    from statusbot.config import BotConfig
    from statusbot.services.credential_service import CredentialCipher


class CryptoSettings(JsonModel):
    """Which encryption settings the configuration provides."""

    algorithm: str
    key_present: bool
    iv_present: bool


class CryptoInfoResponse(JsonModel):
    python_version: str
    cryptography_version: str
    algorithm: str
    key_length: int
    iv_length: int
    environment: CryptoSettings


def create_diagnostics_router(cipher: "CredentialCipher", config: "BotConfig") -> APIRouter:
    """Create the diagnostics router.

    Args:
        cipher: The cipher the credential service decrypts with
        config: Configuration the cipher was built from

    Returns:
        APIRouter with the crypto-info endpoint configured
    """
    router = APIRouter(tags=["diagnostics"])

    @router.get("/crypto-info", response_model=CryptoInfoResponse)
    async def crypto_info() -> CryptoInfoResponse:
        """Report the active cipher and key/IV sizes in bytes."""
        return CryptoInfoResponse(
            python_version=platform.python_version(),
            cryptography_version=cryptography.__version__,
            algorithm=cipher.algorithm,
            key_length=cipher.key_length,
            iv_length=cipher.iv_length,
            environment=CryptoSettings(
                algorithm=config.encryption_algorithm,
                key_present=bool(config.encryption_key),
                iv_present=bool(config.encryption_iv),
            ),
        )

    return router
