"""Credential lookup and decryption.

Credential fields are stored individually encrypted as hex AES-CBC
ciphertext. Two padding schemes exist in the stored data: space padding
(decrypted without unpadding, trailing spaces removed) and PKCS#7.
"""

from __future__ import annotations

import logging
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from statusbot.dao.credential_dao import CredentialDAO
from statusbot.errors import CredentialDecryptionFailure
from statusbot.models.domain import Credential, EncryptedCredential
from statusbot.observability.redaction import mask_secret

logger = logging.getLogger(__name__)

_KEY_BYTES = {
    "aes-128-cbc": 16,
    "aes-192-cbc": 24,
    "aes-256-cbc": 32,
}

_FIELDS = ("url", "username", "password")

_PADDING_TAIL = re.compile(r"[\x00-\x10]$")


class CredentialCipher:
    """Decrypts single credential fields.

    Args:
        key_hex: Hex-encoded AES key.
        iv_hex: Hex-encoded 16-byte IV.
        algorithm: One of aes-128-cbc, aes-192-cbc, aes-256-cbc.

    Raises:
        ValueError: if the algorithm is unsupported or key/iv sizes are wrong.
    """

    def __init__(self, key_hex: str, iv_hex: str, algorithm: str = "aes-256-cbc") -> None:
        algorithm = algorithm.lower()
        if algorithm not in _KEY_BYTES:
            raise ValueError(f"Unsupported encryption algorithm: {algorithm}")

        try:
            key = bytes.fromhex(key_hex)
            iv = bytes.fromhex(iv_hex)
        except ValueError as e:
            raise ValueError("Encryption key and IV must be hex encoded") from e

        if len(key) != _KEY_BYTES[algorithm]:
            raise ValueError(
                f"{algorithm} needs a {_KEY_BYTES[algorithm]}-byte key, got {len(key)}"
            )
        if len(iv) != 16:
            raise ValueError(f"IV must be 16 bytes, got {len(iv)}")

        self.algorithm = algorithm
        self._key = key
        self._iv = iv

    @property
    def key_length(self) -> int:
        """Key size in bytes."""
        return len(self._key)

    @property
    def iv_length(self) -> int:
        return len(self._iv)

    def _decrypt_raw(self, data: bytes) -> bytes:
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(self._iv)).decryptor()
        return decryptor.update(data) + decryptor.finalize()

    def decrypt(self, text: str) -> str:
        """Decrypt one hex-encoded field.

        Returns:
            The plaintext; empty input gives an empty string.

        Raises:
            CredentialDecryptionFailure: if neither padding scheme yields text.
        """
        if not text:
            return ""

        try:
            data = bytes.fromhex(text)
        except ValueError as e:
            raise CredentialDecryptionFailure("Field is not hex encoded") from e

        try:
            raw = self._decrypt_raw(data)
        except ValueError as e:
            raise CredentialDecryptionFailure("Field could not be decrypted") from e

        try:
            plain = raw.rstrip(b" ").decode("utf-8")
            # A trailing control byte means the field was PKCS7 padded.
            if plain and not _PADDING_TAIL.search(plain):
                return plain
        except UnicodeDecodeError:
            pass
        logger.debug("Space-padded decryption failed, trying PKCS7")

        try:
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain_bytes = unpadder.update(raw) + unpadder.finalize()
            return plain_bytes.decode("utf-8").strip()
        except (ValueError, UnicodeDecodeError) as e:
            raise CredentialDecryptionFailure("Field could not be decrypted") from e

    def encrypt(self, plaintext: str) -> str:
        """Encrypt with PKCS7 padding; used to seed the credential store."""
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        data = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(self._iv)).encryptor()
        return (encryptor.update(data) + encryptor.finalize()).hex()


class CredentialService:
    """Finds and decrypts the credentials registered for a requester alias."""

    def __init__(self, dao: CredentialDAO, cipher: CredentialCipher) -> None:
        self.dao = dao
        self.cipher = cipher

    async def find_records(self, alias: str) -> list[EncryptedCredential]:
        """Raw rows matching the alias, still encrypted."""
        alias = alias.strip()
        if not alias:
            return []
        return await self.dao.find_by_alias(alias)

    def decrypt_record(self, record: EncryptedCredential, index: int = 0) -> Credential | None:
        """Decrypt all three fields of a row.

        Returns:
            The credential, or None if any field is missing, undecryptable
            or decrypts to an empty value.
        """
        values: dict[str, str] = {}
        for name in _FIELDS:
            try:
                values[name] = self.cipher.decrypt(getattr(record, name) or "")
            except CredentialDecryptionFailure as e:
                logger.error("Record %d: %s decryption error: %s", index, name, e)
                values[name] = ""

        missing = [name for name in _FIELDS if not values[name]]
        if missing:
            logger.warning("Record %d excluded, empty fields: %s", index, ", ".join(missing))
            return None
        logger.debug(
            "Record %d decrypted: %s (user %s)", index, values["url"], mask_secret(values["username"])
        )
        return Credential(**values)

    def decrypt_records(self, records: list[EncryptedCredential]) -> list[Credential]:
        """Decrypt rows, dropping any that are incomplete."""
        credentials = []
        for index, record in enumerate(records):
            credential = self.decrypt_record(record, index)
            if credential is not None:
                credentials.append(credential)
        logger.info("Valid credentials: %d of %d", len(credentials), len(records))
        return credentials

    async def lookup(self, alias: str) -> list[Credential]:
        """Usable credentials for an alias (email first, then client name)."""
        return self.decrypt_records(await self.find_records(alias))
