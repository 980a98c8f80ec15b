"""Unit tests for credential decryption and lookup."""

from unittest.mock import AsyncMock

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from statusbot.errors import CredentialDecryptionFailure
from statusbot.models.domain import EncryptedCredential
from statusbot.services.credential_service import CredentialCipher, CredentialService

KEY_HEX = "00112233445566778899aabbccddeeff" * 2
IV_HEX = "0f0e0d0c0b0a09080706050403020100"


@pytest.fixture
def cipher():
    return CredentialCipher(KEY_HEX, IV_HEX)


def _space_padded(plaintext: str) -> str:
    """Encrypt the way the provisioning tool does: pad with spaces, no PKCS7."""
    data = plaintext.encode()
    data += b" " * (-len(data) % 16)
    encryptor = Cipher(
        algorithms.AES(bytes.fromhex(KEY_HEX)), modes.CBC(bytes.fromhex(IV_HEX))
    ).encryptor()
    return (encryptor.update(data) + encryptor.finalize()).hex()


class TestCredentialCipher:
    def test_space_padded_field(self, cipher):
        assert cipher.decrypt(_space_padded("https://mc.manuscriptcentral.com")) == (
            "https://mc.manuscriptcentral.com"
        )

    def test_pkcs7_padded_field(self, cipher):
        assert cipher.decrypt(cipher.encrypt("alice@example.org")) == "alice@example.org"

    def test_empty_field(self, cipher):
        assert cipher.decrypt("") == ""

    def test_non_hex_field(self, cipher):
        with pytest.raises(CredentialDecryptionFailure):
            cipher.decrypt("not-hex!")

    def test_wrong_block_length(self, cipher):
        with pytest.raises(CredentialDecryptionFailure):
            cipher.decrypt("abcd")

    def test_aes_128(self):
        cipher = CredentialCipher(KEY_HEX[:32], IV_HEX, "aes-128-cbc")

        assert cipher.decrypt(cipher.encrypt("pw")) == "pw"

    @pytest.mark.parametrize(
        "key,iv,algorithm",
        [
            (KEY_HEX, IV_HEX, "des-cbc"),
            (KEY_HEX[:32], IV_HEX, "aes-256-cbc"),
            (KEY_HEX, IV_HEX[:16], "aes-256-cbc"),
            ("zz", IV_HEX, "aes-256-cbc"),
        ],
    )
    def test_invalid_settings(self, key, iv, algorithm):
        with pytest.raises(ValueError):
            CredentialCipher(key, iv, algorithm)


@pytest.fixture
def dao():
    return AsyncMock()


@pytest.fixture
def service(dao, cipher):
    return CredentialService(dao, cipher)


def _record(cipher, url="https://www.editorialmanager.com/x", username="alice", password="pw"):
    return EncryptedCredential(
        url=cipher.encrypt(url) if url else "",
        username=cipher.encrypt(username) if username else "",
        password=cipher.encrypt(password) if password else "",
    )


class TestCredentialService:
    async def test_lookup_decrypts_all_fields(self, service, dao, cipher):
        dao.find_by_alias.return_value = [_record(cipher)]

        credentials = await service.lookup("  alice@example.org ")

        dao.find_by_alias.assert_awaited_once_with("alice@example.org")
        assert len(credentials) == 1
        assert credentials[0].url == "https://www.editorialmanager.com/x"
        assert credentials[0].username == "alice"
        assert credentials[0].password == "pw"

    @pytest.mark.parametrize("missing", ["url", "username", "password"])
    async def test_record_with_any_empty_field_is_excluded(
        self, service, dao, cipher, missing
    ):
        dao.find_by_alias.return_value = [
            _record(cipher, **{missing: ""}),
            _record(cipher, username="bob"),
        ]

        credentials = await service.lookup("alice")

        assert [c.username for c in credentials] == ["bob"]

    async def test_undecryptable_field_excludes_record(self, service, dao, cipher):
        record = _record(cipher)
        record.password = "deadbeef"
        dao.find_by_alias.return_value = [record]

        assert await service.lookup("alice") == []

    async def test_blank_alias_skips_lookup(self, service, dao):
        assert await service.lookup("   ") == []
        dao.find_by_alias.assert_not_awaited()

    def test_password_not_in_repr(self, service, cipher):
        credential = service.decrypt_record(_record(cipher, password="hunter2"))

        assert "hunter2" not in repr(credential)
