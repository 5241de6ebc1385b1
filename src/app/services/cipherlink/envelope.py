"""
Cipherlink - Envelope Codec

Two AES variants sharing PKCS7 padding:

    TextEnvelopeCodec   - ECB, no IV, base64 text in and out. Used for every
                          request body and every ``result`` field on the wire.
    AssetEnvelopeCodec  - CBC with IV = MD5(name). Used for binary assets kept
                          encrypted at rest; the same name always yields the
                          same IV, different names yield different ciphertext.
"""

import base64
import binascii
import hashlib
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exceptions import ConfigError, CryptoError

BLOCK_SIZE_BITS = 128
VALID_KEY_LENGTHS = (16, 24, 32)


def _key_bytes(key: str | bytes) -> bytes:
    raw = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    if len(raw) not in VALID_KEY_LENGTHS:
        raise CryptoError(
            f"AES key must be 16, 24 or 32 bytes, got {len(raw)}",
            operation="key",
        )
    return raw


def _pad(data: bytes) -> bytes:
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    return padder.update(data) + padder.finalize()


def _unpad(data: bytes) -> bytes:
    unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
    return unpadder.update(data) + unpadder.finalize()


class TextEnvelopeCodec:
    """AES-ECB/PKCS7 with base64 transport encoding."""

    def __init__(self, key: str | bytes) -> None:
        self._key = _key_bytes(key)

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.ECB())

    def encrypt_bytes(self, data: bytes) -> str:
        encryptor = self._cipher().encryptor()
        ciphertext = encryptor.update(_pad(data)) + encryptor.finalize()
        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt_bytes(self, data: str) -> bytes:
        try:
            ciphertext = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CryptoError(f"Malformed base64 ciphertext: {e}", operation="decode") from e

        try:
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            return _unpad(padded)
        except ValueError as e:
            raise CryptoError(f"Ciphertext corrupt or key mismatch: {e}", operation="decrypt") from e

    def encrypt(self, text: str) -> str:
        """Pad, encrypt and base64-encode UTF-8 text."""
        return self.encrypt_bytes(text.encode("utf-8"))

    def decrypt(self, data: str) -> str:
        """Base64-decode, decrypt, strip padding and decode as UTF-8."""
        plaintext = self.decrypt_bytes(data)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoError("Decrypted payload is not valid UTF-8", operation="decode") from e


class AssetEnvelopeCodec:
    """AES-CBC/PKCS7 keyed by a shared secret, IV derived from the asset name."""

    def __init__(self, key: str | bytes) -> None:
        self._key = _key_bytes(key)

    @classmethod
    def from_settings(cls, settings: Any) -> "AssetEnvelopeCodec":
        """Build from CIPHERLINK_ASSET_AES_KEY."""
        secret = settings.CIPHERLINK_ASSET_AES_KEY
        if secret is None:
            raise ConfigError("CIPHERLINK_ASSET_AES_KEY is not set", config_key="CIPHERLINK_ASSET_AES_KEY")
        return cls(secret.get_secret_value())

    @staticmethod
    def derive_iv(name: str) -> bytes:
        return hashlib.md5(name.encode("utf-8")).digest()

    def _cipher(self, name: str) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self.derive_iv(name)))

    def encrypt(self, data: bytes, name: str) -> bytes:
        encryptor = self._cipher(name).encryptor()
        return encryptor.update(_pad(data)) + encryptor.finalize()

    def decrypt(self, data: bytes, name: str) -> bytes:
        try:
            decryptor = self._cipher(name).decryptor()
            padded = decryptor.update(data) + decryptor.finalize()
            return _unpad(padded)
        except ValueError as e:
            raise CryptoError(f"Asset {name} could not be decrypted: {e}", operation="decrypt") from e
