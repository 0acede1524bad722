"""
Credential vault - AES-256-CBC encryption for connection secrets at rest.

Envelopes are persisted as JSON text: ``{"iv": <hex>, "encryptedData": <hex>}``.
A fresh 16 byte IV is drawn for every call to ``encrypt``.
"""
from typing import Any, Dict, Union
import binascii
import json
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from apiforge.core.errors import ConfigurationError, CredentialsError

KEY_LENGTH = 32
IV_LENGTH = 16
BLOCK_SIZE_BITS = 128

Envelope = Dict[str, str]


class DecryptionError(CredentialsError):
    """Envelope malformed, wrong key, or padding check failed."""


def _coerce_key(key: Union[str, bytes]) -> bytes:
    if isinstance(key, str):
        if len(key) == KEY_LENGTH * 2:
            try:
                return bytes.fromhex(key)
            except ValueError:
                pass
        key = key.encode("utf-8")
    if len(key) != KEY_LENGTH:
        raise ConfigurationError(f"Encryption key must be {KEY_LENGTH} bytes")
    return key


class CredentialVault:
    """Symmetric encrypt/decrypt of JSON-serializable secrets."""

    def __init__(self, key: Union[str, bytes]):
        self._key = _coerce_key(key)

    def encrypt(self, plaintext: Any) -> Envelope:
        """Encrypt a JSON-serializable value into an envelope."""
        data = json.dumps(plaintext).encode("utf-8")
        iv = os.urandom(IV_LENGTH)

        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(data) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return {"iv": iv.hex(), "encryptedData": ciphertext.hex()}

    def encrypt_to_text(self, plaintext: Any) -> str:
        """Encrypt and serialize the envelope for storage."""
        return json.dumps(self.encrypt(plaintext))

    def decrypt(self, envelope: Union[str, Envelope]) -> Any:
        """
        Decrypt an envelope (dict or its JSON text) back to the original value.

        Raises:
            DecryptionError: on any malformed input, wrong key or bad padding.
                The underlying cipher error is never attached to the message.
        """
        try:
            if isinstance(envelope, str):
                envelope = json.loads(envelope)
            iv = bytes.fromhex(envelope["iv"])
            ciphertext = bytes.fromhex(envelope["encryptedData"])
        except (ValueError, TypeError, KeyError, binascii.Error):
            raise DecryptionError() from None

        if len(iv) != IV_LENGTH or not ciphertext or len(ciphertext) % IV_LENGTH:
            raise DecryptionError()

        try:
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return json.loads(data.decode("utf-8"))
        except (ValueError, UnicodeDecodeError):
            raise DecryptionError() from None
