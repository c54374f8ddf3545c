"""
At-rest encryption for message content.

AES-256-GCM with a scrypt-derived key. Encoded format:
``base64(iv):base64(auth_tag):base64(ciphertext)``.
"""

from __future__ import annotations

import base64
import binascii
import secrets
from functools import lru_cache
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from streamchat.core.config import get_settings
from streamchat.core.logger import logger

_SALT = b"ai-chat-app-salt"
_KEY_LENGTH = 32
_IV_LENGTH = 16
_AUTH_TAG_LENGTH = 16
_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1


@lru_cache(maxsize=8)
def _derive_key(secret: str) -> bytes:
    kdf = Scrypt(salt=_SALT, length=_KEY_LENGTH, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P)
    return kdf.derive(secret.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class MessageCipher:
    """Reversible encode/decode applied to message bodies at the storage boundary."""

    def __init__(self, secret: Optional[str] = None):
        self._secret = secret or None

    @property
    def enabled(self) -> bool:
        return self._secret is not None

    def encrypt(self, plaintext: str) -> str:
        """Encrypt unconditionally. Requires a configured secret."""
        if not self._secret:
            raise ValueError("Encryption key is not configured")
        iv = secrets.token_bytes(_IV_LENGTH)
        sealed = AESGCM(_derive_key(self._secret)).encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, auth_tag = sealed[:-_AUTH_TAG_LENGTH], sealed[-_AUTH_TAG_LENGTH:]
        return f"{_b64(iv)}:{_b64(auth_tag)}:{_b64(ciphertext)}"

    def decrypt(self, encoded: str) -> str:
        """
        Decrypt an ``iv:tag:ciphertext`` string.

        Content not in the three-part format, or that fails to decrypt, is
        returned as-is.
        """
        if not self._secret:
            raise ValueError("Encryption key is not configured")

        parts = encoded.split(":")
        if len(parts) != 3:
            return encoded

        iv_b64, tag_b64, ciphertext_b64 = parts
        try:
            iv = base64.b64decode(iv_b64, validate=True)
            auth_tag = base64.b64decode(tag_b64, validate=True)
            ciphertext = base64.b64decode(ciphertext_b64, validate=True)
            plaintext = AESGCM(_derive_key(self._secret)).decrypt(iv, ciphertext + auth_tag, None)
            return plaintext.decode("utf-8")
        except (binascii.Error, InvalidTag, ValueError) as e:
            logger.error(f"Message decryption failed: {e!r}")
            return encoded

    def encode(self, plaintext: str) -> str:
        """Encrypt if a key is configured, otherwise pass through."""
        if not self.enabled:
            return plaintext
        return self.encrypt(plaintext)

    def decode(self, content: str) -> str:
        """
        Decrypt content that looks encrypted, otherwise pass through.

        Plaintext that happens to contain exactly two colons looks encrypted;
        it fails to decrypt and comes back unchanged.
        """
        if not self.enabled:
            return content
        if ":" not in content or len(content.split(":")) != 3:
            return content
        return self.decrypt(content)


@lru_cache()
def get_message_cipher() -> MessageCipher:
    """Get the cipher configured from ENCRYPTION_KEY."""
    return MessageCipher(get_settings().ENCRYPTION_KEY)
