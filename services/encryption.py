"""
AES-256-GCM for values kept in session storage (tokens, user profile).

No storage knowledge lives here; EncryptedStorage calls these helpers with the
storage key as salt component, so a blob moved to a different key will not
decrypt. Blob layout: base64(nonce | ciphertext | tag).
"""

import base64
import binascii
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

import config

NONCE_SIZE = 12
KEY_LENGTH = 32
KDF_ITERATIONS = 100_000


class EncryptionService:

    @staticmethod
    @lru_cache(maxsize=32)
    def _derive_aes_key(salt_component: str, secret: str) -> bytes:
        """PBKDF2-SHA256 over the master secret, salted with secret + storage key."""
        if not secret:
            raise ValueError("Encryption secret cannot be empty")
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=f"{secret}{salt_component}".encode(),
            iterations=KDF_ITERATIONS,
        )
        return kdf.derive(secret.encode())

    @staticmethod
    def _cipher(salt_component: str, secret: str | None) -> AESGCM:
        return AESGCM(EncryptionService._derive_aes_key(
            salt_component, config.SESSION_ENCRYPTION_SECRET if secret is None else secret
        ))

    @staticmethod
    def encrypt_value(plaintext: str, salt_component: str, secret: str | None = None) -> str:
        cipher = EncryptionService._cipher(salt_component, secret)
        nonce = os.urandom(NONCE_SIZE)
        sealed = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + sealed).decode("ascii")

    @staticmethod
    def decrypt_value(blob: str, salt_component: str, secret: str | None = None) -> str:
        """
        Reverse encrypt_value.

        Raises ValueError for blobs that are not valid base64, are too short to
        hold a nonce, or fail the GCM tag check (tampering, wrong key or secret).
        """
        try:
            raw = base64.b64decode(blob.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise ValueError(f"Malformed encrypted value: {e}")
        if len(raw) <= NONCE_SIZE:
            raise ValueError("Malformed encrypted value: too short")

        nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        try:
            opened = EncryptionService._cipher(salt_component, secret).decrypt(nonce, sealed, None)
        except InvalidTag:
            raise ValueError("Encrypted value failed authentication")
        return opened.decode("utf-8")
