"""AES-256-GCM encryption for secrets stored at rest (user API keys).

Ciphertext format: ``iv_hex:tag_hex:ciphertext_hex``.
"""
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from flask import current_app

logger = logging.getLogger(__name__)

IV_LENGTH = 16
TAG_LENGTH = 16
MIN_KEY_LENGTH = 32


class EncryptionKeyError(RuntimeError):
    pass


def _derive_key(secret: str | None = None) -> bytes:
    secret = secret if secret is not None else current_app.config.get("ENCRYPTION_KEY")

    if not secret:
        raise EncryptionKeyError(
            "ENCRYPTION_KEY is required. Generate one with: openssl rand -hex 32"
        )
    if len(secret) < MIN_KEY_LENGTH:
        raise EncryptionKeyError(f"ENCRYPTION_KEY must be at least {MIN_KEY_LENGTH} characters")

    digest = hashes.Hash(hashes.SHA256())
    digest.update(secret.encode("utf-8"))
    return digest.finalize()


def encrypt(text: str, secret: str | None = None) -> str:
    key = _derive_key(secret)
    iv = os.urandom(IV_LENGTH)

    # AESGCM appends the tag to the ciphertext
    sealed = AESGCM(key).encrypt(iv, text.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

    return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"


def decrypt(encrypted_text: str, secret: str | None = None) -> str:
    """
    Decrypt a value produced by ``encrypt``.

    Values that are not in three-part form, that fail authentication, or
    that cannot be decrypted for want of a key are returned unchanged: rows
    written before encryption hold plaintext.
    """
    parts = encrypted_text.split(":")
    if len(parts) != 3:
        return encrypted_text

    try:
        key = _derive_key(secret)
        iv, tag, ciphertext = (bytes.fromhex(p) for p in parts)
        plain = AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except EncryptionKeyError as exc:
        logger.warning("Stored secret left as is: %s", exc)
        return encrypted_text
    except (ValueError, InvalidTag):
        logger.warning("Stored secret could not be decrypted, treating it as plaintext")
        return encrypted_text

    return plain.decode("utf-8")
