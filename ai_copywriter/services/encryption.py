import hashlib
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ai_copywriter.config import settings, DEV_ENCRYPTION_KEY, is_production

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
GCM_NONCE_LENGTH = 12
CBC_IV_LENGTH = 16
TOKEN_DELIMITER = ":"
HEX_KEY_PREFIX = "hex:"


class EncryptionError(Exception):
    """Raised when a value cannot be encrypted"""


class EncryptionKeyError(EncryptionError):
    """Raised when the configured key is unusable"""


class DecryptionError(Exception):
    """Raised when a ciphertext token cannot be decrypted"""


def derive_key(secret: str) -> bytes:
    """
    Derive the 32-byte AES key from the configured secret

    Args:
        secret: "hex:" followed by 64 hex characters, or any passphrase

    Returns:
        bytes: Raw key material

    Raises:
        EncryptionKeyError: If a hex key does not decode to exactly 32 bytes
    """
    if not secret:
        raise EncryptionKeyError("ENCRYPTION_KEY must not be empty")

    if secret.startswith(HEX_KEY_PREFIX):
        try:
            key = bytes.fromhex(secret[len(HEX_KEY_PREFIX):])
        except ValueError as e:
            raise EncryptionKeyError(f"ENCRYPTION_KEY is not valid hex: {e}") from e

        if len(key) != KEY_LENGTH:
            raise EncryptionKeyError("ENCRYPTION_KEY must be 32 bytes (64 hex characters)")
        return key

    return hashlib.sha256(secret.encode("utf-8")).digest()


class EncryptionService:
    """
    Symmetric encryption for small secrets such as provider API keys.

    Tokens look like ``<iv hex>:<ciphertext hex>``. New tokens use AES-256-GCM
    with a 12-byte nonce, so the GCM tag inside the ciphertext segment makes
    tampering detectable. Tokens carrying a 16-byte IV were written with
    AES-256-CBC and are still accepted by ``decrypt``.
    """

    def __init__(self, secret: Optional[str] = None):
        secret = settings.ENCRYPTION_KEY if secret is None else secret

        if secret == DEV_ENCRYPTION_KEY:
            if is_production():
                raise EncryptionKeyError("ENCRYPTION_KEY must be set in production")
            logger.warning("Using default encryption key. Set ENCRYPTION_KEY environment variable for production.")

        self._key = derive_key(secret)

    def encrypt(self, plaintext: str) -> str:
        try:
            nonce = os.urandom(GCM_NONCE_LENGTH)
            ciphertext = AESGCM(self._key).encrypt(nonce, plaintext.encode("utf-8"), None)
        except Exception as e:
            logger.error(f"Encryption error: {e}")
            raise EncryptionError("Failed to encrypt data") from e

        return f"{nonce.hex()}{TOKEN_DELIMITER}{ciphertext.hex()}"

    def decrypt(self, token: str) -> str:
        parts = (token or "").split(TOKEN_DELIMITER)
        if len(parts) != 2:
            raise DecryptionError("Invalid encrypted text format")

        try:
            iv = bytes.fromhex(parts[0])
            ciphertext = bytes.fromhex(parts[1])
        except ValueError as e:
            raise DecryptionError("Encrypted text is not valid hex") from e

        try:
            if len(iv) == GCM_NONCE_LENGTH:
                plaintext = AESGCM(self._key).decrypt(iv, ciphertext, None)
            elif len(iv) == CBC_IV_LENGTH:
                plaintext = self._decrypt_cbc(iv, ciphertext)
            else:
                raise DecryptionError(f"Unexpected IV length: {len(iv)} bytes")
            return plaintext.decode("utf-8")
        except DecryptionError:
            raise
        except (InvalidTag, ValueError) as e:
            logger.error(f"Decryption error: {type(e).__name__}")
            raise DecryptionError("Failed to decrypt data") from e

    def _decrypt_cbc(self, iv: bytes, ciphertext: bytes) -> bytes:
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
