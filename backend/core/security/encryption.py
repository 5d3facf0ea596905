"""
Field encryption using AES-256-CBC.

Encrypted values are stored as ``base64(iv):base64(ciphertext)``. Records
already in the database use this exact layout, so it must not change.
"""

import base64
import binascii
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import ConfigurationError, DecryptionError, InvalidInputError

KEY_LENGTH = 32
IV_LENGTH = 16
BLOCK_SIZE_BITS = 128
SEPARATOR = ":"


class SymmetricCipher:
    """Encrypt and decrypt sensitive fields with a fixed 32-byte key."""

    def __init__(self, key: str | bytes | None):
        """
        Initialize with the shared key.

        Args:
            key: Exactly 32 bytes (a str is UTF-8 encoded first)

        Raises:
            ConfigurationError: If the key is missing or not 32 bytes long
        """
        if not key:
            raise ConfigurationError("Encryption key is not configured")

        key_bytes = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        if len(key_bytes) != KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be exactly {KEY_LENGTH} bytes for AES-256. "
                f"Current length: {len(key_bytes)}"
            )

        self._algorithm = algorithms.AES(key_bytes)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a string value.

        A fresh random IV is generated on every call, so encrypting the same
        value twice yields different output.

        Args:
            plaintext: Plain text value to encrypt

        Returns:
            ``base64(iv):base64(ciphertext)``

        Raises:
            InvalidInputError: If plaintext is empty or whitespace-only
        """
        if not isinstance(plaintext, str) or not plaintext.strip():
            raise InvalidInputError("Text to encrypt cannot be empty")

        iv = os.urandom(IV_LENGTH)

        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return f"{_b64encode(iv)}{SEPARATOR}{_b64encode(ciphertext)}"

    def decrypt(self, token: str) -> str:
        """
        Decrypt a value produced by :meth:`encrypt`.

        Args:
            token: ``base64(iv):base64(ciphertext)``

        Returns:
            Decrypted plain text value

        Raises:
            InvalidInputError: If the token is empty or not in the expected format
            DecryptionError: If the ciphertext fails to decrypt under this key
        """
        if not isinstance(token, str) or not token:
            raise InvalidInputError("Encrypted data cannot be empty")

        parts = token.split(SEPARATOR)
        if len(parts) != 2:
            raise InvalidInputError(
                "Invalid encrypted data format. Expected format: iv:encryptedData"
            )

        iv = _b64decode(parts[0], "IV")
        ciphertext = _b64decode(parts[1], "ciphertext")

        if len(iv) != IV_LENGTH:
            raise InvalidInputError(f"IV must be {IV_LENGTH} bytes, got {len(iv)}")

        if not ciphertext or len(ciphertext) % (BLOCK_SIZE_BITS // 8):
            raise DecryptionError("Ciphertext length is not a whole number of blocks")

        decryptor = Cipher(self._algorithm, modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        try:
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("Bad decrypt: invalid padding") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted data is not valid UTF-8") from e


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(value: str, label: str) -> bytes:
    if not value:
        raise InvalidInputError(f"Encrypted data is missing the {label} part")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"{label} is not valid base64") from e
