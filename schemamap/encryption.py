"""Authenticated encryption of short secrets (database passwords, API keys).

AES-256-GCM with a fresh random IV generated inside every :func:`encrypt`
call; callers never supply an IV. Keys are either 256 random bits or derived
from a passphrase with scrypt and a fixed application salt, so the same
passphrase always yields the same key without storing a salt. The fixed salt
gives up rainbow-table resistance across installations; that is an accepted
limitation.
"""

import binascii
import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from schemamap.constants import (
    ENCRYPTION_ALGORITHM,
    IV_LENGTH,
    KEY_LENGTH,
    SCRYPT_N,
    SCRYPT_P,
    SCRYPT_R,
    SCRYPT_SALT,
    TAG_LENGTH,
)
from schemamap.errors import AuthenticationError, MalformedArtifact
from schemamap.models import EncryptedPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptionKey:
    """A 256-bit installation key"""

    key: bytes

    def __post_init__(self) -> None:
        if len(self.key) != KEY_LENGTH:
            raise ValueError(f"Encryption key must be {KEY_LENGTH} bytes, got {len(self.key)}")

    def __repr__(self) -> str:
        return "EncryptionKey(<redacted>)"

    @classmethod
    def generate(cls) -> "EncryptionKey":
        """Generate a random 256-bit key."""
        return cls(os.urandom(KEY_LENGTH))

    @classmethod
    def from_passphrase(cls, passphrase: str) -> "EncryptionKey":
        """Derive a key from a passphrase (deterministic for a given passphrase)."""
        if not passphrase:
            raise ValueError("Passphrase must not be empty")
        kdf = Scrypt(salt=SCRYPT_SALT, length=KEY_LENGTH, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
        return cls(kdf.derive(passphrase.encode("utf-8")))

    @classmethod
    def from_hex(cls, key_hex: str) -> "EncryptionKey":
        """Parse a hex-encoded key as stored in the key file."""
        try:
            return cls(bytes.fromhex(key_hex.strip()))
        except ValueError as e:
            raise ValueError(f"Invalid encryption key: {e}") from e

    def to_hex(self) -> str:
        return self.key.hex()


def _decode_hex(value: str, field: str) -> bytes:
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, ValueError) as e:
        raise MalformedArtifact(f"Encrypted payload field '{field}' is not valid hex") from e


class EncryptionService:
    """Encrypts and decrypts secrets with one installation key"""

    def __init__(self, key: EncryptionKey) -> None:
        self._key = key
        self._cipher = AESGCM(key.key)

    def encrypt(self, plaintext: str) -> EncryptedPayload:
        """Encrypt a secret string under a new random IV.

        Args:
            plaintext: Secret to encrypt

        Returns:
            EncryptedPayload with hex-encoded iv, tag and ciphertext
        """
        iv = os.urandom(IV_LENGTH)
        sealed = self._cipher.encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return EncryptedPayload(
            algorithm=ENCRYPTION_ALGORITHM,
            iv=iv.hex(),
            tag=tag.hex(),
            ciphertext=ciphertext.hex(),
        )

    def decrypt(self, payload: EncryptedPayload) -> str:
        """Decrypt a payload, verifying its authentication tag.

        Args:
            payload: Encrypted payload

        Returns:
            The original plaintext

        Raises:
            AuthenticationError: If the tag does not verify (wrong key or tampering)
            MalformedArtifact: If the payload is structurally invalid
        """
        if payload.algorithm != ENCRYPTION_ALGORITHM:
            raise MalformedArtifact(f"Unsupported encryption algorithm: {payload.algorithm}")

        iv = _decode_hex(payload.iv, "iv")
        tag = _decode_hex(payload.tag, "tag")
        ciphertext = _decode_hex(payload.ciphertext, "ciphertext")
        if len(iv) != IV_LENGTH:
            raise MalformedArtifact(f"Encrypted payload iv must be {IV_LENGTH} bytes, got {len(iv)}")
        if len(tag) != TAG_LENGTH:
            raise MalformedArtifact(f"Encrypted payload tag must be {TAG_LENGTH} bytes, got {len(tag)}")

        try:
            plaintext = self._cipher.decrypt(iv, ciphertext + tag, None)
        except InvalidTag as e:
            logger.debug("Authentication tag mismatch while decrypting payload")
            raise AuthenticationError(
                "Decryption failed: authentication tag mismatch (wrong key or corrupted payload)"
            ) from e
        return plaintext.decode("utf-8")


def encrypt(plaintext: str, key: EncryptionKey) -> EncryptedPayload:
    """Encrypt ``plaintext`` with ``key``."""
    return EncryptionService(key).encrypt(plaintext)


def decrypt(payload: EncryptedPayload, key: EncryptionKey) -> str:
    """Decrypt ``payload`` with ``key``."""
    return EncryptionService(key).decrypt(payload)
