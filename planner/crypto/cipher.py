"""
Authenticated encryption of opaque bearer tokens for cookie transport.

Background:
    The session cookie carries a signed bearer token. Sealing it with AES-256-GCM
    makes the cookie value opaque (the token's claims are not readable by the
    browser or intermediaries) and tamper-evident (any modified byte fails the
    128-bit authentication tag).

Wire format (URL-safe base64, no padding):

    nonce (12 bytes) || ciphertext || tag (16 bytes)

A fresh random nonce is drawn from the OS CSPRNG for every `seal` call.
"""

from __future__ import annotations

import base64
import logging
import os
import re

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
NONCE_LENGTH = 12
TAG_LENGTH = 16

_URLSAFE_ALPHABET_RE = re.compile(r"^[A-Za-z0-9_-]*$")


class DecryptError(Exception):
    """Raised when a sealed value cannot be opened. Carries no detail about why."""

    def __init__(self) -> None:
        super().__init__("Unable to open sealed value")


def derive_key(secret: str) -> bytes:
    """UTF-8 bytes of the secret, truncated or zero-padded to 32 bytes."""
    raw = secret.encode("utf-8")[:KEY_LENGTH]
    return raw.ljust(KEY_LENGTH, b"\x00")


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    if not _URLSAFE_ALPHABET_RE.match(text) or len(text) % 4 == 1:
        raise ValueError("not url-safe base64")
    data = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    # Reject non-canonical encodings (unused trailing bits set) so that every
    # distinct text maps to distinct bytes.
    if _b64encode(data) != text:
        raise ValueError("non-canonical base64")
    return data


class TokenCipher:
    """
    AES-256-GCM codec for cookie values.

    The key is derived once at construction and held for the life of the
    instance. Instances are safe to share across threads: AESGCM holds no
    per-call state and `os.urandom` is thread-safe.
    """

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("encryption secret must be configured")
        self._aead = AESGCM(derive_key(secret))
        logger.info("Token cipher initialized (AES-256-GCM)")

    def __repr__(self) -> str:
        return "TokenCipher(<AES-256-GCM>)"

    def seal(self, plaintext: str) -> str:
        nonce = os.urandom(NONCE_LENGTH)
        ciphertext_and_tag = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return _b64encode(nonce + ciphertext_and_tag)

    def open(self, sealed: str) -> str:
        """
        Decode, verify and decrypt a sealed value.

        Malformed encoding, short input, tag mismatch and non-UTF-8 plaintext all
        raise the same DecryptError.
        """

        try:
            data = _b64decode(sealed)
        except (TypeError, ValueError) as exc:
            logger.debug("Sealed value rejected: malformed encoding")
            raise DecryptError() from exc

        if len(data) < NONCE_LENGTH + TAG_LENGTH:
            logger.debug("Sealed value rejected: too short")
            raise DecryptError()

        nonce, ciphertext_and_tag = data[:NONCE_LENGTH], data[NONCE_LENGTH:]
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext_and_tag, None)
            return plaintext.decode("utf-8")
        except (InvalidTag, UnicodeDecodeError) as exc:
            logger.debug("Sealed value rejected: authentication failed")
            raise DecryptError() from exc

    def can_open(self, sealed: str) -> bool:
        """
        True if `open` would succeed.

        Does not distinguish an absent value from a corrupted one; do not use it
        where that distinction matters.
        """
        try:
            self.open(sealed)
        except DecryptError:
            return False
        return True
