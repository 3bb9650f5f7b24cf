"""
Password hashing and verification.

Stored format is ``base64(salt || digest)`` where the digest is an HMAC of the
UTF-8 password keyed with the salt.  New hashes always use a 16-byte salt and
HMAC-SHA256.  Accounts created by older releases carry a 64- or 128-byte salt
with an HMAC-SHA512 digest; those still verify.

This is not a slow KDF.  Moving to bcrypt/argon2 needs a rehash-on-login
migration and is not done here.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from functools import partial
from typing import Callable, Tuple

SALT_SIZE = 16

Verifier = Callable[[str, bytes], bool]


def _digest(algorithm, salt: bytes, password: str) -> bytes:
    return hmac.new(salt, password.encode("utf-8"), algorithm).digest()


def hash_password(password: str) -> str:
    """Hash ``password`` in the current format (16-byte salt, HMAC-SHA256)."""
    salt = secrets.token_bytes(SALT_SIZE)
    return base64.b64encode(salt + _digest(hashlib.sha256, salt, password)).decode("ascii")


def _verify_salted_hmac(algorithm, salt_size: int, password: str, decoded: bytes) -> bool:
    digest_size = algorithm().digest_size
    if len(decoded) != salt_size + digest_size:
        return False
    salt, stored = decoded[:salt_size], decoded[salt_size:]
    return hmac.compare_digest(_digest(algorithm, salt, password), stored)


# Tried in order; the first strategy that matches wins.
VERIFIERS: Tuple[Verifier, ...] = (
    partial(_verify_salted_hmac, hashlib.sha256, SALT_SIZE),
    partial(_verify_salted_hmac, hashlib.sha512, 64),
    partial(_verify_salted_hmac, hashlib.sha512, 128),
)


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash of any supported format. Never raises."""
    try:
        decoded = base64.b64decode(password_hash, validate=True)
    except (binascii.Error, ValueError, TypeError):
        return False
    try:
        return any(verify(password, decoded) for verify in VERIFIERS)
    except (AttributeError, TypeError, UnicodeError):
        return False
