"""Failure codes carried by ``AuthResponse.error``."""

from __future__ import annotations

from enum import Enum


class AuthErrorCode(str, Enum):
    USERNAME_TAKEN = "USERNAME_TAKEN"
    # Unknown username and wrong password share this code and message.
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    USER_NOT_FOUND = "USER_NOT_FOUND"
