"""
JWT issuance and verification.

Tokens are HS256 JWTs carrying the account id (``nameid``) and username
(``unique_name``).  Validation checks the signature and that the header
advertises HS256; expiry is only enforced when the caller asks for it, so an
expired token can still be exchanged for a fresh one at ``/auth/refresh-token``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from pydantic import BaseModel

from config.settings import Settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SUBJECT_ID_CLAIM = "nameid"
SUBJECT_NAME_CLAIM = "unique_name"

# Kept so tokens signed by deployments that never set a secret keep working.
# Only used when ALLOW_INSECURE_JWT_SECRET is on.
DEFAULT_JWT_SECRET = "defaultsecretkey12345678901234567890"


class InsecureSecretError(RuntimeError):
    """No JWT secret configured and the insecure default is not allowed."""


class TokenClaims(BaseModel):
    user_id: Optional[str] = None
    username: Optional[str] = None
    expires_at: Optional[datetime] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        lifetime: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise InsecureSecretError("TokenService requires a non-empty secret")
        self._secret = secret
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        secret = settings.jwt_secret
        if not secret:
            if not settings.allow_insecure_jwt_secret:
                raise InsecureSecretError(
                    "JWT_SECRET is not set. Configure it, or set "
                    "ALLOW_INSECURE_JWT_SECRET=true for local development only."
                )
            logger.warning("JWT_SECRET not set — signing tokens with the built-in default secret")
            secret = DEFAULT_JWT_SECRET
        return cls(secret, lifetime=timedelta(days=settings.jwt_expiry_days))

    def issue(self, account) -> str:
        """Sign a token for ``account`` (anything with ``user_id`` and ``username``)."""
        now = self._clock()
        payload = {
            SUBJECT_ID_CLAIM: str(account.user_id),
            SUBJECT_NAME_CLAIM: account.username,
            "nbf": int(now.timestamp()),
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def validate(self, token: str, *, verify_exp: bool = False) -> Optional[TokenClaims]:
        """
        Return the token's claims, or ``None`` if it is not authentic.

        ``verify_exp`` defaults to False: refresh must accept expired tokens.
        Anything that gates access on a token has to pass ``verify_exp=True``.
        """
        try:
            decoded = jwt.decode_complete(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={
                    "verify_exp": verify_exp,
                    "verify_aud": False,
                    "verify_iss": False,
                },
            )
        except jwt.PyJWTError as exc:
            logger.debug("Token rejected: %s", exc)
            return None
        except (TypeError, ValueError) as exc:
            logger.debug("Token could not be parsed: %s", exc)
            return None

        if decoded["header"].get("alg") != ALGORITHM:
            logger.debug("Token rejected: unexpected alg %r", decoded["header"].get("alg"))
            return None

        payload = decoded["payload"]
        return TokenClaims(
            user_id=_as_str(payload.get(SUBJECT_ID_CLAIM)),
            username=_as_str(payload.get(SUBJECT_NAME_CLAIM)),
            expires_at=_as_datetime(payload.get("exp")),
        )


def _as_str(value) -> Optional[str]:
    return None if value is None else str(value)


def _as_datetime(value) -> Optional[datetime]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
