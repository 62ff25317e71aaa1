"""Token service for signing and validating stateless session tokens.

Tokens are HS256 JWTs carrying ``sub``, ``email``, ``name``, ``roles``,
``iat``, ``exp`` and ``iss``. There is no server-side session table and no
revocation list: a token is valid until it expires.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable

import jwt
from django.conf import settings

logger = logging.getLogger(__name__)


class TokenFailure(str, Enum):
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"
    UNSUPPORTED = "unsupported"
    INVALID_CLAIMS = "invalid_claims"


class InvalidTokenError(Exception):
    """Token rejected; ``kind`` is for logging only, callers see one outcome."""

    def __init__(self, kind: TokenFailure, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    email: str
    name: str
    roles: tuple[str, ...]
    issued_at: datetime
    expires_at: datetime
    issuer: str


REQUIRED_CLAIMS = ("sub", "email", "roles", "iat", "exp", "iss")


class TokenService:
    """Handle JWT issuance and validation."""

    ALGORITHM = "HS256"

    @staticmethod
    def _secret() -> str:
        return getattr(settings, "JWT_SECRET", None) or settings.SECRET_KEY

    @staticmethod
    def _issuer() -> str:
        return getattr(settings, "JWT_ISSUER", "wildlife-api")

    @classmethod
    def ttl(cls) -> timedelta:
        return timedelta(seconds=int(getattr(settings, "JWT_TTL_SECONDS", 86400)))

    @classmethod
    def issue_token(
        cls,
        principal_id,
        email: str,
        display_name: str,
        roles: Iterable[str],
        now: datetime | None = None,
    ) -> str:
        """Sign a token for the given identity."""

        issued_at = now or datetime.now(timezone.utc)
        payload = cls._build_payload(principal_id, email, display_name, roles, issued_at)
        return jwt.encode(payload, cls._secret(), algorithm=cls.ALGORITHM)

    @classmethod
    def issue_for(cls, user, now: datetime | None = None) -> str:
        """Sign a token for a stored user."""
        return cls.issue_token(user.id, user.email, user.name, user.roles, now=now)

    @classmethod
    def _build_payload(
        cls, principal_id, email: str, display_name: str, roles: Iterable[str], issued_at: datetime
    ) -> dict[str, Any]:
        exp = issued_at + cls.ttl()
        return {
            "sub": str(principal_id),
            "email": email,
            "name": display_name,
            "roles": list(roles),
            "iat": int(issued_at.timestamp()),
            "exp": int(exp.timestamp()),
            "iss": cls._issuer(),
        }

    @classmethod
    def validate_token(cls, token: str) -> TokenClaims:
        """Verify signature, expiry and issuer; return the claims.

        Raises :class:`InvalidTokenError` with a distinguishable ``kind``.
        """

        if not token:
            raise cls._fail(TokenFailure.MALFORMED, "Token is empty")

        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as exc:
            raise cls._fail(TokenFailure.MALFORMED, "Malformed token") from exc
        if header.get("alg") != cls.ALGORITHM:
            raise cls._fail(TokenFailure.UNSUPPORTED, "Unsupported token algorithm")

        try:
            payload = jwt.decode(
                token,
                cls._secret(),
                algorithms=[cls.ALGORITHM],
                issuer=cls._issuer(),
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise cls._fail(TokenFailure.EXPIRED, "Token has expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise cls._fail(TokenFailure.BAD_SIGNATURE, "Invalid token signature") from exc
        except (jwt.MissingRequiredClaimError, jwt.InvalidIssuerError, jwt.ImmatureSignatureError) as exc:
            raise cls._fail(TokenFailure.INVALID_CLAIMS, "Invalid token claims") from exc
        except jwt.InvalidTokenError as exc:
            raise cls._fail(TokenFailure.MALFORMED, "Invalid token") from exc

        roles = payload.get("roles")
        if not isinstance(roles, list) or not all(isinstance(role, str) for role in roles):
            raise cls._fail(TokenFailure.INVALID_CLAIMS, "Invalid token claims")

        return TokenClaims(
            subject=str(payload["sub"]),
            email=payload["email"],
            name=payload.get("name") or "",
            roles=tuple(roles),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            issuer=payload["iss"],
        )

    @staticmethod
    def _fail(kind: TokenFailure, message: str) -> InvalidTokenError:
        logger.warning("token.invalid kind=%s", kind.value)
        return InvalidTokenError(kind, message)


__all__ = ["TokenService", "TokenClaims", "TokenFailure", "InvalidTokenError"]
