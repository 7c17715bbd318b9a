"""
Capability token codec.

Tokens are HS256 JWTs binding one document ID (``sub``) to a set of
permissions. Nothing is stored server-side: verification is a signature
check plus claim validation, so a token stays valid until it expires (only
when a TTL is configured) or the signing secret is rotated.
"""

from __future__ import annotations

import time
from typing import Callable, Iterable, Optional

import jwt

from config import TokenSettings
from errors import InvalidTokenError
from schemas.models.token import Permission, TokenClaims

PERMISSIONS_CLAIM = "permissions"


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        issuer: str = "gobin",
        algorithm: str = "HS256",
        ttl_seconds: Optional[int] = None,
        time_func: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise RuntimeError("JWT_SECRET must be set to sign capability tokens")
        self._secret = secret
        self._issuer = issuer
        self._algorithm = algorithm
        self._ttl_seconds = ttl_seconds
        self._time_func = time_func

    @classmethod
    def from_settings(cls, settings: TokenSettings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            issuer=settings.jwt_issuer,
            algorithm=settings.jwt_algorithm,
            ttl_seconds=settings.token_ttl_seconds,
        )

    def issue(self, document_id: str, permissions: Iterable[Permission]) -> str:
        """Sign a token granting *permissions* on *document_id*."""
        now = int(self._time_func())
        claims = {
            "iss": self._issuer,
            "sub": document_id,
            "iat": now,
            # sorted so identical grants produce identical tokens
            PERMISSIONS_CLAIM: sorted(Permission(p).value for p in set(permissions)),
        }
        if self._ttl_seconds:
            claims["exp"] = now + self._ttl_seconds
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> TokenClaims:
        """Decode and validate *token*.

        A missing token is not an error: it yields empty claims, which the
        authorization gate then denies for every gated operation.

        Raises:
            InvalidTokenError: bad signature, malformed token, wrong issuer,
                expired token, or unknown permission names.
        """
        if not token:
            return TokenClaims.empty()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["sub", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("invalid token") from exc

        raw_permissions = payload.get(PERMISSIONS_CLAIM, [])
        if not isinstance(raw_permissions, list):
            raise InvalidTokenError("invalid token")
        try:
            permissions = frozenset(Permission(p) for p in raw_permissions)
        except ValueError as exc:
            raise InvalidTokenError("invalid token") from exc

        return TokenClaims(
            subject=str(payload["sub"]),
            permissions=permissions,
            issued_at=payload.get("iat"),
            expires_at=payload.get("exp"),
        )


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an ``Authorization: Bearer <token>`` header value.

    Returns:
        None when the header is absent or empty.

    Raises:
        InvalidTokenError: the header uses another scheme or has no token.
    """
    if not authorization or not authorization.strip():
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise InvalidTokenError("authorization header must be 'Bearer <token>'")
    return parts[1]
