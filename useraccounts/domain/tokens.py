"""
Token service - JWT access/refresh pair issuance and verification.

Both tokens carry the same claims ({email, id, isActivated, sid}) and
differ only in signing secret and lifetime. sid names the session the
pair belongs to; it survives refresh and dies with logout. A random jti
keeps tokens issued within the same second distinct, since refresh
tokens are stored by value.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from .models import Identity, TokenPair

ALGORITHM = "HS256"


@dataclass
class TokenService:
    """Issues and verifies HS256-signed token pairs."""

    access_secret: str
    refresh_secret: str
    access_ttl_seconds: int
    refresh_ttl_seconds: int

    def generate_tokens(self, identity: Identity) -> TokenPair:
        """Issue a fresh access/refresh pair for an identity."""
        return TokenPair(
            access_token=self._encode(identity, self.access_secret, self.access_ttl_seconds),
            refresh_token=self._encode(identity, self.refresh_secret, self.refresh_ttl_seconds),
        )

    def validate_access_token(self, token: str) -> Identity | None:
        """
        Return the identity in a validly signed, unexpired access token.

        Session revocation is not checked here; see UserService.authenticate.
        """
        return self._decode(token, self.access_secret)

    def validate_refresh_token(self, token: str) -> Identity | None:
        """
        Return the identity in a validly signed, unexpired refresh token.

        Revocation is not checked here; the caller consults the repository.
        """
        return self._decode(token, self.refresh_secret)

    def _encode(self, identity: Identity, secret: str, ttl_seconds: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "email": identity.email,
            "id": str(identity.id),
            "isActivated": identity.is_activated,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
            "jti": secrets.token_hex(8),
        }
        if identity.session_id is not None:
            payload["sid"] = str(identity.session_id)
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def _decode(self, token: str, secret: str) -> Identity | None:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
            session_id = claims.get("sid")
            return Identity(
                id=UUID(claims["id"]),
                email=claims["email"],
                is_activated=bool(claims["isActivated"]),
                session_id=UUID(session_id) if session_id is not None else None,
            )
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
            return None
