"""
Access / refresh token issuing and verification (PyJWT).

Two token classes are signed with two distinct secrets so that leaking one
secret does not let an attacker mint the other class. Both carry the same
identity claims {username, role} plus "type", "iat" and "exp".

Tokens are stateless: nothing is stored, and there is no revocation list.
A refresh token stays valid until its exp even after it has been rotated.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

ACCESS = "access"
REFRESH = "refresh"
TOKEN_TYPES = (ACCESS, REFRESH)


@dataclass(frozen=True)
class Identity:
    username: str
    role: str

    def to_dict(self) -> Dict[str, str]:
        return {"username": self.username, "role": self.role}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenError(Exception):
    """Token could not be verified. reason is "expired" or "invalid"."""

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason


class TokenIssuer:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=1),
        algorithm: str = "HS256",
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("token secrets must not be blank")
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens must use different secrets")
        if access_ttl <= timedelta(0) or refresh_ttl <= timedelta(0):
            raise ValueError("token lifetimes must be positive")
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config) -> "TokenIssuer":
        return cls(
            access_secret=config["ACCESS_TOKEN_SECRET_KEY"],
            refresh_secret=config["REFRESH_TOKEN_SECRET_KEY"],
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def ttl(self, token_type: str) -> timedelta:
        return self._ttls[token_type]

    def _encode(self, identity: Identity, token_type: str, now: datetime) -> str:
        exp = now + self._ttls[token_type]
        payload: Dict[str, Any] = {
            "username": identity.username,
            "role": identity.role,
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def issue_pair(self, identity: Identity, now: Optional[datetime] = None) -> TokenPair:
        """Mint a fresh access + refresh pair over the same identity claims."""
        now = now or datetime.now(timezone.utc)
        return TokenPair(
            access_token=self._encode(identity, ACCESS, now),
            refresh_token=self._encode(identity, REFRESH, now),
        )

    def verify(self, token: str, token_type: str) -> Identity:
        """
        Decode and validate a token of the given class.
        Raises TokenError("expired") or TokenError("invalid").
        """
        if token_type not in TOKEN_TYPES:
            raise ValueError(f"unknown token type: {token_type}")
        if not token:
            raise TokenError("invalid", "Token missing")
        try:
            decoded = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "username", "role", "type"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("expired", "Token expired")
        except jwt.InvalidTokenError as exc:
            raise TokenError("invalid", f"Invalid token: {exc}")

        if decoded.get("type") != token_type:
            raise TokenError("invalid", "Wrong token type")
        return Identity(username=str(decoded["username"]), role=str(decoded["role"]))
