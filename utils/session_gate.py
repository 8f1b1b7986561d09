"""
Session gate: turn the request's accessToken / refreshToken cookies into an
authenticated identity.

1. valid access token -> AUTHENTICATED, nothing else happens
2. no usable access token and no refresh token -> UNAUTHENTICATED
3. valid refresh token -> REFRESHED with a brand new access+refresh pair
   (full rotation); the caller must set both cookies
4. invalid refresh token -> UNAUTHENTICATED

Results are returned, never raised; the API layer decides how to answer.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from utils.tokens import ACCESS, REFRESH, Identity, TokenError, TokenIssuer, TokenPair

logger = logging.getLogger(__name__)


class SessionStatus(enum.Enum):
    AUTHENTICATED = "authenticated"
    REFRESHED = "refreshed"
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class SessionResult:
    status: SessionStatus
    identity: Optional[Identity] = None
    tokens: Optional[TokenPair] = None
    reason: str = ""

    @property
    def authenticated(self) -> bool:
        return self.status in (SessionStatus.AUTHENTICATED, SessionStatus.REFRESHED)


def resolve_session(
    issuer: TokenIssuer,
    access_token: Optional[str],
    refresh_token: Optional[str] = None,
    allow_refresh: bool = True,
    now: Optional[datetime] = None,
) -> SessionResult:
    """
    Decide who the caller is. allow_refresh=False restricts the gate to the
    access token, for operations that must not accept a refresh token.
    """
    reason = "missing_access_token"
    if access_token:
        try:
            identity = issuer.verify(access_token, ACCESS)
            return SessionResult(SessionStatus.AUTHENTICATED, identity=identity)
        except TokenError as exc:
            logger.debug("Access token rejected: %s", exc.reason)
            reason = f"access_token_{exc.reason}"

    if not allow_refresh:
        return SessionResult(SessionStatus.UNAUTHENTICATED, reason=reason)
    if not refresh_token:
        return SessionResult(SessionStatus.UNAUTHENTICATED, reason=reason)

    try:
        identity = issuer.verify(refresh_token, REFRESH)
    except TokenError as exc:
        logger.debug("Refresh token rejected: %s", exc.reason)
        return SessionResult(SessionStatus.UNAUTHENTICATED, reason=f"refresh_token_{exc.reason}")

    return SessionResult(
        SessionStatus.REFRESHED,
        identity=identity,
        tokens=issuer.issue_pair(identity, now=now),
    )


def authorize(result: SessionResult, role: str) -> SessionResult:
    """Narrow an authenticated result to callers holding the given role."""
    if not result.authenticated:
        return result
    if result.identity is None or result.identity.role != role:
        return SessionResult(
            SessionStatus.UNAUTHORIZED, identity=result.identity, reason="insufficient_role"
        )
    return result
