from __future__ import annotations
from functools import wraps
from flask import after_this_request, g, request

from api.errors import AuthenticationError, AuthorizationError
from utils.context import get_token_issuer
from utils.cookies import ACCESS_COOKIE, REFRESH_COOKIE, set_auth_cookies
from utils.session_gate import SessionStatus, authorize, resolve_session


def _enforce(result):
    """Match a gate result; attach the identity to g or raise the API error."""
    if result.status is SessionStatus.UNAUTHORIZED:
        raise AuthorizationError()
    if not result.authenticated:
        raise AuthenticationError()
    g.current_identity = result.identity
    g.session_status = result.status


def access_required():
    """Only a valid accessToken cookie is accepted (no silent refresh)."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            result = resolve_session(
                get_token_issuer(),
                request.cookies.get(ACCESS_COOKIE),
                allow_refresh=False,
            )
            _enforce(result)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def session_required():
    """
    accessToken or refreshToken cookie. When the refresh token is used the
    gate rotates both tokens and the new cookies are set on the response.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            issuer = get_token_issuer()
            result = resolve_session(
                issuer,
                request.cookies.get(ACCESS_COOKIE),
                request.cookies.get(REFRESH_COOKIE),
            )
            _enforce(result)
            if result.tokens is not None:
                tokens = result.tokens

                @after_this_request
                def _rotate_cookies(response):
                    return set_auth_cookies(response, tokens, issuer)

            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Valid accessToken cookie AND a role in required_roles.
    A wrong role is answered exactly like a missing token (401).
    """
    req = list(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            result = resolve_session(
                get_token_issuer(),
                request.cookies.get(ACCESS_COOKIE),
                allow_refresh=False,
            )
            if result.authenticated and req:
                checks = [authorize(result, role) for role in req]
                result = next((c for c in checks if c.authenticated), checks[0])
            _enforce(result)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
