"""
Auth cookies: accessToken / refreshToken, both httpOnly.
max_age follows the token lifetime of the same class so the browser drops a
cookie exactly when its token expires.
"""
from flask import current_app

from utils.tokens import ACCESS, REFRESH, TokenIssuer, TokenPair

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("COOKIE_SECURE", False)),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_auth_cookies(response, tokens: TokenPair, issuer: TokenIssuer):
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE,
        tokens.access_token,
        max_age=int(issuer.ttl(ACCESS).total_seconds()),
        **options,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        tokens.refresh_token,
        max_age=int(issuer.ttl(REFRESH).total_seconds()),
        **options,
    )
    return response


def clear_auth_cookies(response):
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response
