"""
Authentication blueprint:
- POST /register
- POST /login               (lockout-guarded, sets accessToken/refreshToken cookies)
- PUT  /updateUser          (password change, access cookie only)
- POST /logout              (clears both cookies)
- GET  /checkAuthenticated  (access cookie, or refresh cookie with rotation)

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs, one
  secret per token class) via utils.tokens.TokenIssuer
- Runs every login attempt through the lockout state machine in utils.lockout
  while holding the per-user lock, so concurrent attempts cannot lose updates
"""
from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request

from api.errors import AuthenticationError, LockedError, RequestValidationError
from models.user import User
from models.schemas.user import (
    PasswordChangeSchema,
    UserCreateSchema,
    UserLoginSchema,
    UserOutSchema,
)
from utils.context import get_lockout_policy, get_storage, get_token_issuer
from utils.cookies import clear_auth_cookies, set_auth_cookies
from utils.decorators import access_required, session_required
from utils.lockout import LoginStatus, evaluate_attempt
from utils.security import hash_password, verify_password
from utils.tokens import Identity

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
password_change_schema = PasswordChangeSchema()


@bp.post("/register")
def register():
    """
    Register a new user (role "user").
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password]
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      200:
        description: Created
      400:
        description: Missing fields or username already taken
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    storage = get_storage()
    if storage.get_user_by_username(data["username"]) is not None:
        raise RequestValidationError("Username already registered")
    if storage.get_user_by_email(data["email"]) is not None:
        raise RequestValidationError("Email already registered")

    user = User(
        username=data["username"],
        email=data["email"],
        password_hash=hash_password(data["password"]),
        role="user",
    )
    storage.new(user)
    storage.save()
    logger.info("Registered user %s", user.username)

    return jsonify(
        {
            "message": "Register success",
            "data": user_out_schema.dump(user),
        }
    ), 200


@bp.post("/login")
def login():
    """
    Login: sets accessToken and refreshToken cookies.
    Three wrong passwords in a row lock the account for 15 minutes.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [username, password]
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (cookies set)
      401:
        description: Unknown username or wrong password
      403:
        description: Account locked
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    username = data["username"]

    storage = get_storage()
    policy = get_lockout_policy()
    with storage.user_lock(username):
        user = storage.get_user_by_username(username, for_update=True)
        outcome = evaluate_attempt(user, data["password"], policy)
        # commits counter changes, and releases the row lock either way
        storage.save()

    if outcome.unlocked:
        logger.info("Lock on user %s expired; counters reset", username)

    if outcome.status is LoginStatus.UNKNOWN_USER:
        raise AuthenticationError("Invalid username")

    if outcome.status is LoginStatus.LOCKED:
        raise LockedError(outcome.remaining_minutes)

    if outcome.status is LoginStatus.INVALID_PASSWORD:
        if outcome.locked_now:
            logger.warning("User %s locked after %d failed logins", username, policy.max_attempts)
            hint = (
                "User is locked please contact admin or try again in "
                f"{outcome.remaining_minutes} minutes"
            )
        else:
            hint = f"You have {outcome.remaining_attempts} more chances to log in."
        raise AuthenticationError(
            f"Invalid password. {hint}",
            details={"remaining_attempts": outcome.remaining_attempts},
        )

    identity = Identity(username=user.username, role=user.role)
    issuer = get_token_issuer()
    tokens = issuer.issue_pair(identity)
    logger.info("User %s logged in", username)

    response = jsonify({"message": "Login success", "data": identity.to_dict()})
    set_auth_cookies(response, tokens, issuer)
    return response, 200


@bp.put("/updateUser")
@access_required()
def update_user():
    """
    Change the password of the logged-in user.
    Requires a valid accessToken cookie; a refresh token is not enough.
    ---
    tags:
      - Auth
    security:
      - CookieAuth: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [password, newPassword]
           properties:
             password: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      401:
        description: Missing/invalid token or wrong current password
    """
    payload = request.get_json(silent=True) or {}
    data = password_change_schema.load(payload)

    storage = get_storage()
    user = storage.get_user_by_username(g.current_identity.username)
    if user is None:
        raise AuthenticationError()
    if not verify_password(data["password"], user.password_hash):
        raise AuthenticationError("Invalid current password")

    # lockout counters are deliberately left alone
    user.password_hash = hash_password(data["new_password"])
    storage.new(user)
    storage.save()
    logger.info("User %s changed password", user.username)

    return jsonify({"message": "Complete to change password"}), 200


@bp.post("/logout")
def logout():
    """
    Logout: clears both auth cookies. Tokens themselves stay valid until they expire.
    ---
    tags:
      - Auth
    responses:
      200:
        description: Cookies cleared
    """
    response = jsonify({"message": "Logout success"})
    clear_auth_cookies(response)
    return response, 200


@bp.get("/checkAuthenticated")
@session_required()
def check_authenticated():
    """
    Who am I. Falls back to the refresh cookie when the access cookie is
    missing or invalid, and then rotates both cookies.
    ---
    tags:
      - Auth
    security:
      - CookieAuth: []
    responses:
      200:
        description: Authenticated
      401:
        description: Neither cookie holds a valid token
    """
    return jsonify(
        {
            "message": "Already logged in",
            "isAuthenticated": True,
            "user": g.current_identity.to_dict(),
        }
    ), 200
