"""Accessors for the per-app collaborators built by the application factory."""
from flask import current_app

from models.db_storage import DBStorage
from utils.lockout import LockoutPolicy
from utils.tokens import TokenIssuer


def get_storage() -> DBStorage:
    return current_app.extensions["storage"]


def get_token_issuer() -> TokenIssuer:
    return current_app.extensions["token_issuer"]


def get_lockout_policy() -> LockoutPolicy:
    return current_app.extensions["lockout_policy"]
