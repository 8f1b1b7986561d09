from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify

from api.errors import NotFoundError
from models.user import User
from models.schemas.user import UserListOutSchema
from utils.context import get_storage
from utils.decorators import roles_required

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

user_list_out_schema = UserListOutSchema(many=True)


@bp.get("/getDataUser")
@roles_required(["admin"])
def list_users():
    """
    List all users - admin
    Only id, username, email and role are returned.
    ---
    tags:
      - Users
    security:
      - CookieAuth: []
    responses:
      200: { description: OK }
      401: { description: Not authenticated or not an admin }
    """
    rows = sorted(get_storage().all(User).values(), key=lambda u: u.username)
    return jsonify(
        {
            "message": "Fetch data success",
            "data": user_list_out_schema.dump(rows),
        }
    ), 200


@bp.delete("/deleteUser/<user_id>")
@roles_required(["admin"])
def delete_user(user_id: str):
    """
    Delete a user by id - admin
    ---
    tags:
      - Users
    security:
      - CookieAuth: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      401: { description: Not authenticated or not an admin }
      404: { description: User not found }
    """
    storage = get_storage()
    user = storage.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    storage.delete(user)
    storage.save()
    logger.info("Admin %s deleted user %s", g.current_identity.username, user.username)
    return jsonify({"message": "User is deleted"}), 200
