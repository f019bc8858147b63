"""
User administration routes.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from stratford_api.auth_service.utils import authenticate_request, get_tokens, require_role
from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.database.db_connection import get_database, get_db
from stratford_api.database.models import User

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)
attach_request_logging(users_bp, "Users")


# --- LIST USERS (ADMIN ONLY) ---
@users_bp.route("", methods=["GET"])
def list_users() -> Tuple[Response, int]:
    """
    Admin-only endpoint to list all users in the system, newest first.

    Returns:
        200: { users }
        401/403: Not authenticated or not an admin.
        500: Database error.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code
    err, code = require_role(ctx, ["ADMIN"])
    if err:
        return err, code

    try:
        with get_db() as session:
            users = session.scalars(select(User).order_by(User.created_at.desc())).all()
            rows = [u.to_dict() for u in users]
    except SQLAlchemyError:
        logger.exception("Get users error")
        return failure("Failed to get users", 500)

    return success({"users": rows})
