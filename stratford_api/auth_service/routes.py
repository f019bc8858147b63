"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Profile retrieval (/me)
- Profile update (/me PUT)

Token and guard logic is delegated to `auth_service.utils`.
"""

import logging
from typing import Tuple

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from flask import Blueprint, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stratford_api.auth_service.schemas import LoginRequest, ProfileUpdate, RegisterRequest
from stratford_api.auth_service.utils import authenticate_request, get_tokens
from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.common.validation import validate_body
from stratford_api.database.db_connection import get_database, get_db
from stratford_api.database.models import User

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)
attach_request_logging(auth_bp, "Auth")
ph = PasswordHasher()


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - email (str): Unique email address.
    - password (str): Minimum 6 characters.
    - name (str, optional)
    - role (str, optional): ADMIN, VENUE, ARTIST or READER (default READER).

    Returns:
        201: { user, token }
        400: Validation failure or email already exists.
        500: Server-side error (hashing or database).
    """
    payload, err, code = validate_body(RegisterRequest)
    if err:
        return err, code

    try:
        with get_db() as session:
            existing = session.scalars(select(User).where(User.email == payload.email)).first()
            if existing:
                return failure("User with this email already exists", 400)

            user = User(
                email=payload.email,
                password_hash=ph.hash(payload.password),
                name=payload.name,
                role=payload.role,
            )
            session.add(user)
            session.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email
        return failure("User with this email already exists", 400)
    except SQLAlchemyError:
        logger.exception("Registration error")
        return failure("Registration failed", 500)

    # Generate initial token for immediate login
    token = get_tokens().issue(user.id, user.email, user.role)

    return success({"user": user.to_dict(), "token": token}, 201)


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Returns:
        200: { user, token }
        400: Validation failure or invalid credentials.
        500: Database error.
    """
    payload, err, code = validate_body(LoginRequest)
    if err:
        return err, code

    try:
        with get_db() as session:
            user = session.scalars(select(User).where(User.email == payload.email)).first()
    except SQLAlchemyError:
        logger.exception("Login error")
        return failure("Login failed", 500)

    if not user:
        return failure("Invalid credentials", 400)

    # Verify password against hash
    try:
        ph.verify(user.password_hash, payload.password)
    except (VerificationError, InvalidHashError):
        return failure("Invalid credentials", 400)

    token = get_tokens().issue(user.id, user.email, user.role)

    return success({"user": user.to_dict(), "token": token})


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the current user's profile.

    Requires Authorization header: Bearer <token>

    Returns:
        200: { user }
        401/403: Authentication failure.
        404: User not found in DB (deleted mid-request).
        500: Database error.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code

    try:
        with get_db() as session:
            user = session.get(User, ctx.subject.id)
    except SQLAlchemyError:
        logger.exception("Get profile error")
        return failure("Failed to get profile", 500)

    if not user:
        return failure("User not found", 404)

    return success({"user": user.to_dict()})


# --- UPDATE CURRENT USER ---
@auth_bp.route("/me", methods=["PUT"])
def update_current_user() -> Tuple[Response, int]:
    """
    Update profile fields of the current user.

    Allowed fields: name, bio, phone, address. Email and role cannot be
    changed here.

    Returns:
        200: { user }
        400: Validation failure.
        401/403: Authentication failure.
        500: Update failed.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code

    payload, err, code = validate_body(ProfileUpdate)
    if err:
        return err, code

    fields = payload.model_dump(exclude_unset=True, exclude_none=True)

    try:
        with get_db() as session:
            user = session.get(User, ctx.subject.id)
            if not user:
                return failure("User not found", 404)
            for key, value in fields.items():
                setattr(user, key, value)
            session.commit()
    except SQLAlchemyError:
        logger.exception("Update profile error")
        return failure("Failed to update profile", 500)

    return success({"user": user.to_dict()})
