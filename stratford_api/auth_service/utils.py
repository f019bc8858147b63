"""
Shared authentication helpers.
Provides token creation and verification, plus the guards every protected
route runs before its handler logic:

    authenticate_request  -> who is calling (bearer token + user lookup)
    require_role          -> is their role on the route's allow-list
    require_venue_ownership -> do they own a venue (attached to the context)

Guards return an error response and status code instead of raising, so a
handler stops at the first failing guard:

    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

import jwt
from flask import Response, current_app, request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from stratford_api.common.responses import failure
from stratford_api.database.db_connection import Database
from stratford_api.database.models import User, Venue

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


# --- JWT CREATION / VALIDATION ---
class TokenService:
    """
    Issues and verifies signed access tokens.

    Args:
        secret (str): Shared HMAC signing secret.
        expiration_minutes (int): Token lifetime.
    """

    def __init__(self, secret: str, expiration_minutes: int = 1440) -> None:
        if not secret:
            raise RuntimeError("JWT_SECRET is missing. Set it in .env")
        self._secret = secret
        self.expiration = timedelta(minutes=expiration_minutes)

    def issue(self, user_id: str, email: str, role: str) -> str:
        """
        Generates a new JWT for a given user.

        Args:
            user_id (str): The unique ID of the user.
            email (str): The user's email address.
            role (str): The role of the user (ADMIN, VENUE, ARTIST, READER).

        Returns:
            str: Encoded JWT string.
        """
        now = datetime.now(timezone.utc)

        payload = {
            "sub": user_id,
            "email": email,
            "role": role,
            "exp": now + self.expiration,
            "iat": now,
        }

        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify a token's signature and expiry.

        Returns:
            dict: The token claims.

        Raises:
            jwt.InvalidTokenError: Bad signature, malformed token or expired
                (jwt.ExpiredSignatureError is a subclass).
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )


def get_tokens() -> TokenService:
    """Return the TokenService registered on the running app."""
    return current_app.extensions["tokens"]


# --- REQUEST CONTEXT ---
@dataclass(frozen=True)
class Subject:
    """The authenticated caller."""

    id: str
    email: str
    role: str


@dataclass
class RequestContext:
    """State the guard chain hands to a route handler."""

    subject: Optional[Subject] = None
    venue: Optional[Venue] = None


GuardResult = Tuple[Optional[Response], Optional[int]]


def bearer_token() -> Optional[str]:
    """Extract <token> from an `Authorization: Bearer <token>` header."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


# --- GATE ---
def authenticate_request(
    tokens: TokenService, db: Database
) -> Tuple[Optional[RequestContext], Optional[Response], Optional[int]]:
    """
    Verify the bearer token and confirm its subject still exists.

    Args:
        tokens (TokenService): Verifies the token.
        db (Database): Used to re-fetch the subject.

    Returns:
        tuple: (context, error_response, status_code)
               If successful, error_response and status_code are None.
               401 when the token is missing or the user was deleted,
               403 when the token is invalid or expired.
    """
    token = bearer_token()
    if token is None:
        err, code = failure("Access token required", 401)
        return None, err, code

    try:
        payload = tokens.decode(token)
    except jwt.ExpiredSignatureError:
        logger.info("[Auth] Rejected expired token")
        err, code = failure("Invalid token", 403)
        return None, err, code
    except jwt.InvalidTokenError:
        err, code = failure("Invalid token", 403)
        return None, err, code

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        err, code = failure("Invalid token", 403)
        return None, err, code

    try:
        with db.session() as session:
            user = session.get(User, user_id)
            if user is None:
                err, code = failure("User no longer exists", 401)
                return None, err, code
            subject = Subject(id=user.id, email=user.email, role=user.role)
    except SQLAlchemyError:
        logger.exception("[Auth] User lookup failed during token verification")
        err, code = failure("Server error", 500)
        return None, err, code

    return RequestContext(subject=subject), None, None


# --- ROLE AUTHORIZER ---
def require_role(ctx: Optional[RequestContext], roles: Iterable[str]) -> GuardResult:
    """
    Check the subject's role against an allow-list.
    Must run after authenticate_request.

    Returns:
        tuple: (error_response, status_code), both None when allowed.
    """
    if ctx is None or ctx.subject is None:
        return failure("Authentication required", 401)

    if ctx.subject.role not in roles:
        return failure("Insufficient permissions", 403)

    return None, None


# --- OWNERSHIP AUTHORIZER ---
def require_venue_ownership(ctx: Optional[RequestContext], db: Database) -> GuardResult:
    """
    Locate the venue owned by the subject and attach it to the context.
    Must run after authenticate_request.

    Returns:
        tuple: (error_response, status_code), both None when the subject
               owns a venue (ctx.venue is then set).
    """
    if ctx is None or ctx.subject is None:
        return failure("Authentication required", 401)

    try:
        with db.session() as session:
            venue = session.scalars(
                select(Venue).where(Venue.user_id == ctx.subject.id)
            ).first()
    except SQLAlchemyError:
        logger.exception("[Auth] Venue lookup failed during ownership check")
        return failure("Server error", 500)

    if venue is None:
        return failure("Venue access required", 403)

    ctx.venue = venue
    return None, None
