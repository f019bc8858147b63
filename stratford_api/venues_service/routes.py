"""
Venues service route handlers.
Manages the venues that host events. Each user may own at most one venue.
"""

import logging

from flask import Blueprint
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from stratford_api.auth_service.utils import (
    authenticate_request,
    get_tokens,
    require_venue_ownership,
)
from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.common.validation import contains_pattern, validate_body, validate_query
from stratford_api.database.db_connection import get_database, get_db
from stratford_api.database.models import Event, Venue
from stratford_api.venues_service.schemas import VenueCreate, VenueFilters, VenueUpdate

logger = logging.getLogger(__name__)

venues_bp = Blueprint("venues", __name__)
attach_request_logging(venues_bp, "Venues")

UPCOMING_EVENTS_SHOWN = 10


@venues_bp.route("", methods=["GET"])
def list_venues():
    """
    Get a page of venues ordered by name. Public access allowed.
    Optional ?search= matches name, description or address.
    """
    filters, err, code = validate_query(VenueFilters)
    if err:
        return err, code

    stmt = select(Venue)
    if filters.search:
        pattern = contains_pattern(filters.search)
        stmt = stmt.where(
            or_(
                Venue.name.ilike(pattern, escape="\\"),
                Venue.description.ilike(pattern, escape="\\"),
                Venue.address.ilike(pattern, escape="\\"),
            )
        )

    event_count = (
        select(func.count(Event.id))
        .where(Event.venue_id == Venue.id)
        .correlate(Venue)
        .scalar_subquery()
    )

    try:
        with get_db() as session:
            total = session.scalar(select(func.count()).select_from(stmt.subquery()))
            rows = session.execute(
                stmt.add_columns(event_count)
                .options(joinedload(Venue.user))
                .order_by(Venue.name)
                .offset(filters.offset)
                .limit(filters.limit)
            ).all()
            venues = []
            for venue, count in rows:
                data = venue.to_dict()
                data["user"] = venue.user.to_summary()
                data["_count"] = {"events": count}
                venues.append(data)
    except SQLAlchemyError:
        logger.exception("Get venues error")
        return failure("Failed to get venues", 500)

    return success({"venues": venues, "pagination": filters.describe(total)})


@venues_bp.route("/mine", methods=["GET"])
def get_my_venue():
    """
    Venue owned by the caller, with all of its events regardless of status.

    Returns:
        200: { venue }
        401/403: Not authenticated, or the caller owns no venue.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code
    err, code = require_venue_ownership(ctx, get_database())
    if err:
        return err, code

    try:
        with get_db() as session:
            events = session.scalars(
                select(Event).where(Event.venue_id == ctx.venue.id).order_by(Event.start_time)
            ).all()
            data = ctx.venue.to_dict()
            data["events"] = [e.to_dict() for e in events]
    except SQLAlchemyError:
        logger.exception("Get own venue error")
        return failure("Failed to get venue", 500)

    return success({"venue": data})


@venues_bp.route("/<venue_id>", methods=["GET"])
def get_venue(venue_id):
    """
    Get a single venue with its owner and next published events.
    """
    try:
        with get_db() as session:
            venue = session.get(Venue, venue_id, options=[joinedload(Venue.user)])
            if not venue:
                return failure("Venue not found", 404)

            events = session.scalars(
                select(Event)
                .where(Event.venue_id == venue.id, Event.status == "PUBLISHED")
                .order_by(Event.start_time)
                .limit(UPCOMING_EVENTS_SHOWN)
            ).all()

            data = venue.to_dict()
            data["user"] = {**venue.user.to_summary(), "phone": venue.user.phone}
            data["events"] = [e.to_dict() for e in events]
    except SQLAlchemyError:
        logger.exception("Get venue error")
        return failure("Failed to get venue", 500)

    return success({"venue": data})


@venues_bp.route("", methods=["POST"])
def create_venue():
    """
    Create the caller's venue. A user can own only one.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code

    payload, err, code = validate_body(VenueCreate)
    if err:
        return err, code

    try:
        with get_db() as session:
            existing = session.scalars(
                select(Venue).where(Venue.user_id == ctx.subject.id)
            ).first()
            if existing:
                return failure("User can only have one venue", 400)

            venue = Venue(user_id=ctx.subject.id, **payload.model_dump())
            session.add(venue)
            session.commit()

            data = venue.to_dict()
            data["user"] = venue.user.to_summary()
    except IntegrityError:
        # Concurrent create by the same owner hit the unique constraint
        return failure("User can only have one venue", 400)
    except SQLAlchemyError:
        logger.exception("Create venue error")
        return failure("Failed to create venue", 500)

    logger.info(f"[Venues] User {ctx.subject.id} created venue {data['id']}")
    return success({"venue": data}, 201)


@venues_bp.route("/<venue_id>", methods=["PUT"])
def update_venue(venue_id):
    """
    Update a venue. Only its owner may do so.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code

    payload, err, code = validate_body(VenueUpdate)
    if err:
        return err, code

    fields = payload.model_dump(exclude_unset=True, exclude_none=True)

    try:
        with get_db() as session:
            venue = session.scalars(
                select(Venue).where(Venue.id == venue_id, Venue.user_id == ctx.subject.id)
            ).first()
            if not venue:
                return failure("You can only update your own venue", 403)

            for key, value in fields.items():
                setattr(venue, key, value)
            session.commit()

            data = venue.to_dict()
            data["user"] = venue.user.to_summary()
    except SQLAlchemyError:
        logger.exception("Update venue error")
        return failure("Failed to update venue", 500)

    return success({"venue": data})


@venues_bp.route("/<venue_id>", methods=["DELETE"])
def delete_venue(venue_id):
    """
    Delete a venue and its events. Only its owner may do so.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code

    try:
        with get_db() as session:
            venue = session.scalars(
                select(Venue).where(Venue.id == venue_id, Venue.user_id == ctx.subject.id)
            ).first()
            if not venue:
                return failure("You can only delete your own venue", 403)

            session.delete(venue)
            session.commit()
    except SQLAlchemyError:
        logger.exception("Delete venue error")
        return failure("Failed to delete venue", 500)

    return success(message="Venue deleted successfully")
