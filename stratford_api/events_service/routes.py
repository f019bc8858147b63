"""
Events service routes: list, read, create, update and delete events.

Reads are public. Writes require the VENUE or ADMIN role, and a VENUE
user may only touch events belonging to the venue they own.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from flask import Blueprint, Response
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from stratford_api.auth_service.utils import (
    RequestContext,
    authenticate_request,
    get_tokens,
    require_role,
)
from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.common.validation import contains_pattern, validate_body, validate_query
from stratford_api.database.db_connection import get_database, get_db
from stratford_api.database.models import Event, Venue, utcnow
from stratford_api.events_service.schemas import EventCreate, EventFilters, EventUpdate

logger = logging.getLogger(__name__)

events_bp = Blueprint("events", __name__)
attach_request_logging(events_bp, "Events")

EVENT_MANAGER_ROLES = ("VENUE", "ADMIN")


def day_bounds(day: datetime) -> Tuple[datetime, datetime]:
    """Return [start, end) of the calendar day containing `day`."""
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def find_managed_event(
    session: Session, ctx: RequestContext, event_id: str
) -> Optional[Event]:
    """
    Load an event the subject may modify.
    Admins bypass ownership; everyone else must own the event's venue.
    """
    if ctx.subject.role == "ADMIN":
        return session.get(Event, event_id)
    return session.scalars(
        select(Event)
        .join(Event.venue)
        .where(Event.id == event_id, Venue.user_id == ctx.subject.id)
    ).first()


@events_bp.route("", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return a page of events.

    Filters (query string): category, status (default PUBLISHED), date,
    venueId, search (title, description or venue name), page, limit.

    Returns:
        200: { events, pagination }
        400: Invalid filter.
        500: Database error.
    """
    filters, err, code = validate_query(EventFilters)
    if err:
        return err, code

    stmt = select(Event).join(Event.venue).where(Event.status == filters.status)

    if filters.category:
        stmt = stmt.where(Event.category == filters.category)
    if filters.venue_id:
        stmt = stmt.where(Event.venue_id == filters.venue_id)
    if filters.date:
        start, end = day_bounds(filters.date)
        stmt = stmt.where(Event.start_time >= start, Event.start_time < end)
    if filters.search:
        pattern = contains_pattern(filters.search)
        stmt = stmt.where(
            or_(
                Event.title.ilike(pattern, escape="\\"),
                Event.description.ilike(pattern, escape="\\"),
                Venue.name.ilike(pattern, escape="\\"),
            )
        )

    try:
        with get_db() as session:
            total = session.scalar(select(func.count()).select_from(stmt.subquery()))
            events = session.scalars(
                stmt.options(joinedload(Event.venue))
                .order_by(Event.start_time)
                .offset(filters.offset)
                .limit(filters.limit)
            ).all()
            rows = [e.to_dict(venue="summary") for e in events]
    except SQLAlchemyError:
        logger.exception("Get events error")
        return failure("Failed to get events", 500)

    return success({"events": rows, "pagination": filters.describe(total)})


@events_bp.route("/today", methods=["GET"])
def list_today_events() -> Tuple[Response, int]:
    """Published events starting today (UTC)."""
    start, end = day_bounds(utcnow())

    try:
        with get_db() as session:
            events = session.scalars(
                select(Event)
                .options(joinedload(Event.venue))
                .where(
                    Event.status == "PUBLISHED",
                    Event.start_time >= start,
                    Event.start_time < end,
                )
                .order_by(Event.start_time)
            ).all()
            rows = [e.to_dict(venue="summary") for e in events]
    except SQLAlchemyError:
        logger.exception("Get today events error")
        return failure("Failed to get today's events", 500)

    return success({"events": rows})


@events_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id: str) -> Tuple[Response, int]:
    """
    Get a single event by ID, with full venue details.

    Returns:
        200: { event }
        404: Event not found.
    """
    try:
        with get_db() as session:
            event = session.get(Event, event_id, options=[joinedload(Event.venue)])
            if not event:
                return failure("Event not found", 404)
            data = event.to_dict(venue="full")
    except SQLAlchemyError:
        logger.exception("Get event error")
        return failure("Failed to get event", 500)

    return success({"event": data})


@events_bp.route("", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event (venue owners and admins).

    Non-admins may only create events for the venue they own.

    Returns:
        201: { event }
        400: Validation error.
        401/403: Authentication or permission failure.
        404: Venue not found (admin only; others get 403).
        500: Server error.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code
    err, code = require_role(ctx, EVENT_MANAGER_ROLES)
    if err:
        return err, code

    payload, err, code = validate_body(EventCreate)
    if err:
        return err, code

    try:
        with get_db() as session:
            # Verify venue ownership (unless admin)
            if ctx.subject.role != "ADMIN":
                venue = session.scalars(
                    select(Venue).where(
                        Venue.id == payload.venue_id, Venue.user_id == ctx.subject.id
                    )
                ).first()
                if not venue:
                    return failure("You can only create events for your own venue", 403)
            else:
                venue = session.get(Venue, payload.venue_id)
                if not venue:
                    return failure("Venue not found", 404)

            event = Event(**payload.model_dump(), venue=venue)
            session.add(event)
            session.commit()
            data = event.to_dict(venue="summary")
    except SQLAlchemyError:
        logger.exception("Create event error")
        return failure("Failed to create event", 500)

    logger.info(f"[Events] Created event {data['id']} at venue {data['venueId']}")
    return success({"event": data}, 201)


@events_bp.route("/<event_id>", methods=["PUT"])
def update_event(event_id: str) -> Tuple[Response, int]:
    """
    Update an event.

    Permission:
    - Admin
    - OR the owner of the event's venue

    Returns:
        200: { event }
        400: Validation error.
        401/403: Authentication or permission failure.
        404: Event not found (admin only; others get 403).
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code
    err, code = require_role(ctx, EVENT_MANAGER_ROLES)
    if err:
        return err, code

    payload, err, code = validate_body(EventUpdate)
    if err:
        return err, code

    fields = payload.model_dump(exclude_none=True)

    try:
        with get_db() as session:
            event = find_managed_event(session, ctx, event_id)
            if not event:
                if ctx.subject.role == "ADMIN":
                    return failure("Event not found", 404)
                return failure("You can only update events for your own venue", 403)

            # Check final start/end times
            final_start = fields.get("start_time", event.start_time)
            final_end = fields.get("end_time", event.end_time)
            if final_start >= final_end:
                return failure(
                    "Validation failed",
                    400,
                    details=[{
                        "path": "startTime",
                        "msg": "startTime must be before endTime",
                        "location": "body",
                    }],
                )

            for key, value in fields.items():
                setattr(event, key, value)
            session.commit()
            data = event.to_dict(venue="summary")
    except SQLAlchemyError:
        logger.exception(f"Update event error for {event_id}")
        return failure("Failed to update event", 500)

    return success({"event": data})


@events_bp.route("/<event_id>", methods=["DELETE"])
def delete_event(event_id: str) -> Tuple[Response, int]:
    """
    Delete an event if the caller is an admin or owns the event's venue.
    """
    ctx, err, code = authenticate_request(get_tokens(), get_database())
    if err:
        return err, code
    err, code = require_role(ctx, EVENT_MANAGER_ROLES)
    if err:
        return err, code

    try:
        with get_db() as session:
            event = find_managed_event(session, ctx, event_id)
            if not event:
                if ctx.subject.role == "ADMIN":
                    return failure("Event not found", 404)
                return failure("You can only delete events for your own venue", 403)

            session.delete(event)
            session.commit()
    except SQLAlchemyError:
        logger.exception(f"Delete event error for {event_id}")
        return failure("Failed to delete event", 500)

    return success(message="Event deleted successfully")
