"""
Advertisement service routes.
"""

import logging

from flask import Blueprint
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.database.db_connection import get_db
from stratford_api.database.models import Advertisement

logger = logging.getLogger(__name__)

advertisements_bp = Blueprint("advertisements", __name__)
attach_request_logging(advertisements_bp, "Ads")


@advertisements_bp.route("", methods=["GET"])
def list_advertisements():
    """All advertisements with their advertiser, newest first."""
    try:
        with get_db() as session:
            ads = session.scalars(
                select(Advertisement)
                .options(joinedload(Advertisement.advertiser))
                .order_by(Advertisement.created_at.desc())
            ).all()
            rows = [ad.to_dict() for ad in ads]
    except SQLAlchemyError:
        logger.exception("Get advertisements error")
        return failure("Failed to get advertisements", 500)

    return success({"advertisements": rows})
