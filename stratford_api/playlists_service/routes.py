"""
Playlist service routes: curated playlists of local music.
"""

import logging

from flask import Blueprint
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.database.db_connection import get_db
from stratford_api.database.models import Playlist

logger = logging.getLogger(__name__)

playlists_bp = Blueprint("playlists", __name__)
attach_request_logging(playlists_bp, "Playlists")


@playlists_bp.route("", methods=["GET"])
def list_playlists():
    """All playlists with their curator, newest first."""
    try:
        with get_db() as session:
            playlists = session.scalars(
                select(Playlist)
                .options(joinedload(Playlist.curator))
                .order_by(Playlist.created_at.desc())
            ).all()
            rows = [p.to_dict() for p in playlists]
    except SQLAlchemyError:
        logger.exception("Get playlists error")
        return failure("Failed to get playlists", 500)

    return success({"playlists": rows})


@playlists_bp.route("/<playlist_id>", methods=["GET"])
def get_playlist(playlist_id):
    try:
        with get_db() as session:
            playlist = session.get(Playlist, playlist_id, options=[joinedload(Playlist.curator)])
            if not playlist:
                return failure("Playlist not found", 404)
            data = playlist.to_dict()
    except SQLAlchemyError:
        logger.exception("Get playlist error")
        return failure("Failed to get playlist", 500)

    return success({"playlist": data})
