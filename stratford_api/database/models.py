"""
ORM models for the Stratford platform.

Each class becomes a table. `to_dict()` produces the camelCase JSON shape the
frontend consumes; password hashes are never serialized.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from stratford_api.database.db_connection import Base

# --- CLOSED TAG SETS ---
ROLES = ("ADMIN", "VENUE", "ARTIST", "READER")
EVENT_CATEGORIES = (
    "LIVE_MUSIC",
    "STANDUP_COMEDY",
    "CLASSICAL_MUSIC",
    "THEATRE",
    "ART_GALLERY",
    "LITERATURE",
    "RESTAURANT_EVENT",
)
EVENT_STATUSES = ("DRAFT", "PUBLISHED", "CANCELLED")
PUBLICATION_STATUSES = ("DRAFT", "PUBLISHED", "ARCHIVED")
AD_TYPES = ("BANNER", "SIDEBAR", "FEATURED", "CLASSIFIED")
PAYMENT_STATUSES = ("PENDING", "COMPLETED", "FAILED", "REFUNDED")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Naive UTC timestamp; all datetimes are stored as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200))
    role = Column(String(16), nullable=False, default="READER")
    bio = Column(Text)
    phone = Column(String(50))
    address = Column(String(255))
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    venue = relationship(
        "Venue",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_summary(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "bio": self.bio,
            "phone": self.phone,
            "address": self.address,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class Venue(Base):
    __tablename__ = "venues"

    id = Column(String(32), primary_key=True, default=new_id)
    # One venue per owner
    user_id = Column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=False)
    phone = Column(String(50))
    website = Column(String(255))
    description = Column(Text)
    capacity = Column(Integer)
    amenities = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="venue")
    events = relationship(
        "Event", back_populates="venue", cascade="all, delete-orphan", passive_deletes=True
    )

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "description": self.description,
            "capacity": self.capacity,
            "amenities": list(self.amenities or []),
            "createdAt": iso(self.created_at),
        }


class Event(Base):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=new_id)
    venue_id = Column(
        String(32), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    price = Column(Float)
    category = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default="PUBLISHED")
    created_at = Column(DateTime, nullable=False, default=utcnow)

    venue = relationship("Venue", back_populates="events")

    def to_dict(self, venue: Optional[str] = None) -> Dict[str, Any]:
        """
        Serialize the event.

        Args:
            venue (str, optional): "summary" or "full" to embed the venue.
        """
        data = {
            "id": self.id,
            "venueId": self.venue_id,
            "title": self.title,
            "description": self.description,
            "startTime": iso(self.start_time),
            "endTime": iso(self.end_time),
            "price": self.price,
            "category": self.category,
            "status": self.status,
            "createdAt": iso(self.created_at),
        }
        if venue == "summary":
            data["venue"] = self.venue.to_summary()
        elif venue == "full":
            data["venue"] = self.venue.to_dict()
        return data


class MagazineIssue(Base):
    __tablename__ = "magazine_issues"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    month_year = Column(String(32), nullable=False)
    cover_image = Column(String(500))
    published_at = Column(DateTime)
    status = Column(String(16), nullable=False, default="DRAFT")
    created_at = Column(DateTime, nullable=False, default=utcnow)

    articles = relationship("Article", back_populates="issue", cascade="all, delete-orphan")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "monthYear": self.month_year,
            "coverImage": self.cover_image,
            "publishedAt": iso(self.published_at),
            "status": self.status,
            "createdAt": iso(self.created_at),
        }


class Article(Base):
    __tablename__ = "articles"

    id = Column(String(32), primary_key=True, default=new_id)
    issue_id = Column(
        String(32), ForeignKey("magazine_issues.id", ondelete="CASCADE"), nullable=False
    )
    author_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    featured_image = Column(String(500))
    published_at = Column(DateTime)
    status = Column(String(16), nullable=False, default="DRAFT")
    created_at = Column(DateTime, nullable=False, default=utcnow)

    issue = relationship("MagazineIssue", back_populates="articles")
    author = relationship("User")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "issueId": self.issue_id,
            "authorId": self.author_id,
            "title": self.title,
            "content": self.content,
            "featuredImage": self.featured_image,
            "publishedAt": iso(self.published_at),
            "status": self.status,
            "createdAt": iso(self.created_at),
            "author": {"id": self.author.id, "name": self.author.name},
        }


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(String(32), primary_key=True, default=new_id)
    curator_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    # [{"title", "artist", "duration", "url"?}, ...]
    tracks = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    curator = relationship("User")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "curatorId": self.curator_id,
            "title": self.title,
            "description": self.description,
            "tracks": list(self.tracks or []),
            "createdAt": iso(self.created_at),
            "curator": {"id": self.curator.id, "name": self.curator.name},
        }


class Advertisement(Base):
    __tablename__ = "advertisements"

    id = Column(String(32), primary_key=True, default=new_id)
    advertiser_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    issue_id = Column(String(32), ForeignKey("magazine_issues.id", ondelete="SET NULL"))
    ad_type = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    payment_status = Column(String(16), nullable=False, default="PENDING")
    created_at = Column(DateTime, nullable=False, default=utcnow)

    advertiser = relationship("User")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "advertiserId": self.advertiser_id,
            "issueId": self.issue_id,
            "adType": self.ad_type,
            "content": self.content,
            "paymentStatus": self.payment_status,
            "createdAt": iso(self.created_at),
            "advertiser": {"id": self.advertiser.id, "name": self.advertiser.name},
        }
