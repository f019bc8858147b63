"""Request bodies and query strings accepted by the events routes."""

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import Field, StringConstraints, field_validator, model_validator

from stratford_api.common.validation import ApiModel, PageQuery, parse_dt, to_naive_utc

TITLE_MAX_LENGTH = 200

Category = Literal[
    "LIVE_MUSIC",
    "STANDUP_COMEDY",
    "CLASSICAL_MUSIC",
    "THEATRE",
    "ART_GALLERY",
    "LITERATURE",
    "RESTAURANT_EVENT",
]
Status = Literal["DRAFT", "PUBLISHED", "CANCELLED"]
Title = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH)
]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class EventFilters(PageQuery):
    category: Optional[Category] = None
    status: Status = "PUBLISHED"
    date: Optional[datetime] = None
    venue_id: Optional[str] = None
    search: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        if value is None or isinstance(value, datetime):
            return value
        parsed = parse_dt(value)
        if parsed is None:
            raise ValueError("date must be an ISO-8601 date")
        return parsed


class EventCreate(ApiModel):
    title: Title
    description: Description
    start_time: datetime
    end_time: datetime
    price: Optional[float] = Field(None, ge=0)
    category: Category
    venue_id: str = Field(min_length=1)

    @field_validator("start_time", "end_time")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_times(self) -> "EventCreate":
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class EventUpdate(ApiModel):
    """All fields optional; only the ones provided are changed."""

    title: Optional[Title] = None
    description: Optional[Description] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[Category] = None
    status: Optional[Status] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None
