"""
Request validation and pagination helpers.

Request bodies and query strings are parsed into pydantic models. Failures
become a 400 envelope whose "details" list names each failing field.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from flask import Response, request
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from stratford_api.common.responses import failure

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

M = TypeVar("M", bound=BaseModel)


class ApiModel(BaseModel):
    """Base for request schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageQuery(ApiModel):
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def describe(self, total: int) -> Dict[str, int]:
        """Pagination block returned alongside a listing."""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": math.ceil(total / self.limit),
        }


def parse_dt(val: Optional[str]) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 string to a naive UTC datetime.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val:
        return None
    try:
        # Handles 'YYYY-MM-DD', 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        if val.endswith("Z"):
            val = val[:-1] + "+00:00"
        parsed = datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None
    return to_naive_utc(parsed)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _details(exc: ValidationError, location: str) -> List[Dict[str, Any]]:
    return [
        {
            "path": ".".join(str(part) for part in err["loc"]),
            "msg": err["msg"],
            "location": location,
        }
        for err in exc.errors()
    ]


def _validate(
    schema: Type[M], data: Any, location: str
) -> Tuple[Optional[M], Optional[Response], Optional[int]]:
    if not isinstance(data, dict):
        err, code = failure(
            "Validation failed",
            400,
            details=[{"path": "", "msg": "Expected a JSON object", "location": location}],
        )
        return None, err, code
    try:
        return schema.model_validate(data), None, None
    except ValidationError as exc:
        err, code = failure("Validation failed", 400, details=_details(exc, location))
        return None, err, code


def validate_body(schema: Type[M]) -> Tuple[Optional[M], Optional[Response], Optional[int]]:
    """
    Validate the current request's JSON body.

    Returns:
        tuple: (model, error_response, status_code)
               If successful, error_response and status_code are None.
    """
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data():
            err, code = failure(
                "Validation failed",
                400,
                details=[{"path": "", "msg": "Malformed JSON body", "location": "body"}],
            )
            return None, err, code
        data = {}
    return _validate(schema, data, "body")


def contains_pattern(term: str) -> str:
    """LIKE pattern matching `term` literally anywhere; use with escape="\\"."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def validate_query(schema: Type[M]) -> Tuple[Optional[M], Optional[Response], Optional[int]]:
    """Validate the current request's query string; see validate_body."""
    return _validate(schema, request.args.to_dict(), "query")
