"""Request bodies and query strings accepted by the venues routes."""

from typing import Annotated, List, Optional

from pydantic import AfterValidator, Field, HttpUrl, StringConstraints, TypeAdapter, ValidationError

from stratford_api.common.validation import ApiModel, PageQuery

_http_url = TypeAdapter(HttpUrl)


def check_http_url(value: str) -> str:
    """Reject anything that is not an http(s) URL, but keep the text as given."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Input should be a valid URL") from None
    return value


VenueName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Address = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TrimmedText = Annotated[str, StringConstraints(strip_whitespace=True)]
Website = Annotated[str, StringConstraints(strip_whitespace=True), AfterValidator(check_http_url)]


class VenueFilters(PageQuery):
    search: Optional[str] = None


class VenueCreate(ApiModel):
    name: VenueName
    address: Address
    phone: Optional[TrimmedText] = None
    website: Optional[Website] = None
    description: Optional[TrimmedText] = None
    capacity: Optional[int] = Field(None, ge=1)
    amenities: List[str] = Field(default_factory=list)


class VenueUpdate(VenueCreate):
    """All fields optional; only the ones provided are changed."""

    name: Optional[VenueName] = None
    address: Optional[Address] = None
    amenities: Optional[List[str]] = None
