"""Request bodies accepted by the auth routes."""

from typing import Annotated, Literal, Optional

from pydantic import EmailStr, Field, StringConstraints, field_validator

from stratford_api.common.validation import ApiModel

Role = Literal["ADMIN", "VENUE", "ARTIST", "READER"]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TrimmedText = Annotated[str, StringConstraints(strip_whitespace=True)]


class RegisterRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[Name] = None
    role: Role = "READER"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ProfileUpdate(ApiModel):
    name: Optional[Name] = None
    bio: Optional[TrimmedText] = None
    phone: Optional[TrimmedText] = None
    address: Optional[TrimmedText] = None
