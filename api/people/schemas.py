"""
People API schemas.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core import validation


class ContactRequest(BaseModel):
    linkedin: str | None = None
    instagram: str | None = None
    twitter: str | None = None
    email: str | None = None
    phone_number: str | None = None

    @field_validator("linkedin", "instagram", "twitter", "phone_number")
    @classmethod
    def empty_to_none(cls, value: str | None) -> str | None:
        return validation.blank_to_none(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str | None) -> str | None:
        value = validation.blank_to_none(value)
        if value is None:
            return None
        return validation.check_email(value)


class PersonFields(BaseModel):
    passion: str | None = None
    bio: str | None = None
    profile_url: str | None = None
    photo_url: str | None = None
    company_id: UUID | None = None

    @field_validator("passion", "bio")
    @classmethod
    def empty_to_none(cls, value: str | None) -> str | None:
        return validation.blank_to_none(value)

    @field_validator("profile_url", "photo_url")
    @classmethod
    def check_urls(cls, value: str | None) -> str | None:
        return validation.blank_to_none(validation.check_url_or_empty(value))

    @field_validator("company_id", mode="before")
    @classmethod
    def empty_company(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CreatePersonRequest(PersonFields):
    full_name: str = Field(..., min_length=1, max_length=300)
    notes: list[str] = Field(default_factory=list)
    contact: ContactRequest | None = None


class UpdatePersonRequest(PersonFields):
    full_name: str | None = Field(default=None, min_length=1, max_length=300)
    notes: list[str] | None = None
    contact: ContactRequest | None = None

    @field_validator("full_name")
    @classmethod
    def not_null(cls, value: str | None) -> str:
        return validation.reject_null(value)
