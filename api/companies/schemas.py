"""
Company API schemas.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core import validation

MIN_FOUNDED_YEAR = 1800

_OPTIONAL_TEXT_FIELDS = (
    "tagline",
    "company_size",
    "domain",
    "sector",
    "vision",
    "location",
    "funding_stage",
)


class ContactSourceRequest(BaseModel):
    instagram: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    contact_number: str | None = None
    emails: list[str] | None = None

    @field_validator("instagram", "linkedin", "twitter", "facebook", "contact_number")
    @classmethod
    def empty_to_none(cls, value: str | None) -> str | None:
        return validation.blank_to_none(value)

    @field_validator("emails")
    @classmethod
    def check_emails(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [validation.check_email(email) for email in value]


class CompanyFields(BaseModel):
    tagline: str | None = None
    company_size: str | None = None
    domain: str | None = None
    sector: str | None = None
    vision: str | None = None
    founded_year: int | None = None
    website: str | None = None
    logo_url: str | None = None
    location: str | None = None
    funding_stage: str | None = None
    accelerator_id: UUID | None = None

    @field_validator(*_OPTIONAL_TEXT_FIELDS)
    @classmethod
    def empty_to_none(cls, value: str | None) -> str | None:
        return validation.blank_to_none(value)

    @field_validator("founded_year")
    @classmethod
    def check_founded_year(cls, value: int | None) -> int | None:
        return validation.check_year(value, minimum=MIN_FOUNDED_YEAR)

    @field_validator("website", "logo_url")
    @classmethod
    def check_urls(cls, value: str | None) -> str | None:
        return validation.blank_to_none(validation.check_url_or_empty(value))

    @field_validator("accelerator_id", mode="before")
    @classmethod
    def empty_accelerator(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CreateCompanyRequest(CompanyFields):
    name: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=10)
    tech_stack: list[str] = Field(default_factory=list)
    contact_source: ContactSourceRequest | None = None


class UpdateCompanyRequest(CompanyFields):
    name: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, min_length=10)
    tech_stack: list[str] | None = None
    contact_source: ContactSourceRequest | None = None

    @field_validator("name", "description")
    @classmethod
    def not_null(cls, value: str | None) -> str:
        return validation.reject_null(value)
