"""
Accelerator API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core import validation

MIN_FOUNDED_YEAR = 1900


class AcceleratorFields(BaseModel):
    average_funding: str | None = Field(default=None, max_length=200)
    funded_companies: int | None = Field(default=None, gt=0)
    founded_year: int | None = None
    country: str | None = Field(default=None, max_length=200)
    type: str | None = Field(default=None, max_length=200)
    website: str | None = None
    logo_url: str | None = None

    @field_validator("founded_year")
    @classmethod
    def check_founded_year(cls, value: int | None) -> int | None:
        return validation.check_year(value, minimum=MIN_FOUNDED_YEAR)

    @field_validator("website", "logo_url")
    @classmethod
    def check_urls(cls, value: str | None) -> str | None:
        # "" clears the field.
        return validation.blank_to_none(validation.check_url_or_empty(value))


class CreateAcceleratorRequest(AcceleratorFields):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    why_it_stands_out: str = Field(..., min_length=1)


class UpdateAcceleratorRequest(AcceleratorFields):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, min_length=1)
    why_it_stands_out: str | None = Field(default=None, min_length=1)

    @field_validator("title", "description", "why_it_stands_out")
    @classmethod
    def not_null(cls, value: str | None) -> str:
        return validation.reject_null(value)
