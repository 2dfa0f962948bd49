"""
Email API schemas.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from core import validation

EmailStatus = Literal["PENDING", "SENT", "FAILED"]


class SendEmailRequest(BaseModel):
    to: list[str] = Field(..., min_length=1)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    subject: str = Field(..., min_length=1, max_length=998)
    body: str = Field(..., min_length=1)
    body_html: str | None = None

    @field_validator("to", "cc", "bcc")
    @classmethod
    def check_addresses(cls, value: list[str]) -> list[str]:
        return [validation.check_email(address) for address in value]

    @field_validator("body_html")
    @classmethod
    def empty_html(cls, value: str | None) -> str | None:
        return validation.blank_to_none(value)
