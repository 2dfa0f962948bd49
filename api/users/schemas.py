"""
User API schemas.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from auth.schemas import Role
from core import validation


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    avatar_url: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("avatar_url")
    @classmethod
    def check_avatar_url(cls, value: str | None) -> str | None:
        return validation.blank_to_none(validation.check_url_or_empty(value))


class UpdateRoleRequest(BaseModel):
    role: Role
