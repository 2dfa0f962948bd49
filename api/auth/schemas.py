"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core import validation

Role = Literal["USER", "ADMIN"]
AuthProvider = Literal["EMAIL", "GOOGLE"]


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, min_length=2, max_length=200)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validation.check_email(value)


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validation.check_email(value)


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    image: str | None = None
    avatar_url: str | None = None
    role: Role
    auth_provider: AuthProvider
    email_verified: datetime | None = None
    metadata: dict[str, Any] | None = None
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class SessionResponse(BaseModel):
    id: UUID
    user_id: UUID
    expires: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    last_active_at: datetime | None = None
    created_at: datetime


class AuthResponse(BaseModel):
    user: UserResponse
    session: SessionResponse
    access_token: str
