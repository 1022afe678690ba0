# storecast/schemas/profile.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Anonymous visitors have no profile row.
Role = Literal["client", "admin"]


class ProfileRead(SQLModel):
    """Profile representation returned to callers."""

    id: uuid.UUID
    email: str
    role: Role
    created_at: datetime


class EmailChange(SQLModel):
    """Admin-only email change payload."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class RoleChange(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class EmailOnly(SQLModel):
    """Payload for reset / reauthentication / magic-link requests."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class InviteRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    role: Role = "client"


class PasswordChange(SQLModel):
    """
    Self-service password change.

    Only touches Supabase Auth; the profile row is not modified.
    """

    model_config = ConfigDict(extra="forbid")

    password: str = Field(min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("password cannot be blank")
        return v
