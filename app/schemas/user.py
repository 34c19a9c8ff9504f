# app/schemas/user.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.models.user import FULL_NAME_MAX_LENGTH, AppRole


class RegisterRequest(SQLModel):
    """
    Sign-up payload.

    The password goes straight to Supabase Auth and is never stored here.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    full_name: str | None = Field(default=None, max_length=FULL_NAME_MAX_LENGTH)

    @field_validator("full_name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class ProfileRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    full_name: str
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only editable field is `full_name`.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, max_length=FULL_NAME_MAX_LENGTH)

    @field_validator("full_name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip()


class RoleGrantRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    role: AppRole
    created_at: datetime


class MyRolesRead(SQLModel):
    """
    Caller's own role grants plus a convenience flag for the UI.
    """

    roles: list[RoleGrantRead]
    is_admin: bool
