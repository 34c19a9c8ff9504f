# app/models/user.py
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Enum as SAEnum, UniqueConstraint
from sqlmodel import SQLModel, Field

from app.models.timestamps import track_updated_at, utcnow

FULL_NAME_MAX_LENGTH = 200


class AppRole(str, Enum):
    """Closed set of application roles."""

    admin = "admin"
    user = "user"


class Identity(SQLModel, table=True):
    """
    Local mirror of a Supabase Auth principal.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    This table is *not* responsible for password hashes. Supabase Auth
    stores the password in its own schema. Profiles, role grants and
    purchases all hang off this row and are removed with it.
    """

    __tablename__ = "identities"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from Supabase auth.users",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )


class Profile(SQLModel, table=True):
    """
    One profile per identity, created by provisioning only.
    """

    __tablename__ = "profiles"

    id: uuid.UUID = Field(
        primary_key=True,
        foreign_key="identities.id",
        ondelete="CASCADE",
        description="Same id as the owning identity",
    )

    email: str = Field(description="Copied from the identity at registration")

    full_name: str = Field(
        default="",
        max_length=FULL_NAME_MAX_LENGTH,
        description="Display name; empty string when not supplied",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        description="Maintained on every update, callers cannot set it",
    )


class RoleGrant(SQLModel, table=True):
    """
    Association of an identity with a role.

    Every identity gets a "user" grant at provisioning. "admin" grants
    are created out-of-band (see app/scripts/grant_admin.py).
    """

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="user_roles_user_id_role_key"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="identities.id",
        ondelete="CASCADE",
        index=True,
    )

    role: AppRole = Field(
        sa_column=Column(
            SAEnum(AppRole, name="app_role"),
            nullable=False,
        ),
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
    )


track_updated_at(Profile)
