# app/schemas/sweet.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, StrictInt, field_validator
from sqlmodel import SQLModel, Field


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class SweetCreate(SQLModel):
    """
    Payload for creating a sweet (admin only).

    - id and timestamps are generated server-side.
    - image_url falls back to the configured placeholder.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    category: str = Field(max_length=100)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(default=0, ge=0)
    description: str | None = None
    image_url: str | None = None

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class SweetUpdate(SQLModel):
    """
    Partial update payload for sweets.
    All fields are optional; updated_at is not accepted.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    quantity: int | None = Field(default=None, ge=0)
    description: str | None = None
    image_url: str | None = None

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class SweetRestock(SQLModel):
    """
    Absolute stock level (not a delta).

    Strict integer: "12", 12.0 or 12.5 are rejected before any write.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: StrictInt = Field(ge=0)


class SweetRead(SQLModel):
    """
    Sweet representation for clients.
    """

    id: uuid.UUID
    name: str
    category: str
    price: Decimal
    quantity: int
    description: str | None
    image_url: str | None
    created_at: datetime
    updated_at: datetime
