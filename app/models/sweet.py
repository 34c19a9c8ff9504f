# app/models/sweet.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import SQLModel, Field

from app.models.timestamps import track_updated_at, utcnow


class Sweet(SQLModel, table=True):
    """
    Catalog entry.

    Stock and price can never go negative; the check constraints make the
    database reject such writes even if they slip past the API schemas.
    """

    __tablename__ = "sweets"
    __table_args__ = (
        CheckConstraint("price >= 0", name="sweets_price_check"),
        CheckConstraint("quantity >= 0", name="sweets_quantity_check"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        index=True,
        description="Display name of the sweet",
    )

    category: str = Field(
        index=True,
        description="Free-form category, e.g. Chocolate, Gummy, Sour",
    )

    price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Unit price",
    )

    quantity: int = Field(
        default=0,
        description="Units currently in stock",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    image_url: str | None = Field(
        default=None,
        description="Image reference; placeholder when not supplied",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        description="Maintained on every update, callers cannot set it",
    )


track_updated_at(Sweet)
