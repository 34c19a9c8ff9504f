# app/models/purchase.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import SQLModel, Field

from app.models.timestamps import utcnow


class Purchase(SQLModel, table=True):
    """
    Immutable purchase record.

    Written only by the purchase flow, never updated or deleted by the
    API. A sweet that has purchases cannot be deleted (RESTRICT), so
    history survives catalog clean-ups.
    """

    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="purchases_quantity_check"),
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
        description="Buyer identity",
    )

    sweet_id: uuid.UUID = Field(
        foreign_key="sweets.id",
        ondelete="RESTRICT",
        index=True,
    )

    quantity: int = Field(description="Units bought (>= 1)")

    # Price at time of purchase, not a live reference to sweets.price
    total_price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )
