# app/schemas/purchase.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlmodel import SQLModel


class PurchaseRead(SQLModel):
    """
    Purchase record as returned to the buyer (or to an admin).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    sweet_id: uuid.UUID
    quantity: int
    total_price: Decimal
    created_at: datetime
