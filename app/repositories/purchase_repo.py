# app/repositories/purchase_repo.py
import uuid

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, col, select

from app.models.purchase import Purchase


class PurchaseRepository:
    """
    Data access layer for purchases.

    NOTE:
      - No commits here; a purchase is written together with the stock
        decrement and the service owns the transaction.
      - There is deliberately no update/delete: purchases are immutable.
    """

    def add(self, session: Session, purchase: Purchase) -> Purchase:
        """
        Insert a Purchase without committing, but ensure id is populated.
        """
        session.add(purchase)
        session.flush()
        return purchase

    def list(
        self,
        session: Session,
        visible: ColumnElement[bool] | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Purchase]:
        """
        Newest first, restricted by a policy read filter when given.
        """
        stmt = select(Purchase)
        if visible is not None:
            stmt = stmt.where(visible)
        stmt = stmt.order_by(col(Purchase.created_at).desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def exists_for_sweet(self, session: Session, sweet_id: uuid.UUID) -> bool:
        stmt = select(Purchase.id).where(Purchase.sweet_id == sweet_id).limit(1)
        return session.exec(stmt).first() is not None
