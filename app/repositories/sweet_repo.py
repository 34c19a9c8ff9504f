# app/repositories/sweet_repo.py
import uuid
from decimal import Decimal

from sqlalchemy import func, or_, update
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, col, select

from app.models.sweet import Sweet
from app.models.timestamps import utcnow


class SweetRepository:
    """
    Data access layer for Sweet.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, sweet_id: uuid.UUID) -> Sweet | None:
        return session.get(Sweet, sweet_id)

    def list(
        self,
        session: Session,
        query: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Sweet]:
        """
        Sweets ordered by name.

        `query` matches name, category or description, case-insensitively.
        It is a literal substring: `%` and `_` are escaped, not wildcards.
        """
        stmt = select(Sweet)
        if query:
            stmt = stmt.where(
                or_(
                    col(Sweet.name).icontains(query, autoescape=True),
                    col(Sweet.category).icontains(query, autoescape=True),
                    col(Sweet.description).icontains(query, autoescape=True),
                )
            )
        stmt = stmt.order_by(Sweet.name).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        return session.exec(select(func.count()).select_from(Sweet)).one()

    def create(self, session: Session, sweet: Sweet) -> Sweet:
        session.add(sweet)
        session.commit()
        session.refresh(sweet)
        return sweet

    def update(self, session: Session, sweet: Sweet) -> Sweet:
        # Mark updated_at dirty so the timestamp listener fires even when
        # the payload changed nothing.
        flag_modified(sweet, "updated_at")
        session.add(sweet)
        session.commit()
        session.refresh(sweet)
        return sweet

    def delete(self, session: Session, sweet: Sweet) -> None:
        session.delete(sweet)
        session.commit()

    def decrement_stock(
        self,
        session: Session,
        sweet_id: uuid.UUID,
        amount: int = 1,
    ) -> Decimal | None:
        """
        Atomically take `amount` units out of stock.

        Single conditional UPDATE: matches only when enough stock is left,
        so concurrent buyers can never drive quantity below zero.
        Does not commit.

        Returns:
            The sweet's current price if the row was decremented,
            None if the sweet does not exist or is out of stock.
        """
        stmt = (
            update(Sweet)
            .where(col(Sweet.id) == sweet_id)
            .where(col(Sweet.quantity) >= amount)
            .values(quantity=Sweet.quantity - amount, updated_at=utcnow())
            .returning(Sweet.price)
            .execution_options(synchronize_session=False)
        )
        return session.exec(stmt).scalar_one_or_none()
