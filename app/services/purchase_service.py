# app/services/purchase_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policy import AccessPolicy, Operation
from app.models.purchase import Purchase
from app.repositories.purchase_repo import PurchaseRepository
from app.repositories.sweet_repo import SweetRepository

logger = logging.getLogger(__name__)

# One unit per purchase; there is no cart.
UNITS_PER_PURCHASE = 1


class PurchaseService:
    """
    Business logic for buying a sweet.

    Responsibilities:
      - authorize the purchase insert for the caller
      - take stock with a single conditional decrement
      - record the purchase at the price in force at that moment
      - commit decrement + record together, or neither
    """

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        sweet_repo: SweetRepository,
        policy: AccessPolicy,
    ):
        self.purchase_repo = purchase_repo
        self.sweet_repo = sweet_repo
        self.policy = policy

    def purchase(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        sweet_id: uuid.UUID,
    ) -> Purchase:
        """
        Buy one unit of a sweet.

        Steps:
          1. Authorize inserting a purchase with buyer = caller.
          2. Decrement stock where quantity > 0 (atomic, returns price).
             No matching row => sweet missing or sold out => 409.
          3. Insert the Purchase row with total = returned price.
          4. Commit both writes in one transaction.

        The decrement is part of the purchase itself and is not subject
        to the admin-only Sweet update rule.

        Raises:
            AccessDenied: caller may not create this purchase.
            HTTPException(409): sweet not found or out of stock.
        """
        candidate = Purchase(
            user_id=caller_id,
            sweet_id=sweet_id,
            quantity=UNITS_PER_PURCHASE,
        )
        self.policy.authorize(session, caller_id, Operation.INSERT, Purchase, candidate)

        try:
            price = self.sweet_repo.decrement_stock(
                session, sweet_id, amount=UNITS_PER_PURCHASE
            )
            if price is not None:
                candidate.total_price = price * UNITS_PER_PURCHASE
                purchase = self.purchase_repo.add(session, candidate)
                session.commit()
        except Exception:
            session.rollback()
            raise

        if price is None:
            session.rollback()
            logger.info("Purchase of %s by %s: out of stock", sweet_id, caller_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This sweet is out of stock",
            )

        session.refresh(purchase)
        logger.info(
            "Purchase %s: %s bought %s for %s",
            purchase.id,
            caller_id,
            sweet_id,
            purchase.total_price,
        )
        return purchase

    def list_purchases(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Purchase]:
        """
        Purchases the caller may see: their own, or all of them for admins.
        """
        visible = self.policy.read_filter(session, caller_id, Purchase)
        return self.purchase_repo.list(session, visible, skip=skip, limit=limit)
