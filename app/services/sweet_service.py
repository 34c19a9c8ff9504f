# app/services/sweet_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policy import AccessPolicy, Operation
from app.models.sweet import Sweet
from app.repositories.purchase_repo import PurchaseRepository
from app.repositories.sweet_repo import SweetRepository
from app.schemas.sweet import SweetCreate, SweetRestock, SweetUpdate


class SweetService:
    """
    Business logic for the catalog.

    Responsibilities:
      - public listing / search / lookup
      - admin-only create, update, delete, restock (enforced through
        the access policy, not by the router)
      - keep purchase history intact on delete
    """

    def __init__(
        self,
        repo: SweetRepository,
        purchase_repo: PurchaseRepository,
        policy: AccessPolicy,
        default_image_url: str,
    ):
        self.repo = repo
        self.purchase_repo = purchase_repo
        self.policy = policy
        self.default_image_url = default_image_url

    # ----- Reads -----

    def list_sweets(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        query: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Sweet]:
        self.policy.authorize(session, caller_id, Operation.READ, Sweet)
        query = query.strip() if query else None
        return self.repo.list(session, query=query or None, skip=skip, limit=limit)

    def get_sweet(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        sweet_id: uuid.UUID,
    ) -> Sweet:
        sweet = self.repo.get_by_id(session, sweet_id)
        if not sweet:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Sweet not found",
            )
        self.policy.authorize(session, caller_id, Operation.READ, Sweet, sweet)
        return sweet

    # ----- Admin writes -----

    def create_sweet(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        payload: SweetCreate,
    ) -> Sweet:
        sweet = Sweet(
            name=payload.name,
            category=payload.category,
            price=payload.price,
            quantity=payload.quantity,
            description=payload.description,
            image_url=payload.image_url or self.default_image_url,
        )
        self.policy.authorize(session, caller_id, Operation.INSERT, Sweet, sweet)
        return self.repo.create(session, sweet)

    def update_sweet(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        sweet_id: uuid.UUID,
        payload: SweetUpdate,
    ) -> Sweet:
        """
        Partial update; only fields present in the payload change.
        """
        sweet = self.get_sweet(session, caller_id, sweet_id)
        self.policy.authorize(session, caller_id, Operation.UPDATE, Sweet, sweet)

        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field in {"name", "category", "price", "quantity"}:
                continue
            setattr(sweet, field, value)

        return self.repo.update(session, sweet)

    def restock(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        sweet_id: uuid.UUID,
        payload: SweetRestock,
    ) -> Sweet:
        """
        Set stock to an absolute value (not a delta).
        """
        sweet = self.get_sweet(session, caller_id, sweet_id)
        self.policy.authorize(session, caller_id, Operation.UPDATE, Sweet, sweet)
        sweet.quantity = payload.quantity
        return self.repo.update(session, sweet)

    def delete_sweet(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        sweet_id: uuid.UUID,
    ) -> None:
        """
        Delete a sweet that has never been bought.

        Sweets with purchase history are kept; deleting them would wipe
        the buyers' records.
        """
        sweet = self.get_sweet(session, caller_id, sweet_id)
        self.policy.authorize(session, caller_id, Operation.DELETE, Sweet, sweet)

        if self.purchase_repo.exists_for_sweet(session, sweet.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Sweet has purchase history and cannot be deleted",
            )

        self.repo.delete(session, sweet)
