# app/routers/sweets.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import get_caller_id, require_auth
from app.core.config import get_settings
from app.core.policy import policy
from app.database import get_session
from app.repositories.purchase_repo import PurchaseRepository
from app.repositories.sweet_repo import SweetRepository
from app.schemas.purchase import PurchaseRead
from app.schemas.sweet import SweetCreate, SweetRead, SweetRestock, SweetUpdate
from app.services.purchase_service import PurchaseService
from app.services.sweet_service import SweetService

router = APIRouter(prefix="/sweets", tags=["Sweets"])

repo = SweetRepository()
purchase_repo = PurchaseRepository()
service = SweetService(
    repo,
    purchase_repo,
    policy,
    default_image_url=get_settings().DEFAULT_IMAGE_URL,
)
purchase_service = PurchaseService(purchase_repo, repo, policy)


# -------- Public endpoints --------


@router.get("", response_model=list[SweetRead])
def list_sweets(
    q: str | None = Query(default=None, max_length=100),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    session: Session = Depends(get_session),
    caller_id: uuid.UUID | None = Depends(get_caller_id),
):
    """
    List sweets ordered by name.

    - Public endpoint.
    - `q` matches name, category or description (case-insensitive).
    """
    return service.list_sweets(session, caller_id, query=q, skip=skip, limit=limit)


@router.get("/{sweet_id}", response_model=SweetRead)
def get_sweet(
    sweet_id: uuid.UUID,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID | None = Depends(get_caller_id),
):
    """
    Get a single sweet by id.

    - Public endpoint.
    """
    return service.get_sweet(session, caller_id, sweet_id)


# -------- Customer endpoints --------


@router.post(
    "/{sweet_id}/purchase",
    response_model=PurchaseRead,
    status_code=status.HTTP_201_CREATED,
)
def purchase_sweet(
    sweet_id: uuid.UUID,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Buy one unit.

    - 409 if the sweet does not exist or is out of stock.
    """
    return purchase_service.purchase(session, caller_id, sweet_id)


# -------- Admin endpoints --------
# Authentication is required here; the admin check itself is made by the
# access policy inside the service.


@router.post(
    "",
    response_model=SweetRead,
    status_code=status.HTTP_201_CREATED,
)
def create_sweet(
    payload: SweetCreate,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Create a new sweet (admin only).
    """
    return service.create_sweet(session, caller_id, payload)


@router.patch("/{sweet_id}", response_model=SweetRead)
def update_sweet(
    sweet_id: uuid.UUID,
    payload: SweetUpdate,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Update an existing sweet (admin only).
    """
    return service.update_sweet(session, caller_id, sweet_id, payload)


@router.post("/{sweet_id}/restock", response_model=SweetRead)
def restock_sweet(
    sweet_id: uuid.UUID,
    payload: SweetRestock,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Set the stock level to an absolute value (admin only).
    """
    return service.restock(session, caller_id, sweet_id, payload)


@router.delete(
    "/{sweet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_sweet(
    sweet_id: uuid.UUID,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Delete a sweet (admin only).

    - 409 if the sweet has purchase history.
    """
    service.delete_sweet(session, caller_id, sweet_id)
    return None
