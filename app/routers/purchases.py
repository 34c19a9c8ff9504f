# app/routers/purchases.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import require_auth
from app.core.policy import policy
from app.database import get_session
from app.repositories.purchase_repo import PurchaseRepository
from app.repositories.sweet_repo import SweetRepository
from app.schemas.purchase import PurchaseRead
from app.services.purchase_service import PurchaseService

router = APIRouter(prefix="/purchases", tags=["Purchases"])

service = PurchaseService(PurchaseRepository(), SweetRepository(), policy)


@router.get("", response_model=list[PurchaseRead])
def list_purchases(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    List purchases, newest first.

    - Customers see their own purchases.
    - Admins see everyone's.
    """
    return service.list_purchases(session, caller_id, skip=skip, limit=limit)
