# app/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth
from app.core.policy import policy
from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.schemas.user import MyRolesRead, ProfileRead, ProfileUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo, policy)


@router.get("/me", response_model=ProfileRead)
def read_me(
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires valid Supabase JWT.
    """
    return service.get_me(session, caller_id)


@router.patch("/me", response_model=ProfileRead)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Update the authenticated user's profile (partial update).

    Only `full_name` is editable.
    """
    return service.update_me(session, caller_id, payload)


@router.get("/me/roles", response_model=MyRolesRead)
def read_my_roles(
    session: Session = Depends(get_session),
    caller_id: uuid.UUID = Depends(require_auth),
):
    """
    Return the caller's role grants and whether one of them is admin.
    """
    return service.my_roles(session, caller_id)
