# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.identity_provider import SupabaseIdentityProvider, get_identity_provider
from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.schemas.user import ProfileRead, RegisterRequest
from app.services.provisioning_service import ProvisioningService
from app.services.registration_service import RegistrationService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
provisioning = ProvisioningService(repo)


@router.post(
    "/register",
    response_model=ProfileRead,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Create an account.

    Creates the Supabase auth user, then the local identity, profile and
    default "user" role in one transaction. Sign-in itself happens
    against Supabase directly.
    """
    service = RegistrationService(repo, provisioning, provider)
    return service.register(session, payload)
