# app/services/registration_service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.identity_provider import IdentityProviderError, SupabaseIdentityProvider
from app.models.user import Profile
from app.repositories.user_repo import UserRepository
from app.schemas.user import RegisterRequest
from app.services.provisioning_service import ProvisioningService

logger = logging.getLogger(__name__)


class RegistrationService:
    """
    Sign-up: create the Supabase auth user, then provision locally.

    The two halves live in different systems, so atomicity is kept by
    compensation: if local provisioning fails, the auth user is deleted
    again and the caller sees a single failure.
    """

    def __init__(
        self,
        repo: UserRepository,
        provisioning: ProvisioningService,
        provider: SupabaseIdentityProvider,
    ):
        self.repo = repo
        self.provisioning = provisioning
        self.provider = provider

    def register(self, session: Session, payload: RegisterRequest) -> Profile:
        if self.repo.get_identity_by_email(session, payload.email) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )

        try:
            external = self.provider.create_identity(
                email=payload.email,
                password=payload.password,
                full_name=payload.full_name,
            )
        except IdentityProviderError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Registration failed",
            )

        try:
            self.provisioning.provision(
                session,
                identity_id=external.id,
                email=external.email,
                metadata=external.metadata,
            )
        except SQLAlchemyError:
            logger.warning(
                "Rolling back auth user %s after provisioning failure", external.id
            )
            try:
                self.provider.delete_identity(external.id)
            except IdentityProviderError:
                logger.exception(
                    "Could not delete auth user %s; it is now orphaned", external.id
                )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Registration failed",
            )

        return self.repo.get_profile(session, external.id)
