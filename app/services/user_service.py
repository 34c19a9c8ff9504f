# app/services/user_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policy import AccessPolicy, Operation
from app.models.user import Profile, RoleGrant
from app.repositories.user_repo import UserRepository
from app.schemas.user import MyRolesRead, ProfileUpdate, RoleGrantRead


class UserService:
    """
    Business logic for the caller's own profile and roles.

    Responsibilities:
      - run every read/update through the access policy
      - orchestrate repository operations
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository, policy: AccessPolicy):
        self.repo = repo
        self.policy = policy

    def _get_profile(self, session: Session, identity_id: uuid.UUID) -> Profile:
        profile = self.repo.get_profile(session, identity_id)
        if not profile:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Profile not found",
            )
        return profile

    def get_me(self, session: Session, caller_id: uuid.UUID) -> Profile:
        """Return the caller's profile."""
        profile = self._get_profile(session, caller_id)
        self.policy.authorize(session, caller_id, Operation.READ, Profile, profile)
        return profile

    def update_me(
        self,
        session: Session,
        caller_id: uuid.UUID,
        payload: ProfileUpdate,
    ) -> Profile:
        """
        Partial update for profile edits.
        Only `full_name` is editable; email follows the identity.
        """
        profile = self._get_profile(session, caller_id)
        self.policy.authorize(session, caller_id, Operation.UPDATE, Profile, profile)

        if payload.full_name is not None:
            profile.full_name = payload.full_name

        return self.repo.update_profile(session, profile)

    def my_roles(self, session: Session, caller_id: uuid.UUID) -> MyRolesRead:
        visible = self.policy.read_filter(session, caller_id, RoleGrant)
        grants = self.repo.list_role_grants(session, visible)
        return MyRolesRead(
            roles=[RoleGrantRead.model_validate(g) for g in grants],
            is_admin=self.policy.is_admin(session, caller_id),
        )
