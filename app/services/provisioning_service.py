# app/services/provisioning_service.py
import logging
import uuid
from typing import Any

from sqlmodel import Session

from app.models.user import FULL_NAME_MAX_LENGTH, AppRole, Identity, Profile, RoleGrant
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


def _display_name(metadata: dict[str, Any] | None) -> str:
    # Token metadata is untrusted: trimmed and capped to the column length.
    name = (metadata or {}).get("full_name")
    if not isinstance(name, str):
        return ""
    return name.strip()[:FULL_NAME_MAX_LENGTH]


class ProvisioningService:
    """
    Establishes the per-identity invariants.

    For a new identity, in one transaction:
      - the local Identity row
      - exactly one Profile (email copied, full_name defaulted to "")
      - exactly one RoleGrant with role "user"

    This is the only code path that creates Profiles or initial role
    grants. Either all three rows persist or none do.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def provision(
        self,
        session: Session,
        identity_id: uuid.UUID,
        email: str,
        metadata: dict[str, Any] | None = None,
    ) -> Identity:
        """
        Create identity + profile + default role grant and commit.

        Idempotent: an identity that already exists is returned as-is.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: if any insert fails; the
            transaction is rolled back before re-raising.
        """
        existing = self.repo.get_identity(session, identity_id)
        if existing is not None:
            return existing

        full_name = _display_name(metadata)

        try:
            identity = self.repo.add_identity(
                session, Identity(id=identity_id, email=email)
            )
            self.repo.add_profile(
                session,
                Profile(id=identity_id, email=email, full_name=full_name),
            )
            self.repo.add_role_grant(
                session,
                RoleGrant(user_id=identity_id, role=AppRole.user),
            )
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Provisioning failed for identity %s", identity_id)
            raise

        session.refresh(identity)
        logger.info("Provisioned identity %s (%s)", identity_id, email)
        return identity
