# app/repositories/user_repo.py
import uuid

from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, select

from app.models.user import AppRole, Identity, Profile, RoleGrant


class UserRepository:
    """
    Data access layer for Identity, Profile and RoleGrant.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic

    NOTE:
      - The add_* methods only flush. Provisioning writes three rows in
        one transaction and the service decides when to commit.
    """

    # ----- Identities -----

    def get_identity(self, session: Session, identity_id: uuid.UUID) -> Identity | None:
        """Return an Identity by primary key, or None if not found."""
        return session.get(Identity, identity_id)

    def get_identity_by_email(self, session: Session, email: str) -> Identity | None:
        """Return an Identity by unique email, or None if not found."""
        stmt = select(Identity).where(Identity.email == email)
        return session.exec(stmt).first()

    def add_identity(self, session: Session, identity: Identity) -> Identity:
        session.add(identity)
        session.flush()
        return identity

    # ----- Profiles -----

    def get_profile(self, session: Session, identity_id: uuid.UUID) -> Profile | None:
        return session.get(Profile, identity_id)

    def add_profile(self, session: Session, profile: Profile) -> Profile:
        session.add(profile)
        session.flush()
        return profile

    def update_profile(self, session: Session, profile: Profile) -> Profile:
        """Persist changes to an existing Profile (updated_at is always bumped)."""
        flag_modified(profile, "updated_at")
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    # ----- Role grants -----

    def add_role_grant(self, session: Session, grant: RoleGrant) -> RoleGrant:
        session.add(grant)
        session.flush()
        return grant

    def get_role_grant(
        self,
        session: Session,
        identity_id: uuid.UUID,
        role: AppRole,
    ) -> RoleGrant | None:
        stmt = (
            select(RoleGrant)
            .where(RoleGrant.user_id == identity_id)
            .where(RoleGrant.role == role)
        )
        return session.exec(stmt).first()

    def list_role_grants(
        self,
        session: Session,
        visible: ColumnElement[bool] | None = None,
    ) -> list[RoleGrant]:
        """
        List role grants, optionally restricted by a policy read filter.
        """
        stmt = select(RoleGrant).order_by(RoleGrant.created_at)
        if visible is not None:
            stmt = stmt.where(visible)
        return list(session.exec(stmt).all())
