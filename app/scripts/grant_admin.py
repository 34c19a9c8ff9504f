"""
Grant Admin Script
Out-of-band promotion of an existing account to the admin role.
There is no API for this on purpose; run it with database access:

    python -m app.scripts.grant_admin someone@example.com
"""

import argparse
import logging
import sys

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.database import engine
from app.models.user import AppRole, RoleGrant
from app.repositories.user_repo import UserRepository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class UnknownIdentity(Exception):
    pass


def grant_admin(session: Session, email: str) -> RoleGrant:
    """
    Give the identity registered under `email` the admin role.

    Idempotent: an existing admin grant is returned unchanged.
    """
    repo = UserRepository()
    identity = repo.get_identity_by_email(session, email)
    if identity is None:
        raise UnknownIdentity(f"No identity registered for {email}")

    existing = repo.get_role_grant(session, identity.id, AppRole.admin)
    if existing is not None:
        logger.info("%s is already an admin", email)
        return existing

    grant = repo.add_role_grant(
        session, RoleGrant(user_id=identity.id, role=AppRole.admin)
    )
    session.commit()
    session.refresh(grant)
    logger.info("Granted admin to %s", email)
    return grant


def main(argv: list[str] | None = None, bind: Engine | None = None) -> int:
    parser = argparse.ArgumentParser(description="Grant the admin role to an account")
    parser.add_argument("email", help="email of an already registered account")
    args = parser.parse_args(argv)

    with Session(bind or engine) as session:
        try:
            grant_admin(session, args.email)
        except UnknownIdentity as e:
            logger.error("%s", e)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
