# app/core/identity_provider.py
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from app.core.supabase_client import supabase_admin

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Supabase Auth refused or failed an admin operation."""


@dataclass
class ExternalIdentity:
    """The subset of a Supabase auth user the backend cares about."""

    id: uuid.UUID
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)


class SupabaseIdentityProvider:
    """
    Thin wrapper over the Supabase Auth admin API.

    Only registration uses it; regular sign-in happens between the
    frontend and Supabase, and the backend only sees the resulting JWT.
    """

    def create_identity(
        self,
        email: str,
        password: str,
        full_name: str | None = None,
    ) -> ExternalIdentity:
        metadata = {"full_name": full_name} if full_name else {}
        try:
            response = supabase_admin().auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata,
                }
            )
        except Exception as exc:
            logger.warning("Supabase rejected registration for %s: %s", email, exc)
            raise IdentityProviderError(str(exc)) from exc

        user = response.user
        return ExternalIdentity(
            id=uuid.UUID(str(user.id)),
            email=user.email or email,
            metadata=dict(user.user_metadata or {}),
        )

    def delete_identity(self, identity_id: uuid.UUID) -> None:
        try:
            supabase_admin().auth.admin.delete_user(str(identity_id))
        except Exception as exc:
            raise IdentityProviderError(str(exc)) from exc


def get_identity_provider() -> SupabaseIdentityProvider:
    """FastAPI dependency; tests override it with a fake."""
    return SupabaseIdentityProvider()
