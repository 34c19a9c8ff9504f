"""Tests for identity provisioning, registration and admin promotion."""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.identity_provider import IdentityProviderError
from app.models.user import FULL_NAME_MAX_LENGTH, AppRole, Identity, Profile, RoleGrant
from app.repositories.user_repo import UserRepository
from app.routers import auth as auth_router
from app.scripts.grant_admin import UnknownIdentity, grant_admin
from app.scripts.grant_admin import main as grant_admin_main
from app.services.provisioning_service import ProvisioningService

API = "/api/v1"


def _rows(engine, model, **filters):
    with Session(engine) as s:
        stmt = select(model)
        for name, value in filters.items():
            stmt = stmt.where(getattr(model, name) == value)
        return s.exec(stmt).all()


class FailingRoleRepository(UserRepository):
    def add_role_grant(self, session, grant):
        raise IntegrityError("INSERT INTO user_roles", {}, Exception("boom"))


class TestProvisioningService:
    def test_creates_profile_and_user_grant(self, engine, session, provisioning):
        identity_id = uuid.uuid4()

        provisioning.provision(session, identity_id, "dana@sweetshop.io", {"full_name": "Dana"})

        profiles = _rows(engine, Profile, id=identity_id)
        grants = _rows(engine, RoleGrant, user_id=identity_id)
        assert len(profiles) == 1
        assert profiles[0].email == "dana@sweetshop.io"
        assert profiles[0].full_name == "Dana"
        assert [g.role for g in grants] == [AppRole.user]

    def test_full_name_defaults_to_empty_string(self, engine, session, provisioning):
        identity_id = uuid.uuid4()

        provisioning.provision(session, identity_id, "eve@sweetshop.io")

        assert _rows(engine, Profile, id=identity_id)[0].full_name == ""

    def test_metadata_name_is_trimmed_and_capped(self, engine, session, provisioning):
        identity_id = uuid.uuid4()

        provisioning.provision(
            session, identity_id, "kim@sweetshop.io", {"full_name": "  " + "K" * 500}
        )

        assert _rows(engine, Profile, id=identity_id)[0].full_name == "K" * FULL_NAME_MAX_LENGTH

    def test_non_string_metadata_name_is_ignored(self, engine, session, provisioning):
        identity_id = uuid.uuid4()

        provisioning.provision(session, identity_id, "lee@sweetshop.io", {"full_name": 42})

        assert _rows(engine, Profile, id=identity_id)[0].full_name == ""

    def test_is_idempotent(self, engine, session, provisioning):
        identity_id = uuid.uuid4()

        first = provisioning.provision(session, identity_id, "finn@sweetshop.io")
        second = provisioning.provision(session, identity_id, "finn@sweetshop.io")

        assert first.id == second.id
        assert len(_rows(engine, Profile, id=identity_id)) == 1
        assert len(_rows(engine, RoleGrant, user_id=identity_id)) == 1

    def test_failure_leaves_nothing_behind(self, engine, session):
        service = ProvisioningService(FailingRoleRepository())
        identity_id = uuid.uuid4()

        with pytest.raises(IntegrityError):
            service.provision(session, identity_id, "gus@sweetshop.io")

        assert _rows(engine, Identity, id=identity_id) == []
        assert _rows(engine, Profile, id=identity_id) == []
        assert _rows(engine, RoleGrant, user_id=identity_id) == []


class TestRegistrationEndpoint:
    def test_register_provisions_profile_and_role(self, client, engine, provider):
        resp = client.post(
            f"{API}/auth/register",
            json={"email": "hana@sweetshop.io", "password": "s3cret!", "full_name": "Hana"},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "hana@sweetshop.io"
        assert body["full_name"] == "Hana"

        identity_id = provider.created[0].id
        assert len(_rows(engine, Profile, id=identity_id)) == 1
        grants = _rows(engine, RoleGrant, user_id=identity_id)
        assert [g.role for g in grants] == [AppRole.user]

    def test_duplicate_email_is_rejected(self, client, customer, provider):
        resp = client.post(
            f"{API}/auth/register",
            json={"email": "carol@sweetshop.io", "password": "s3cret!"},
        )

        assert resp.status_code == 409
        assert provider.created == []

    def test_provisioning_failure_deletes_auth_user(self, client, engine, provider, monkeypatch):
        def fail(*args, **kwargs):
            raise IntegrityError("INSERT INTO profiles", {}, Exception("boom"))

        monkeypatch.setattr(auth_router.provisioning, "provision", fail)

        resp = client.post(
            f"{API}/auth/register",
            json={"email": "ivan@sweetshop.io", "password": "s3cret!"},
        )

        assert resp.status_code == 500
        assert provider.deleted == [provider.created[0].id]
        assert _rows(engine, Identity, email="ivan@sweetshop.io") == []

    def test_failed_cleanup_still_returns_json_error(self, client, engine, provider, monkeypatch):
        def fail(*args, **kwargs):
            raise IntegrityError("INSERT INTO profiles", {}, Exception("boom"))

        def delete_fails(identity_id):
            raise IdentityProviderError("auth admin unavailable")

        monkeypatch.setattr(auth_router.provisioning, "provision", fail)
        monkeypatch.setattr(provider, "delete_identity", delete_fails)

        resp = client.post(
            f"{API}/auth/register",
            json={"email": "ivan@sweetshop.io", "password": "s3cret!"},
        )

        assert resp.status_code == 500
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.json()["detail"] == "Registration failed"
        assert _rows(engine, Identity, email="ivan@sweetshop.io") == []

    def test_invalid_email_is_rejected(self, client, provider):
        resp = client.post(
            f"{API}/auth/register",
            json={"email": "not-an-email", "password": "s3cret!"},
        )

        assert resp.status_code == 422
        assert provider.created == []


class TestFirstRequestProvisioning:
    def test_unknown_token_identity_is_provisioned(self, client, engine, token_for):
        identity_id = uuid.uuid4()
        token = token_for(identity_id, "jo@sweetshop.io", full_name="Jo")

        resp = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Jo"
        assert len(_rows(engine, RoleGrant, user_id=identity_id)) == 1

    def test_overlong_token_name_does_not_lock_user_out(self, client, token_for):
        token = token_for(uuid.uuid4(), "max@sweetshop.io", full_name="M" * 300)
        headers = {"Authorization": f"Bearer {token}"}

        first = client.get(f"{API}/users/me", headers=headers)
        second = client.get(f"{API}/users/me", headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert len(first.json()["full_name"]) == FULL_NAME_MAX_LENGTH

    def test_invalid_token_is_rejected(self, client):
        resp = client.get(f"{API}/users/me", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_missing_token_is_rejected(self, client):
        assert client.get(f"{API}/users/me").status_code == 401


class TestGrantAdmin:
    def test_grant_is_idempotent(self, engine, session, customer):
        customer_id, _ = customer

        first = grant_admin(session, "carol@sweetshop.io")
        second = grant_admin(session, "carol@sweetshop.io")

        assert first.id == second.id
        roles = sorted(g.role.value for g in _rows(engine, RoleGrant, user_id=customer_id))
        assert roles == ["admin", "user"]

    def test_unknown_email(self, session):
        with pytest.raises(UnknownIdentity):
            grant_admin(session, "nobody@sweetshop.io")

    def test_main_exit_codes(self, engine, customer):
        assert grant_admin_main(["carol@sweetshop.io"], bind=engine) == 0
        assert grant_admin_main(["nobody@sweetshop.io"], bind=engine) == 1
