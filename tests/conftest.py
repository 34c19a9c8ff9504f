"""Shared fixtures: a fresh SQLite database per test and a wired TestClient."""

import os
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Settings are read at import time; these must be set before `app` is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from app.core.identity_provider import ExternalIdentity, get_identity_provider
from app.database import build_engine, create_db_and_tables, get_session
from app.main import app
from app.models.sweet import Sweet
from app.repositories.user_repo import UserRepository
from app.scripts.grant_admin import grant_admin
from app.services.provisioning_service import ProvisioningService

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


class FakeIdentityProvider:
    """Stands in for Supabase Auth admin calls."""

    def __init__(self):
        self.created: list[ExternalIdentity] = []
        self.deleted: list[uuid.UUID] = []

    def create_identity(self, email, password, full_name=None):
        identity = ExternalIdentity(
            id=uuid.uuid4(),
            email=email,
            metadata={"full_name": full_name} if full_name else {},
        )
        self.created.append(identity)
        return identity

    def delete_identity(self, identity_id):
        self.deleted.append(identity_id)


def make_token(identity_id: uuid.UUID, email: str, full_name: str | None = None) -> str:
    claims = {
        "sub": str(identity_id),
        "email": email,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "user_metadata": {"full_name": full_name} if full_name else {},
    }
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def auth_headers(identity_id: uuid.UUID, email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(identity_id, email)}"}


@pytest.fixture
def token_for():
    return make_token


@pytest.fixture
def engine(tmp_path):
    db_engine = build_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    create_db_and_tables(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(engine, provider):
    def _get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_identity_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def provisioning():
    return ProvisioningService(UserRepository())


@pytest.fixture
def customer(session, provisioning):
    identity = provisioning.provision(
        session, uuid.uuid4(), "carol@sweetshop.io", {"full_name": "Carol"}
    )
    return identity.id, auth_headers(identity.id, identity.email)


@pytest.fixture
def other_customer(session, provisioning):
    identity = provisioning.provision(session, uuid.uuid4(), "bob@sweetshop.io")
    return identity.id, auth_headers(identity.id, identity.email)


@pytest.fixture
def admin(session, provisioning):
    identity = provisioning.provision(session, uuid.uuid4(), "ada@sweetshop.io")
    grant_admin(session, identity.email)
    return identity.id, auth_headers(identity.id, identity.email)


@pytest.fixture
def make_sweet(session):
    def _make(name="Lemon Drops", category="Hard Candy", price="3.49", quantity=1,
              description=None):
        sweet = Sweet(
            name=name,
            category=category,
            price=Decimal(price),
            quantity=quantity,
            description=description,
            image_url="/placeholder.svg",
        )
        session.add(sweet)
        session.commit()
        session.refresh(sweet)
        return sweet

    return _make
