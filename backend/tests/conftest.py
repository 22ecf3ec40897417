import os
from datetime import datetime, timezone

# Ensure JWT_SECRET exists before importing app.main (it calls require_jwt_secret() at import time).
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
# Cheapest argon2 cost; hashing runs on every login attempt in these tests.
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.core.base import Base
from app.core.database import build_session_factory
from app.core.security import hash_password
from app.models.tenant import TenantId
from app.models.user import User
from app.services.auth_resolver import AuthResolver
from app.services.candidates import CandidateDirectory
from app.services.enrichment import EnrichmentPipeline
from app.services.geocoding import GeoResult, normalize_postcode
from app.services.tenant_store import TenantStore, TENANT_SCHEMAS
from app.services.tenants import get_auth_resolver, get_candidate_directory

DEFAULT_PASSWORD = "Correct-Horse-42"


def _memory_engine():
    # In-memory SQLite for fast, isolated tests.
    return create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def tenant_engines():
    engines = {tenant: _memory_engine() for tenant in TenantId}
    for engine in engines.values():
        Base.metadata.create_all(bind=engine)
    yield engines
    for engine in engines.values():
        engine.dispose()


@pytest.fixture()
def session_factories(tenant_engines):
    return {tenant: build_session_factory(engine) for tenant, engine in tenant_engines.items()}


@pytest.fixture()
def stores(session_factories):
    return {tenant: TenantStore(tenant, factory) for tenant, factory in session_factories.items()}


@pytest.fixture()
def add_user(session_factories):
    """
    Insert a user into one tenant's users table.

    Usage:
        add_user(TenantId.SEWING, "a@example.com", password="...", is_active=False)
    """

    def _add_user(tenant: TenantId, email: str, *, password: str = DEFAULT_PASSWORD, **fields) -> User:
        with session_factories[tenant]() as db:
            user = User(
                email=email.strip().lower(),
                password_hash=hash_password(password),
                is_active=fields.pop("is_active", True),
                created_at=datetime.now(timezone.utc),
                updated_at=datetime.now(timezone.utc),
                **fields,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user

    return _add_user


@pytest.fixture()
def add_candidate(session_factories):
    """
    Insert a public candidate row (and optionally its private postcode row).
    """

    def _add_candidate(tenant: TenantId, candidate_id: str, *, postcode: str | None = None, **columns):
        schema = TENANT_SCHEMAS[tenant]
        with session_factories[tenant]() as db:
            row = schema.public_model(candidate_id=candidate_id, **columns)
            db.add(row)
            if postcode is not None:
                db.add(schema.private_model(candidate_id=candidate_id, postcode=postcode))
            db.commit()
            db.refresh(row)
            return row

    return _add_candidate


class FakeGeocoder:
    """In-process stand-in for PostcodeGeocoder; records every lookup."""

    def __init__(self, known: dict[str, GeoResult] | None = None, failing: set[str] | None = None) -> None:
        self.known = {normalize_postcode(k): v for k, v in (known or {}).items()}
        self.failing = {normalize_postcode(p) for p in (failing or set())}
        self.calls: list[str] = []

    def lookup(self, postcode):
        clean = normalize_postcode(postcode)
        self.calls.append(clean)
        if clean in self.failing:
            raise RuntimeError("geocoder exploded")
        return self.known.get(clean)


@pytest.fixture()
def geocoder():
    return FakeGeocoder(
        known={
            "SW1A 1AA": GeoResult(latitude=51.501009, longitude=-0.141588, district_code="SW1A"),
            "M1 1AE": GeoResult(latitude=53.481, longitude=-2.2374, district_code="M1"),
            "LS1 4DY": GeoResult(latitude=53.7997, longitude=-1.5492, district_code="LS1"),
        }
    )


@pytest.fixture()
def resolver(stores):
    return AuthResolver(stores)


@pytest.fixture()
def directory(stores, geocoder):
    return CandidateDirectory(stores, EnrichmentPipeline(geocoder, max_workers=4, budget_seconds=5.0))


@pytest.fixture()
def app(resolver, directory):
    import app.main as main

    fastapi_app = main.app
    fastapi_app.dependency_overrides[get_auth_resolver] = lambda: resolver
    fastapi_app.dependency_overrides[get_candidate_directory] = lambda: directory
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def login(client):
    """Log in through the API and return the bearer header for the session."""

    def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['access_token']}"}

    return _login
