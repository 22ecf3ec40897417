from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.auth.identity import Identity
from app.core import security
from app.core.config import settings
from app.core.errors import InvalidTokenError, MissingTokenError
from app.core.security import (
    hash_password,
    issue_access_token,
    verify_access_token,
    verify_password,
)
from app.models.tenant import TenantId


def _identity(tenant: TenantId = TenantId.SEWING) -> Identity:
    return Identity.for_user(tenant, 7, "Maker@Example.com")


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def test_hash_is_salted_and_verifies():
    h1 = hash_password("Stitch-In-Time-9")
    h2 = hash_password("Stitch-In-Time-9")

    assert h1 != h2
    assert h1.startswith("$argon2")
    assert verify_password("Stitch-In-Time-9", h1)
    assert verify_password("Stitch-In-Time-9", h2)
    assert not verify_password("stitch-in-time-9", h1)


def test_verify_password_rejects_malformed_hashes():
    assert verify_password("anything", "not-a-real-hash") is False
    assert verify_password("anything", "") is False
    assert verify_password("anything", None) is False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def test_issue_and_verify_round_trip():
    issued = issue_access_token(_identity(TenantId.UPHOLSTERY))

    identity = verify_access_token(issued.access_token)

    assert identity.unified_id == "upholstery:7"
    assert identity.email == "maker@example.com"
    assert identity.tenant is TenantId.UPHOLSTERY
    assert identity.expires_at == issued.identity.expires_at
    assert identity.expires_at - identity.issued_at == timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def test_token_with_one_second_ttl_expires():
    issued_at = datetime.now(timezone.utc) - timedelta(seconds=5)
    issued = issue_access_token(_identity(), ttl=timedelta(seconds=1), now=issued_at)

    with pytest.raises(InvalidTokenError) as exc_info:
        verify_access_token(issued.access_token)
    assert exc_info.value.status_code == 403


@pytest.mark.parametrize("token", [None, "", "   "])
def test_missing_token(token):
    with pytest.raises(MissingTokenError):
        verify_access_token(token)


def test_tampered_token_is_invalid():
    token = issue_access_token(_identity()).access_token
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[:-4] + ("AAAA" if not signature.endswith("AAAA") else "BBBB")])

    with pytest.raises(InvalidTokenError):
        verify_access_token(tampered)


def test_token_signed_with_other_key_is_invalid():
    now = int(datetime.now(timezone.utc).timestamp())
    forged = jwt.encode(
        {
            "sub": "maker@example.com",
            "uid": "sewing:7",
            "tenant": "sewing",
            "purpose": "access",
            "scheme": security.TOKEN_SCHEME,
            "iss": settings.JWT_ISSUER,
            "iat": now,
            "exp": now + 600,
        },
        "some-other-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        verify_access_token(forged)


def test_provider_issued_token_does_not_validate():
    """A token shaped like a tenant identity-provider token is rejected even with our key."""
    now = int(datetime.now(timezone.utc).timestamp())
    provider_token = jwt.encode(
        {
            "sub": "c0ffee-uuid",
            "email": "maker@example.com",
            "role": "authenticated",
            "iss": "https://sewing.example.supabase.co/auth/v1",
            "iat": now,
            "exp": now + 600,
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidTokenError):
        verify_access_token(provider_token)


def test_wrong_scheme_tag_is_invalid():
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode(
        {
            "sub": "maker@example.com",
            "uid": "sewing:7",
            "tenant": "sewing",
            "purpose": "access",
            "scheme": "provider",
            "iss": settings.JWT_ISSUER,
            "iat": now,
            "exp": now + 600,
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidTokenError):
        verify_access_token(token)


def test_unknown_tenant_claim_is_invalid():
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode(
        {
            "sub": "maker@example.com",
            "uid": "knitting:7",
            "tenant": "knitting",
            "purpose": "access",
            "scheme": security.TOKEN_SCHEME,
            "iss": settings.JWT_ISSUER,
            "iat": now,
            "exp": now + 600,
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidTokenError):
        verify_access_token(token)


def test_issue_requires_secret(monkeypatch):
    monkeypatch.setattr(security.settings, "JWT_SECRET", "")

    with pytest.raises(RuntimeError):
        issue_access_token(_identity())
