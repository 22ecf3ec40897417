# app/core/security.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.auth.identity import Identity
from app.core.config import settings
from app.core.errors import InvalidTokenError, MissingTokenError
from app.models.tenant import TenantId

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=max(1, settings.PASSWORD_HASH_ROUNDS),
)

# Only self-issued tokens are accepted. Tokens minted by a tenant's own identity
# provider carry a different issuer/scheme and must never validate here.
TOKEN_SCHEME = "self-issued"
TOKEN_PURPOSE = "access"


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unknown or corrupted hash format.
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-timing")


def burn_password_check(password: str) -> None:
    """Spend the same work as a real verification when there is no account to check."""
    pwd_context.verify(password, _dummy_hash())


# -------------------------
# JWT helpers
# -------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_jwt_secret() -> None:
    if not settings.JWT_SECRET or not settings.JWT_SECRET.strip():
        raise RuntimeError("JWT_SECRET must be set (auth is required).")


@dataclass(frozen=True)
class IssuedToken:
    access_token: str
    identity: Identity


def issue_access_token(
    identity: Identity,
    ttl: timedelta | None = None,
    *,
    now: datetime | None = None,
) -> IssuedToken:
    """
    Access token used for API auth: Authorization: Bearer <token>
    Encodes unified id, email and tenant tag; signed with the process-wide secret.
    """
    _require_jwt_secret()

    # JWT timestamps have whole-second resolution.
    issued_at = (now or _now_utc()).replace(microsecond=0)
    expires_at = issued_at + (ttl if ttl is not None else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload = {
        "sub": identity.email,
        "uid": identity.unified_id,
        "tenant": identity.tenant.value,
        "purpose": TOKEN_PURPOSE,
        "scheme": TOKEN_SCHEME,
        "iss": settings.JWT_ISSUER,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return IssuedToken(access_token=token, identity=identity.with_lifetime(issued_at, expires_at))


def decode_token(token: str) -> dict[str, Any]:
    _require_jwt_secret()
    # Let callers decide how to handle JWTError
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        issuer=settings.JWT_ISSUER,
    )


def verify_access_token(token: str | None) -> Identity:
    """
    Rebuild the Identity carried by a token. Pure: no store access.

    Raises:
        MissingTokenError: no token supplied.
        InvalidTokenError: bad signature, expired, wrong issuer/scheme/purpose,
                           or a payload that does not describe an identity.
    """
    if token is None or not token.strip():
        raise MissingTokenError()

    try:
        payload = decode_token(token.strip())
    except ExpiredSignatureError:
        raise InvalidTokenError("Access token has expired")
    except JWTError:
        raise InvalidTokenError()

    if payload.get("scheme") != TOKEN_SCHEME or payload.get("purpose") != TOKEN_PURPOSE:
        raise InvalidTokenError()

    try:
        tenant = TenantId(payload.get("tenant"))
    except ValueError:
        raise InvalidTokenError()

    email = str(payload.get("sub") or "").strip().lower()
    unified_id = str(payload.get("uid") or "")
    if not email or not unified_id.startswith(f"{tenant.value}:"):
        raise InvalidTokenError()

    try:
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenError()

    return Identity(
        unified_id=unified_id,
        email=email,
        tenant=tenant,
        issued_at=issued_at,
        expires_at=expires_at,
    )
