# app/auth/identity.py
"""
Canonical authenticated identity model.

An Identity is built by the auth resolver after a successful login,
embedded in the access token, and rebuilt from the token on every
protected request. It is never persisted anywhere else.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.models.tenant import TenantId


@dataclass(frozen=True)
class Identity:
    """
    Attributes:
        unified_id: Tenant-qualified user id, ``"<tenant>:<row id>"``. Unique
                    across both tenants even though row ids are not.
        email: Normalized (lower-cased) email; the lookup key inside the tenant.
        tenant: Which tenant store authenticated this user.
        issued_at / expires_at: Token lifetime, when known.
    """

    unified_id: str
    email: str
    tenant: TenantId
    issued_at: datetime | None = None
    expires_at: datetime | None = None

    @classmethod
    def for_user(cls, tenant: TenantId, user_id: int | str, email: str) -> Identity:
        return cls(
            unified_id=f"{tenant.value}:{user_id}",
            email=email.strip().lower(),
            tenant=tenant,
        )

    def with_lifetime(self, issued_at: datetime, expires_at: datetime) -> Identity:
        return Identity(
            unified_id=self.unified_id,
            email=self.email,
            tenant=self.tenant,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def to_summary(self) -> dict[str, Any]:
        """Safe subset returned to clients alongside a token."""
        return {
            "unified_id": self.unified_id,
            "email": self.email,
            "tenant": self.tenant.value,
            "issued_at": self.issued_at,
            "expires_at": self.expires_at,
        }
