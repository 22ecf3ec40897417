# app/services/auth_resolver.py
"""
Federated login across tenant credential stores.

Responsibilities:
- Try each tenant store in the declared priority order until one yields a
  matching active credential
- Keep failures uniform: unknown email, inactive account and wrong password
  all raise the same InvalidCredentialsError
- Keep infrastructure failures distinct: if no tenant matched and a store
  could not be reached, raise UpstreamUnavailableError instead
- Profile read/update and password change for an authenticated identity
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from app.auth.identity import Identity
from app.core.errors import (
    InvalidCredentialsError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from app.core.password_policy import ensure_strong_password
from app.core.security import (
    IssuedToken,
    burn_password_check,
    hash_password,
    issue_access_token,
    verify_password,
)
from app.models.tenant import TENANT_PRIORITY, TenantId
from app.models.user import User
from app.schemas.user import IMMUTABLE_PROFILE_FIELDS, ProfileOut, ProfileUpdateIn
from app.services.tenant_store import TenantStore, normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    identity: Identity


def profile_from_user(user: User, tenant: TenantId) -> ProfileOut:
    return ProfileOut.model_validate(
        {
            "id": user.id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "phone": user.phone,
            "candidate_id": user.candidate_id,
            "tenant": tenant.value,
            "is_active": bool(user.is_active),
            "last_login_at": user.last_login_at,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }
    )


class AuthResolver:
    def __init__(
        self,
        stores: Mapping[TenantId, TenantStore],
        priority: Sequence[TenantId] = TENANT_PRIORITY,
    ) -> None:
        missing = [t.value for t in priority if t not in stores]
        if missing:
            raise ValueError(f"No tenant store configured for: {', '.join(missing)}")
        self._stores = dict(stores)
        self._priority = tuple(priority)

    @property
    def priority(self) -> tuple[TenantId, ...]:
        return self._priority

    def store_for(self, tenant: TenantId) -> TenantStore:
        try:
            return self._stores[tenant]
        except KeyError:
            raise NotFoundError("Unknown tenant")

    # -------------------------
    # Login
    # -------------------------
    def login(self, email: str, password: str) -> LoginResult:
        normalized = normalize_email(email)
        if not normalized or not password:
            raise ValidationError("Email and password are required")

        unreachable: list[TenantId] = []
        for tenant in self._priority:
            store = self._stores[tenant]
            try:
                user = store.find_by_email(normalized)
            except UpstreamUnavailableError:
                unreachable.append(tenant)
                continue

            if user is None:
                burn_password_check(password)
                logger.debug("Login: no active account in tenant=%s", tenant.value)
                continue

            if not verify_password(password, user.password_hash):
                # Stop matching in this tenant, keep resolving in the next one.
                logger.debug("Login: password mismatch in tenant=%s", tenant.value)
                continue

            return self._complete_login(store, user)

        if unreachable:
            logger.error(
                "Login could not be resolved; unreachable tenants: %s",
                ", ".join(t.value for t in unreachable),
            )
            raise UpstreamUnavailableError("Authentication is temporarily unavailable")

        raise InvalidCredentialsError()

    def _complete_login(self, store: TenantStore, user: User) -> LoginResult:
        try:
            store.touch_last_login(user.email)
        except UpstreamUnavailableError:
            logger.warning("Could not record last login for tenant=%s user_id=%s", store.tenant.value, user.id)

        issued: IssuedToken = issue_access_token(Identity.for_user(store.tenant, user.id, user.email))
        logger.info("Login succeeded: %s", issued.identity.unified_id)
        return LoginResult(access_token=issued.access_token, identity=issued.identity)

    # -------------------------
    # Profile
    # -------------------------
    def _require_user(self, identity: Identity) -> User:
        user = self.store_for(identity.tenant).find_by_email(identity.email)
        if user is None:
            raise NotFoundError("Profile not found")
        return user

    def get_profile(self, identity: Identity) -> ProfileOut:
        return profile_from_user(self._require_user(identity), identity.tenant)

    def update_profile(self, identity: Identity, changes: Mapping[str, Any]) -> ProfileOut:
        blocked = sorted(IMMUTABLE_PROFILE_FIELDS.intersection(changes))
        if blocked:
            raise ValidationError(
                "These fields cannot be modified",
                details={"fields": blocked},
            )

        try:
            payload = ProfileUpdateIn.model_validate(dict(changes))
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid profile update",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            )

        values = payload.model_dump(exclude_unset=True)
        self._require_user(identity)
        if not values:
            return self.get_profile(identity)

        user = self.store_for(identity.tenant).update(identity.email, values)
        return profile_from_user(user, identity.tenant)

    def change_password(self, identity: Identity, current_password: str, new_password: str) -> None:
        user = self._require_user(identity)

        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        if current_password == new_password:
            raise ValidationError("New password must be different from current password")

        ensure_strong_password(new_password, email=user.email)

        self.store_for(identity.tenant).update(
            identity.email,
            {
                "password_hash": hash_password(new_password),
                "password_changed_at": datetime.now(timezone.utc),
            },
        )
        logger.info("Password changed: %s", identity.unified_id)
