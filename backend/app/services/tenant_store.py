# app/services/tenant_store.py
"""
Tenant store: one handle per tenant database.

Responsibilities:
- Credential/profile lookup and update keyed by (case-insensitive) email
- Candidate lookup/listing from the tenant's public table
- Postcode lookup from the tenant's private table (only consumed by enrichment)
- Mapping backend failures to UpstreamUnavailableError

Handles are long-lived and safe to share between requests: every call opens
its own short-lived session.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import NotFoundError, UpstreamUnavailableError
from app.models.candidate import (
    SewingCandidate,
    SewingCandidatePrivate,
    UpholsteryCandidate,
    UpholsteryCandidatePrivate,
)
from app.models.tenant import TenantId
from app.models.user import User

logger = logging.getLogger(__name__)

RawCandidate = dict[str, Any]


@dataclass(frozen=True)
class TenantSchema:
    public_model: type
    private_model: type


TENANT_SCHEMAS: dict[TenantId, TenantSchema] = {
    TenantId.SEWING: TenantSchema(SewingCandidate, SewingCandidatePrivate),
    TenantId.UPHOLSTERY: TenantSchema(UpholsteryCandidate, UpholsteryCandidatePrivate),
}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _row_to_dict(row: Any) -> RawCandidate:
    return {attr.key: getattr(row, attr.key) for attr in sa_inspect(row).mapper.column_attrs}


class TenantStore:
    def __init__(self, tenant: TenantId, session_factory: sessionmaker[Session]) -> None:
        self.tenant = tenant
        self._session_factory = session_factory
        self._schema = TENANT_SCHEMAS[tenant]

    def __repr__(self) -> str:
        return f"TenantStore(tenant={self.tenant.value!r})"

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Tenant store %s failed", self.tenant.value)
            raise UpstreamUnavailableError(f"The {self.tenant.value} store is unavailable") from exc
        finally:
            db.close()

    # -------------------------
    # Credentials / profiles
    # -------------------------
    def find_by_email(self, email: str, *, active_only: bool = True) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        with self._session() as db:
            query = db.query(User).filter(User.email == normalized)
            if active_only:
                query = query.filter(User.is_active.is_(True))
            return query.first()

    def update(self, email: str, values: dict[str, Any]) -> User:
        normalized = normalize_email(email)
        with self._session() as db:
            user = db.query(User).filter(User.email == normalized).first()
            if not user:
                raise NotFoundError("Profile not found")
            for key, value in values.items():
                setattr(user, key, value)
            user.updated_at = datetime.now(timezone.utc)
            db.add(user)
            db.commit()
            db.refresh(user)
            return user

    def touch_last_login(self, email: str) -> None:
        now = datetime.now(timezone.utc)
        with self._session() as db:
            (
                db.query(User)
                .filter(User.email == normalize_email(email))
                .update({User.last_login_at: now}, synchronize_session=False)
            )
            db.commit()

    # -------------------------
    # Candidates
    # -------------------------
    def list_active(self) -> list[RawCandidate]:
        model = self._schema.public_model
        with self._session() as db:
            rows = (
                db.query(model)
                .filter(model.is_active.is_(True))
                .order_by(model.created_at.desc(), model.id.desc())
                .all()
            )
            return [_row_to_dict(r) for r in rows]

    def find_by_candidate_id(self, candidate_id: str) -> RawCandidate | None:
        model = self._schema.public_model
        with self._session() as db:
            row = (
                db.query(model)
                .filter(model.candidate_id == candidate_id, model.is_active.is_(True))
                .first()
            )
            return _row_to_dict(row) if row else None

    def postcodes_by_candidate_id(self, candidate_ids: Iterable[str]) -> dict[str, str]:
        ids = [c for c in dict.fromkeys(candidate_ids) if c]
        if not ids:
            return {}
        model = self._schema.private_model
        with self._session() as db:
            rows = (
                db.query(model.candidate_id, model.postcode)
                .filter(model.candidate_id.in_(ids))
                .all()
            )
            return {cid: postcode for cid, postcode in rows if postcode}
