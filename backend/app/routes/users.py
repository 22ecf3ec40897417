from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from app.auth.identity import Identity
from app.dependencies.auth import get_current_identity
from app.schemas.auth import MessageOut
from app.schemas.user import ChangePasswordIn, ProfileOut
from app.services.auth_resolver import AuthResolver
from app.services.tenants import get_auth_resolver

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ProfileOut)
def get_me(
    identity: Identity = Depends(get_current_identity),
    resolver: AuthResolver = Depends(get_auth_resolver),
):
    return resolver.get_profile(identity)


@router.patch("/me", response_model=ProfileOut)
def update_me(
    changes: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_current_identity),
    resolver: AuthResolver = Depends(get_auth_resolver),
):
    # Raw body on purpose: immutable fields get a specific error instead of "extra field".
    return resolver.update_profile(identity, changes)


@router.post("/me/change-password", response_model=MessageOut)
def change_password(
    payload: ChangePasswordIn,
    identity: Identity = Depends(get_current_identity),
    resolver: AuthResolver = Depends(get_auth_resolver),
):
    resolver.change_password(identity, payload.current_password, payload.new_password)
    return {"message": "Password updated. Please log in again."}
