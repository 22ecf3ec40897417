# app/routes/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.schemas.auth import LoginIn, TokenOut
from app.services.auth_resolver import AuthResolver
from app.services.tenants import get_auth_resolver

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, resolver: AuthResolver = Depends(get_auth_resolver)):
    result = resolver.login(payload.email, payload.password)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
        "identity": result.identity.to_summary(),
    }
