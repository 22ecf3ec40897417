# app/dependencies/auth.py
from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.identity import Identity
from app.core.errors import MissingTokenError
from app.core.security import verify_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """
    Validates:
      - Authorization: Bearer <token>   (absent -> 401)
      - token signature, issuer, scheme, exp   (bad -> 403)
    Returns:
      - Identity rebuilt from the token (no store access)
    """
    if not creds or creds.scheme.lower() != "bearer":
        raise MissingTokenError()
    return verify_access_token(creds.credentials)
