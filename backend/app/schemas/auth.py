# app/schemas/auth.py
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class IdentityOut(BaseModel):
    unified_id: str
    email: str
    tenant: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: IdentityOut


class MessageOut(BaseModel):
    message: str
