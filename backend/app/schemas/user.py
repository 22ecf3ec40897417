from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Set at account creation; PATCH /users/me must never touch them.
IMMUTABLE_PROFILE_FIELDS = frozenset({"id", "email", "candidate_id", "created_at"})


class ProfileOut(BaseModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    candidate_id: str | None = None
    tenant: str
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateIn(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=40)

    model_config = ConfigDict(extra="forbid")


class ChangePasswordIn(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)
