# app/models/tenant.py
from __future__ import annotations

from enum import Enum


class TenantId(str, Enum):
    SEWING = "sewing"
    UPHOLSTERY = "upholstery"


# Credential stores are tried in this order during login.
TENANT_PRIORITY: tuple[TenantId, ...] = (TenantId.SEWING, TenantId.UPHOLSTERY)
