# app/services/tenants.py
"""
Process-wide service handles.

Tenant stores, the geocoder and the services built on them are long-lived
and shared by all requests. Nothing is constructed at import time, so the
app (and the test suite) can start without tenant databases configured.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from app.core.config import settings
from app.core.database import build_engine, build_session_factory
from app.models.tenant import TENANT_PRIORITY, TenantId
from app.services.auth_resolver import AuthResolver
from app.services.candidates import CandidateDirectory
from app.services.enrichment import EnrichmentPipeline
from app.services.geocoding import PostcodeGeocoder
from app.services.tenant_store import TenantStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_tenant_stores() -> dict[TenantId, TenantStore]:
    stores: dict[TenantId, TenantStore] = {}
    for tenant in TENANT_PRIORITY:
        engine = build_engine(settings.database_url_for(tenant.value))
        stores[tenant] = TenantStore(tenant, build_session_factory(engine))
        logger.info("Tenant store initialized: %s", tenant.value)
    return stores


@lru_cache(maxsize=1)
def get_geocoder() -> PostcodeGeocoder:
    return PostcodeGeocoder()


@lru_cache(maxsize=1)
def get_auth_resolver() -> AuthResolver:
    return AuthResolver(get_tenant_stores())


@lru_cache(maxsize=1)
def get_candidate_directory() -> CandidateDirectory:
    return CandidateDirectory(get_tenant_stores(), EnrichmentPipeline(get_geocoder()))


def reset_services() -> None:
    """
    Test helper to ensure fresh handles are constructed after settings change.
    """
    if get_geocoder.cache_info().currsize:
        get_geocoder().close()
    for factory in (get_candidate_directory, get_auth_resolver, get_geocoder, get_tenant_stores):
        factory.cache_clear()
