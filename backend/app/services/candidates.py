from __future__ import annotations

import logging
from typing import Iterable, Mapping

from app.core.errors import NotFoundError, UpstreamUnavailableError
from app.models.tenant import TenantId
from app.schemas.candidate import UnifiedCandidate
from app.services.enrichment import EnrichmentPipeline
from app.services.normalizer import normalize_candidate, normalize_candidates
from app.services.tenant_store import TenantStore

logger = logging.getLogger(__name__)


class CandidateDirectory:
    """Tenant store query -> normalizer -> enrichment, for listings and single records."""

    def __init__(self, stores: Mapping[TenantId, TenantStore], pipeline: EnrichmentPipeline) -> None:
        self._stores = dict(stores)
        self._pipeline = pipeline

    def _store(self, tenant: TenantId) -> TenantStore:
        store = self._stores.get(tenant)
        if store is None:
            raise NotFoundError("Unknown tenant")
        return store

    def _postcodes(self, store: TenantStore, candidate_ids: Iterable[str]) -> dict[str, str]:
        # Postcodes only feed enrichment; without them records go out without coordinates.
        try:
            return store.postcodes_by_candidate_id(candidate_ids)
        except UpstreamUnavailableError as exc:
            logger.warning("Postcode lookup failed for tenant=%s; skipping enrichment: %s", store.tenant.value, exc)
            return {}

    def list_candidates(self, tenant: TenantId) -> list[UnifiedCandidate]:
        store = self._store(tenant)
        raws = store.list_active()
        if not raws:
            return []

        candidates = normalize_candidates(raws, tenant)
        # Postcodes stay in this scope; only the pipeline sees them.
        postcodes = self._postcodes(store, [c.candidate_id for c in candidates])
        enriched = self._pipeline.enrich(candidates, postcodes)

        logger.info("Listed %d %s candidates", len(enriched), tenant.value)
        return enriched

    def get_candidate(self, tenant: TenantId, candidate_id: str) -> UnifiedCandidate:
        store = self._store(tenant)
        raw = store.find_by_candidate_id(candidate_id)
        if raw is None:
            raise NotFoundError("Candidate not found")

        candidate = normalize_candidate(raw, tenant)
        postcode = self._postcodes(store, [candidate.candidate_id]).get(candidate.candidate_id)
        return self._pipeline.enrich_one(candidate, postcode)
