# app/services/enrichment.py
"""
Best-effort geographic enrichment for a batch of unified candidates.

One geocoding lookup per candidate with a known postcode runs on a thread
pool; the batch is joined before returning. Each lookup writes only its own
output slot, so results keep the input order whatever the completion order.
A lookup that fails, finds nothing, or misses the batch budget leaves that
record without coordinates. Enrichment never fails the request.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Mapping, Protocol, Sequence

from app.core.config import settings
from app.schemas.candidate import Coordinates, UnifiedCandidate
from app.services.geocoding import GeoResult, normalize_postcode

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def lookup(self, postcode: str | None) -> GeoResult | None:
        ...


def apply_geo(candidate: UnifiedCandidate, geo: GeoResult | None) -> UnifiedCandidate:
    """Set coordinates and district from ``geo``; a missing result clears both."""
    if geo is None:
        if candidate.coordinates is None and candidate.postcode_district is None:
            return candidate
        return candidate.model_copy(update={"coordinates": None, "postcode_district": None})
    return candidate.model_copy(
        update={
            "coordinates": Coordinates(lat=geo.latitude, lon=geo.longitude),
            "postcode_district": geo.district_code,
        }
    )


class EnrichmentPipeline:
    def __init__(
        self,
        geocoder: Geocoder,
        *,
        max_workers: int | None = None,
        budget_seconds: float | None = None,
    ) -> None:
        self.geocoder = geocoder
        self.max_workers = max(1, max_workers or settings.ENRICHMENT_MAX_WORKERS)
        self.budget_seconds = budget_seconds if budget_seconds is not None else settings.ENRICHMENT_BUDGET_SECONDS

    def enrich(
        self,
        candidates: Sequence[UnifiedCandidate],
        postcode_by_candidate_id: Mapping[str, str],
    ) -> list[UnifiedCandidate]:
        # Start every slot cleared so stale geo data never survives a failed lookup.
        slots: list[UnifiedCandidate] = [apply_geo(c, None) for c in candidates]
        jobs: dict[int, str] = {}
        for index, candidate in enumerate(slots):
            postcode = normalize_postcode(postcode_by_candidate_id.get(candidate.candidate_id))
            if postcode:
                jobs[index] = postcode

        if not jobs:
            return slots

        started = time.monotonic()
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(jobs)),
            thread_name_prefix="enrich",
        )
        try:
            futures: dict[Future, int] = {
                executor.submit(self.geocoder.lookup, postcode): index for index, postcode in jobs.items()
            }
            done, not_done = wait(futures, timeout=self.budget_seconds)

            for future in done:
                index = futures[future]
                try:
                    geo = future.result()
                except Exception:
                    logger.exception("Geocoding lookup crashed for candidate %s", slots[index].candidate_id)
                    continue
                slots[index] = apply_geo(slots[index], geo)

            if not_done:
                logger.warning(
                    "Enrichment budget of %.1fs exhausted: %d of %d lookups left without coordinates",
                    self.budget_seconds,
                    len(not_done),
                    len(futures),
                )
        finally:
            # Do not wait on stragglers; their results are discarded.
            executor.shutdown(wait=False, cancel_futures=True)

        logger.debug("Enriched %d candidates in %.3fs", len(jobs), time.monotonic() - started)
        return slots

    def enrich_one(self, candidate: UnifiedCandidate, postcode: str | None) -> UnifiedCandidate:
        if not postcode:
            return apply_geo(candidate, None)
        return self.enrich([candidate], {candidate.candidate_id: postcode})[0]
