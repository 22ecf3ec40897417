from __future__ import annotations

import logging
import re
import threading
from collections import OrderedDict
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from app.core.config import settings
from app.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_MISSING = object()


@dataclass(frozen=True)
class GeoResult:
    latitude: float
    longitude: float
    district_code: str


def normalize_postcode(postcode: str | None) -> str:
    return _WHITESPACE_RE.sub("", postcode or "").upper()


def _redact(postcode: str) -> str:
    # Keep roughly the district-sized prefix so logs never carry a full address code.
    return f"{postcode[:3]}***" if postcode else ""


class _LRUCache:
    """Thread-safe bounded mapping; the least recently used entry is evicted first."""

    def __init__(self, max_entries: int) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[str, GeoResult | None] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str):
        with self._lock:
            if key not in self._entries:
                return _MISSING
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: str, value: GeoResult | None) -> None:
        if self.max_entries <= 0:
            return
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class PostcodeGeocoder:
    """
    Resolve a postcode to coordinates and its district (outward) code via postcodes.io.

    ``lookup`` never raises: transport failures, timeouts and unusable responses
    come back as ``None``. Definitive answers (found / not found) are cached by
    normalized postcode; failures are not, so the next request retries.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        cache_size: int | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = (base_url or settings.POSTCODE_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GEOCODE_TIMEOUT_SECONDS
        self._client = client or httpx.Client(timeout=self.timeout)
        self._cache = _LRUCache(cache_size if cache_size is not None else settings.GEOCODE_CACHE_SIZE)

    def close(self) -> None:
        self._client.close()

    def lookup(self, postcode: str | None) -> GeoResult | None:
        clean = normalize_postcode(postcode)
        if not clean:
            return None

        cached = self._cache.get(clean)
        if cached is not _MISSING:
            return cached

        try:
            result = self._fetch(clean)
        except UpstreamUnavailableError as exc:
            logger.warning("Postcode lookup failed for %s: %s", _redact(clean), exc)
            return None

        self._cache.put(clean, result)
        return result

    def _fetch(self, clean: str) -> GeoResult | None:
        url = f"{self.base_url}/postcodes/{quote(clean, safe='')}"
        try:
            response = self._client.get(url, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError("Postcode service unreachable") from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 500:
            raise UpstreamUnavailableError(f"Postcode service returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("Invalid postcode service response") from exc

        if not isinstance(payload, dict) or payload.get("status") != 200:
            return None
        result = payload.get("result")
        if not isinstance(result, dict):
            return None

        latitude = result.get("latitude")
        longitude = result.get("longitude")
        district = result.get("outward_code")
        if latitude is None or longitude is None or not district:
            return None

        return GeoResult(latitude=float(latitude), longitude=float(longitude), district_code=str(district))
