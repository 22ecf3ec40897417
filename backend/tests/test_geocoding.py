from __future__ import annotations

import httpx
import pytest

from app.services.geocoding import GeoResult, PostcodeGeocoder, normalize_postcode

FOUND = {
    "status": 200,
    "result": {
        "postcode": "SW1A 1AA",
        "outward_code": "SW1A",
        "latitude": 51.501009,
        "longitude": -0.141588,
    },
}


def _geocoder(handler, **kwargs) -> tuple[PostcodeGeocoder, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(_record))
    return PostcodeGeocoder("https://postcodes.test", client=client, **kwargs), seen


@pytest.mark.parametrize(
    "raw,expected",
    [("sw1a 1aa", "SW1A1AA"), ("  M1\t1AE ", "M11AE"), ("", ""), (None, "")],
)
def test_normalize_postcode(raw, expected):
    assert normalize_postcode(raw) == expected


def test_lookup_success_parses_result():
    geocoder, seen = _geocoder(lambda request: httpx.Response(200, json=FOUND))

    result = geocoder.lookup("sw1a 1aa")

    assert result == GeoResult(latitude=51.501009, longitude=-0.141588, district_code="SW1A")
    assert seen[0].url.path == "/postcodes/SW1A1AA"


def test_lookup_not_found_returns_none():
    geocoder, _ = _geocoder(lambda request: httpx.Response(404, json={"status": 404, "error": "Postcode not found"}))

    assert geocoder.lookup("ZZ9 9ZZ") is None


def test_lookup_invalid_body_returns_none():
    geocoder, _ = _geocoder(lambda request: httpx.Response(200, json={"status": 200, "result": None}))

    assert geocoder.lookup("SW1A 1AA") is None


def test_lookup_server_error_returns_none():
    geocoder, _ = _geocoder(lambda request: httpx.Response(502, text="bad gateway"))

    assert geocoder.lookup("SW1A 1AA") is None


def test_lookup_non_json_returns_none():
    geocoder, _ = _geocoder(lambda request: httpx.Response(200, text="<html>oops</html>"))

    assert geocoder.lookup("SW1A 1AA") is None


def test_lookup_network_error_returns_none():
    def _raise(request):
        raise httpx.ConnectTimeout("timeout", request=request)

    geocoder, _ = _geocoder(_raise)

    assert geocoder.lookup("SW1A 1AA") is None


def test_blank_postcode_skips_network():
    geocoder, seen = _geocoder(lambda request: httpx.Response(200, json=FOUND))

    assert geocoder.lookup("   ") is None
    assert geocoder.lookup(None) is None
    assert seen == []


def test_results_are_cached_by_normalized_postcode():
    geocoder, seen = _geocoder(lambda request: httpx.Response(200, json=FOUND))

    first = geocoder.lookup("SW1A 1AA")
    second = geocoder.lookup("sw1a1aa")

    assert first == second
    assert len(seen) == 1


def test_not_found_is_cached_but_failures_are_not():
    responses = iter(
        [
            httpx.Response(503, text="busy"),
            httpx.Response(200, json=FOUND),
            httpx.Response(404, json={"status": 404}),
        ]
    )
    geocoder, seen = _geocoder(lambda request: next(responses))

    assert geocoder.lookup("SW1A 1AA") is None
    assert geocoder.lookup("SW1A 1AA") is not None
    assert geocoder.lookup("SW1A 1AA") is not None
    assert len(seen) == 2

    assert geocoder.lookup("ZZ9 9ZZ") is None
    assert geocoder.lookup("ZZ9 9ZZ") is None
    assert len(seen) == 3


def test_cache_is_bounded():
    geocoder, seen = _geocoder(lambda request: httpx.Response(200, json=FOUND), cache_size=2)

    for code in ["A1", "B2", "C3"]:
        geocoder.lookup(code)
    assert len(geocoder._cache) == 2

    geocoder.lookup("A1")  # evicted, fetched again
    assert len(seen) == 4


def test_cache_can_be_disabled():
    geocoder, seen = _geocoder(lambda request: httpx.Response(200, json=FOUND), cache_size=0)

    geocoder.lookup("SW1A 1AA")
    geocoder.lookup("SW1A 1AA")

    assert len(seen) == 2
