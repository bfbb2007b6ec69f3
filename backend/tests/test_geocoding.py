"""Tests for geocoding and the geocode backfill."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from geopy.exc import GeocoderTimedOut
from sqlalchemy import select

from listings.core.exceptions import GeocodingError
from listings.models import Property
from listings.services.geocode_backfill import backfill_geocodes, properties_without_geocode
from listings.services.geocoding import GeocodingService, format_address


def _google_response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestGoogle:
    def test_ok(self) -> None:
        payload = {"status": "OK", "results": [{"geometry": {"location": {"lat": 30.27, "lng": -97.74}}}]}
        with patch("listings.services.geocoding.requests.get", return_value=_google_response(payload)) as get:
            service = GeocodingService(api_key="key")
            assert service.provider == "google"
            assert service.geocode("1 Main St, Austin") == (30.27, -97.74)

        assert get.call_args.kwargs["params"] == {"address": "1 Main St, Austin", "key": "key"}

    def test_zero_results(self) -> None:
        with patch("listings.services.geocoding.requests.get", return_value=_google_response({"status": "ZERO_RESULTS", "results": []})):
            with pytest.raises(GeocodingError) as exc_info:
                GeocodingService(api_key="key").geocode("nowhere")

        assert exc_info.value.status == "ZERO_RESULTS"

    def test_transport_error(self) -> None:
        with patch("listings.services.geocoding.requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(GeocodingError):
                GeocodingService(api_key="key").geocode("1 Main St")

    def test_empty_address(self) -> None:
        with pytest.raises(GeocodingError):
            GeocodingService(api_key="key").geocode("")


class TestNominatim:
    def test_fallback_without_key(self) -> None:
        service = GeocodingService(api_key="")
        service.geolocator = MagicMock()
        service.geolocator.geocode.return_value = MagicMock(latitude=1.5, longitude=2.5)

        assert service.provider == "nominatim"
        assert service.geocode("Somewhere") == (1.5, 2.5)

    def test_timeout(self) -> None:
        service = GeocodingService(api_key="")
        service.geolocator = MagicMock()
        service.geolocator.geocode.side_effect = GeocoderTimedOut("slow")

        with pytest.raises(GeocodingError):
            service.geocode("Somewhere")


def test_format_address() -> None:
    assert format_address("1 Main St", None, " Austin ", "", "TX") == "1 Main St, Austin, TX"


class TestBackfill:
    def test_geocodes_and_skips_failures(self, db, schema_engine, make_property) -> None:
        ok = make_property(address="1 Main St", city="Austin")
        bad = make_property(address="Nowhere", city=None)
        done = make_property(address="2 Main St", geocode={"lat": 1, "lng": 2})

        geocoder = MagicMock(provider="fake")

        def geocode(address: str):
            if address == "Nowhere":
                raise GeocodingError(address, "ZERO_RESULTS")
            return (30.0, -97.0)

        geocoder.geocode.side_effect = geocode

        with schema_engine.connect() as conn:
            stats = backfill_geocodes(conn, geocoder)
            remaining = properties_without_geocode(conn)

        assert stats == {"total": 2, "updated": 1, "failed": 1}
        assert [row["id"] for row in remaining] == [bad.id]

        db.expire_all()
        refreshed = db.scalar(select(Property).where(Property.id == ok.id))
        assert refreshed.geocode == {"lat": 30.0, "lng": -97.0}
        assert (refreshed.latitude, refreshed.longitude) == (30.0, -97.0)
        assert db.get(Property, done.id).geocode == {"lat": 1, "lng": 2}

    def test_limit(self, schema_engine, make_property) -> None:
        make_property(address="A")
        make_property(address="B")
        geocoder = MagicMock(provider="fake")
        geocoder.geocode.return_value = (0.0, 0.0)

        with schema_engine.connect() as conn:
            stats = backfill_geocodes(conn, geocoder, limit=1)

        assert stats["updated"] == 1
