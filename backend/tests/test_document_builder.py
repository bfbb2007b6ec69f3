"""Tests for the denormalized property document builder."""

from decimal import Decimal

import pytest

from listings.core.config import settings
from listings.services.document_builder import (
    SUMMARY_LENGTH,
    build_property_document,
    price_per_area,
    summarize,
)


class TestBuildPropertyDocument:
    def test_full_example(self) -> None:
        prop = {
            "id": "p1",
            "title": "Loft",
            "description": "x" * 300,
            "price": 350000,
            "squareMeters": 110,
        }
        doc = build_property_document(prop, [{"url": "a.jpg", "is_cover": True}], [{"name": "Pool"}])

        assert doc.to_dict() == {
            "id": "p1",
            "title": "Loft",
            "description": "x" * 300,
            "summary": "x" * 240,
            "features": ["Pool"],
            "images": ["a.jpg"],
            "price": 350000,
            "price_per_m2": 3182,
            "currency": "USD",
        }

    def test_minimal_property(self) -> None:
        doc = build_property_document({"id": "p2", "title": "Plot"})
        data = doc.to_dict()

        assert data == {
            "id": "p2",
            "title": "Plot",
            "features": [],
            "images": [],
            "currency": "USD",
        }

    def test_neighborhood_from_city(self) -> None:
        doc = build_property_document({"id": "p3", "title": "House", "city": "Austin"})
        assert doc.to_dict()["neighborhood"] == {"name": "Austin", "city": "Austin"}

    def test_image_and_feature_order_preserved(self) -> None:
        images = [{"image_url": "cover.jpg"}, {"image_url": "b.jpg"}, {"url": "c.jpg"}, {"image_url": None}]
        features = [{"name": "Pool"}, {"name": "Garage"}, {"name": ""}]

        doc = build_property_document({"id": "p4", "title": "T"}, images, features)

        assert doc.images == ["cover.jpg", "b.jpg", "c.jpg"]
        assert doc.features == ["Pool", "Garage"]

    def test_accepts_model_objects(self, make_property) -> None:
        prop = make_property(price=Decimal("200000.00"), square_meters=80, city="Drytown")

        doc = build_property_document(prop)

        assert doc.id == prop.id
        assert doc.price == 200000
        assert doc.price_per_m2 == 2500
        assert doc.neighborhood.city == "Drytown"

    def test_area_aliases(self) -> None:
        assert build_property_document({"id": "a", "title": "t", "price": 100, "square_meters": 4}).price_per_m2 == 25
        assert build_property_document({"id": "a", "title": "t", "price": 100, "area": 5}).price_per_m2 == 20

    def test_currency_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "DEFAULT_CURRENCY", "EUR")
        assert build_property_document({"id": "a", "title": "t"}).currency == "EUR"

    def test_currency_override(self) -> None:
        assert build_property_document({"id": "a", "title": "t"}, currency="MXN").currency == "MXN"

    def test_fractional_price_kept(self) -> None:
        doc = build_property_document({"id": "a", "title": "t", "price": "1999.50"})
        assert doc.price == 1999.5

    def test_zero_price_is_present(self) -> None:
        doc = build_property_document({"id": "a", "title": "t", "price": 0, "square_meters": 50})
        data = doc.to_dict()
        assert data["price"] == 0
        assert data["price_per_m2"] == 0


class TestSummarize:
    def test_long_description_cut(self) -> None:
        text = "word " * 100
        assert summarize(text) == text[:SUMMARY_LENGTH]
        assert len(summarize(text)) == 240

    def test_short_description_unchanged(self) -> None:
        assert summarize("Cozy cabin") == "Cozy cabin"

    def test_exact_length_unchanged(self) -> None:
        text = "y" * 240
        assert summarize(text) == text

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_description(self, value) -> None:
        assert summarize(value) is None


class TestPricePerArea:
    def test_rounds_half_up(self) -> None:
        assert price_per_area(350000, 110) == 3182
        assert price_per_area(5, 2) == 3
        assert price_per_area(7, 2) == 4

    @pytest.mark.parametrize(
        "price,area",
        [(None, 100), (100000, None), (100000, 0), ("n/a", 100), (100000, "")],
    )
    def test_absent(self, price, area) -> None:
        assert price_per_area(price, area) is None

    def test_string_numbers(self) -> None:
        assert price_per_area("120000", "60") == 2000
