"""Tests for syncing properties into the read model."""

import pytest

from listings.core.exceptions import PropertyNotFoundError
from listings.services import cache
from listings.services.features import assign_features_by_name
from listings.services.images import register_image
from listings.services.property_sync import dry_run_sync, sync_property


@pytest.fixture
def listed_property(db, make_property):
    prop = make_property(description="d" * 300)
    register_image(db, prop.id, "cover.jpg")
    register_image(db, prop.id, "second.jpg")
    assign_features_by_name(db, prop.id, ["Pool", "Garage"])
    return prop


class TestSyncProperty:
    def test_upserts_built_document(self, db, listed_property, document_store, mongo_collection) -> None:
        document = sync_property(db, listed_property.id, document_store, resolve_url=lambda u: f"https://cdn/{u}")

        assert document.images == ["https://cdn/cover.jpg", "https://cdn/second.jpg"]
        assert document.features == ["Pool", "Garage"]
        assert document.summary == "d" * 240
        assert document.price_per_m2 == 3182

        mongo_collection.update_one.assert_called_once()
        query, update = mongo_collection.update_one.call_args.args
        assert query == {"property_id": listed_property.id}
        assert update["$set"]["doc"] == document.to_dict()
        assert mongo_collection.update_one.call_args.kwargs == {"upsert": True}

    def test_failed_url_resolution_keeps_original(self, db, listed_property, document_store) -> None:
        def flaky(url: str) -> str:
            if url == "second.jpg":
                raise RuntimeError("resolver down")
            return f"https://cdn/{url}"

        document = sync_property(db, listed_property.id, document_store, resolve_url=flaky)

        assert document.images == ["https://cdn/cover.jpg", "second.jpg"]

    def test_invalidates_cache(self, db, listed_property, document_store) -> None:
        cache.cache_set(cache.property_key(listed_property.id), {"stale": True})
        cache.cache_set(cache.properties_list_key({"city": "austin", "op": "sale"}), [])
        cache.cache_set(cache.seller_list_key("seller-1"), [])
        cache.cache_set(cache.seller_list_key("someone-else"), [])

        sync_property(db, listed_property.id, document_store)

        assert cache.cache_get(cache.property_key(listed_property.id)) is None
        assert cache.cache_get(cache.properties_list_key({"city": "austin", "op": "sale"})) is None
        assert cache.cache_get(cache.seller_list_key("seller-1")) is None
        assert cache.cache_get(cache.seller_list_key("someone-else")) == []

    def test_works_on_a_connection(self, schema_engine, listed_property, document_store) -> None:
        with schema_engine.connect() as conn:
            document = sync_property(conn, listed_property.id, document_store)

        assert document.id == listed_property.id

    def test_unknown_property(self, db, document_store, mongo_collection) -> None:
        with pytest.raises(PropertyNotFoundError):
            sync_property(db, "missing", document_store)

        mongo_collection.update_one.assert_not_called()


class TestDryRun:
    def test_fixture_document(self) -> None:
        result = dry_run_sync()

        assert result["document"]["price_per_m2"] == 2500
        assert result["document"]["features"] == ["Pool", "Balcony"]
        assert result["delete_key"] == "v1:property:dry-prop-1"
        assert "v1:seller:seller-dry:list:*" in result["invalidate_patterns"]
        assert "v1:properties:list:*op=sale*" in result["invalidate_patterns"]
