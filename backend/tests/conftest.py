"""Shared pytest fixtures."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from listings.core.config import settings
from listings.core.database import build_engine, set_engine
from listings.migrations import catalog, run_steps
from listings.models import Property
from listings.services import cache
from listings.services.read_model import PropertyDocumentStore


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's .env and shell out of the shared settings object."""
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    monkeypatch.setattr(settings, "MONGODB_URI", None)
    monkeypatch.setattr(settings, "MONGODB_DB", None)
    monkeypatch.setattr(settings, "ADMIN_SECRET", None)
    monkeypatch.setattr(settings, "GOOGLE_MAPS_API_KEY", None)
    monkeypatch.setattr(settings, "BLOB_PUBLIC_URL", None)
    monkeypatch.setattr(settings, "BLOB_READ_WRITE_TOKEN", None)
    monkeypatch.setattr(settings, "DEFAULT_CURRENCY", "USD")
    monkeypatch.setattr(settings, "DEFAULT_SELLER_ID", "seller123")


@pytest.fixture(autouse=True)
def _clear_query_cache() -> Iterator[None]:
    cache.clear_cache()
    yield
    cache.clear_cache()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "listings.db"


@pytest.fixture
def engine(db_path: Path) -> Iterator[Engine]:
    """Empty SQLite database."""
    engine = build_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


@pytest.fixture
def schema_engine(engine: Engine) -> Engine:
    """SQLite database with every table created and the lookup data seeded."""
    with engine.connect() as conn:
        run_steps(conn, catalog.setup_database_steps())
    return engine


@pytest.fixture
def db(schema_engine: Engine) -> Iterator[Session]:
    session = sessionmaker(autocommit=False, autoflush=False, bind=schema_engine)()
    yield session
    session.close()


@pytest.fixture
def make_property(db: Session):
    """Insert a property row and return it."""
    def _make(**overrides) -> Property:
        values = {
            "title": "Loft",
            "description": "Bright loft near the river",
            "price": 350000,
            "square_meters": 110,
            "city": "Austin",
            "seller_id": "seller-1",
            "operation_status_id": 1,
        }
        values.update(overrides)
        prop = Property(**values)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop
    return _make


@pytest.fixture
def mongo_collection() -> MagicMock:
    return MagicMock(name="property_documents")


@pytest.fixture
def document_store(mongo_collection: MagicMock) -> PropertyDocumentStore:
    return PropertyDocumentStore(mongo_collection)


@pytest.fixture
def client(schema_engine: Engine) -> Iterator[TestClient]:
    """API client bound to the test database."""
    from listings.main import app

    set_engine(schema_engine)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_engine(None)
