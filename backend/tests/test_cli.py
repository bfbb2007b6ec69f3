"""Tests for the migration script entry point."""

import io

import pytest
from sqlalchemy import text

from listings.core.config import settings
from listings.core.database import set_engine
from listings.migrations import MigrationStep, catalog, cli
from listings.migrations.operations import execute


class _Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture(autouse=True)
def _no_shared_engine():
    set_engine(None)
    yield
    set_engine(None)


def _count_properties(engine) -> int:
    with engine.connect() as conn:
        return conn.execute(text("SELECT COUNT(*) FROM properties")).scalar()


def _seed_property(engine) -> None:
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO properties (id, title, seller_id) VALUES ('p1', 'Loft', 's1')"))


class TestRunMigration:
    def test_success(self, engine) -> None:
        code = cli.run_migration("setup", catalog.setup_database_steps, argv=[], engine=engine)

        assert code == cli.EXIT_OK
        assert _count_properties(engine) == 0

    def test_destructive_without_confirm_touches_nothing(self, schema_engine, monkeypatch) -> None:
        _seed_property(schema_engine)
        monkeypatch.setattr("sys.stdin", io.StringIO())

        code = cli.run_migration("clear", catalog.clear_database_steps, argv=[], engine=schema_engine)

        assert code == cli.EXIT_CONFIRMATION_REQUIRED
        assert _count_properties(schema_engine) == 1

    def test_destructive_with_confirm_flag(self, schema_engine) -> None:
        _seed_property(schema_engine)

        code = cli.run_migration("clear", catalog.clear_database_steps, argv=["--confirm"], engine=schema_engine)

        assert code == cli.EXIT_OK
        assert _count_properties(schema_engine) == 0

    def test_typed_confirmation_on_terminal(self, schema_engine, monkeypatch) -> None:
        _seed_property(schema_engine)
        monkeypatch.setattr("sys.stdin", _Terminal())

        refused = cli.run_migration(
            "clear", catalog.clear_database_steps, argv=[], engine=schema_engine, prompt=lambda _: "yes please"
        )
        assert refused == cli.EXIT_CONFIRMATION_REQUIRED
        assert _count_properties(schema_engine) == 1

        accepted = cli.run_migration(
            "clear", catalog.clear_database_steps, argv=[], engine=schema_engine, prompt=lambda _: "YES"
        )
        assert accepted == cli.EXIT_OK
        assert _count_properties(schema_engine) == 0

    def test_missing_database_url(self) -> None:
        assert settings.DATABASE_URL is None

        code = cli.run_migration("setup", catalog.setup_database_steps, argv=[])

        assert code == cli.EXIT_MISSING_CONFIG

    def test_missing_database_url_checked_after_confirmation(self, monkeypatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO())

        code = cli.run_migration("drop", catalog.drop_all_tables_steps, argv=[])

        assert code == cli.EXIT_CONFIRMATION_REQUIRED

    def test_database_url_from_settings(self, db_path, monkeypatch) -> None:
        monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{db_path}")

        code = cli.run_migration("setup", catalog.setup_database_steps, argv=[])

        assert code == cli.EXIT_OK

    def test_failing_step(self, engine) -> None:
        def steps():
            return [MigrationStep(name="Bad SQL", action=execute("UPDATE no_such_table SET x = 1"))]

        code = cli.run_migration("bad", steps, argv=[], engine=engine)

        assert code == cli.EXIT_FAILURE

    def test_positional_arguments(self, schema_engine) -> None:
        _seed_property(schema_engine)

        def add_arguments(parser):
            parser.add_argument("from_seller")
            parser.add_argument("to_seller")

        code = cli.run_migration(
            "reassign",
            lambda args: catalog.reassign_seller_steps(args.from_seller, args.to_seller),
            argv=["s1", "s2"],
            engine=schema_engine,
            add_arguments=add_arguments,
        )

        assert code == cli.EXIT_OK
        with schema_engine.connect() as conn:
            assert conn.execute(text("SELECT seller_id FROM properties")).scalar() == "s2"
