"""Tests for guarded, per-transaction migration steps."""

import logging

import pytest
from sqlalchemy import text

from listings.core.exceptions import ConfirmationRequiredError, MigrationError
from listings.migrations import MigrationStep, StepStatus, run_step, run_steps
from listings.migrations.operations import add_column, column_exists, execute


def _count(conn, sql: str) -> int:
    return conn.execute(text(sql)).scalar()


@pytest.fixture
def conn(engine):
    with engine.connect() as conn:
        with conn.begin():
            conn.execute(text("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)"))
        yield conn


class TestRunStep:
    def test_applies_when_guard_unsatisfied(self, conn) -> None:
        step = MigrationStep(
            name="Add items.color",
            guard=column_exists("items", "color"),
            action=add_column("items", "color", "TEXT"),
        )

        result = run_step(conn, step)

        assert result.status == StepStatus.APPLIED
        assert column_exists("items", "color")(conn)

    def test_second_run_is_skipped(self, conn) -> None:
        step = MigrationStep(
            name="Add items.color",
            guard=column_exists("items", "color"),
            action=add_column("items", "color", "TEXT"),
        )

        run_step(conn, step)
        result = run_step(conn, step)

        assert result.status == StepStatus.SKIPPED

    def test_unguarded_backfill_converges(self, conn) -> None:
        with conn.begin():
            conn.execute(text("INSERT INTO items (id, name) VALUES (1, NULL), (2, 'kept')"))
        step = MigrationStep(
            name="Default item names",
            action=execute("UPDATE items SET name = :name WHERE name IS NULL", name="unnamed"),
        )

        first = run_step(conn, step)
        second = run_step(conn, step)

        assert first.rowcount == 1
        assert second.rowcount == 0
        with conn.begin():
            names = conn.execute(text("SELECT name FROM items ORDER BY id")).scalars().all()
        assert names == ["unnamed", "kept"]

    def test_failure_rolls_back_step(self, conn, caplog: pytest.LogCaptureFixture) -> None:
        def insert_then_fail(c):
            c.execute(text("INSERT INTO items (id, name) VALUES (10, 'partial')"))
            raise RuntimeError("boom")

        step = MigrationStep(name="Broken step", action=insert_then_fail)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(MigrationError) as exc_info:
                run_step(conn, step)

        assert exc_info.value.step_name == "Broken step"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert "Broken step" in caplog.text
        with conn.begin():
            assert _count(conn, "SELECT COUNT(*) FROM items") == 0


class TestRunSteps:
    def test_stops_at_first_failure(self, conn) -> None:
        ran = []

        def record(name):
            def action(c):
                ran.append(name)
                c.execute(text("INSERT INTO items (name) VALUES (:name)"), {"name": name})
            return action

        def fail(c):
            raise RuntimeError("nope")

        steps = [
            MigrationStep(name="first", action=record("first")),
            MigrationStep(name="second", action=fail),
            MigrationStep(name="third", action=record("third")),
        ]

        with pytest.raises(MigrationError):
            run_steps(conn, steps)

        assert ran == ["first"]
        with conn.begin():
            names = conn.execute(text("SELECT name FROM items")).scalars().all()
        # Earlier steps stay committed
        assert names == ["first"]

    def test_destructive_requires_confirmation(self, conn) -> None:
        with conn.begin():
            conn.execute(text("INSERT INTO items (id, name) VALUES (1, 'a')"))
        steps = [
            MigrationStep(name="Harmless", action=execute("UPDATE items SET name = 'b'")),
            MigrationStep(name="Wipe items", action=execute("DELETE FROM items"), destructive=True),
        ]

        with pytest.raises(ConfirmationRequiredError) as exc_info:
            run_steps(conn, steps)

        assert exc_info.value.step_names == ["Wipe items"]
        with conn.begin():
            # Nothing ran, not even the non-destructive step
            assert conn.execute(text("SELECT name FROM items")).scalar() == "a"

    def test_destructive_with_confirmation(self, conn) -> None:
        with conn.begin():
            conn.execute(text("INSERT INTO items (id, name) VALUES (1, 'a')"))
        steps = [MigrationStep(name="Wipe items", action=execute("DELETE FROM items"), destructive=True)]

        results = run_steps(conn, steps, confirm=True)

        assert [r.status for r in results] == [StepStatus.APPLIED]
        with conn.begin():
            assert _count(conn, "SELECT COUNT(*) FROM items") == 0
