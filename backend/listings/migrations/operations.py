"""
Reusable guards and actions for migration steps.

Guards inspect the live schema through SQLAlchemy's inspector, so they work
the same on PostgreSQL and on the SQLite databases used locally.
"""

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import Table, inspect, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection

from listings.migrations.step import Action, Guard

logger = logging.getLogger(__name__)


# =============================================================================
# Guards
# =============================================================================

def table_exists(table: str) -> Guard:
    def guard(conn: Connection) -> bool:
        return inspect(conn).has_table(table)
    return guard


def tables_exist(tables: Sequence[str]) -> Guard:
    def guard(conn: Connection) -> bool:
        inspector = inspect(conn)
        return all(inspector.has_table(name) for name in tables)
    return guard


def column_exists(table: str, column: str) -> Guard:
    def guard(conn: Connection) -> bool:
        columns = [c["name"] for c in inspect(conn).get_columns(table)]
        return column in columns
    return guard


def column_not_nullable(table: str, column: str) -> Guard:
    def guard(conn: Connection) -> bool:
        for c in inspect(conn).get_columns(table):
            if c["name"] == column:
                return not c["nullable"]
        return False
    return guard


def index_exists(table: str, index: str) -> Guard:
    def guard(conn: Connection) -> bool:
        return any(ix["name"] == index for ix in inspect(conn).get_indexes(table))
    return guard


def check_constraint_exists(table: str, constraint: str) -> Guard:
    def guard(conn: Connection) -> bool:
        constraints = inspect(conn).get_check_constraints(table)
        return any(c["name"] == constraint for c in constraints)
    return guard


def dialect_is_not(name: str) -> Guard:
    """Satisfied (skip) unless the connection speaks the given dialect."""
    def guard(conn: Connection) -> bool:
        return conn.dialect.name != name
    return guard


def any_of(*guards: Guard) -> Guard:
    def guard(conn: Connection) -> bool:
        return any(g(conn) for g in guards)
    return guard


def rows_match(table: Table, rows: Sequence[dict], key: str = "name") -> Guard:
    """Satisfied when every seed row exists with exactly the given values."""
    def guard(conn: Connection) -> bool:
        columns = sorted({column for row in rows for column in row})
        if not all(column_exists(table.name, c)(conn) for c in columns):
            return False
        wanted = [row[key] for row in rows]
        existing = {
            r[key]: r
            for r in conn.execute(
                select(*[table.c[c] for c in columns]).where(table.c[key].in_(wanted))
            ).mappings()
        }
        for row in rows:
            current = existing.get(row[key])
            if current is None:
                return False
            if any(current[c] != v for c, v in row.items()):
                return False
        return True
    return guard


# =============================================================================
# Actions
# =============================================================================

def execute(sql: str, **params: Any) -> Action:
    """Run one SQL statement; returns the affected row count."""
    statement = text(sql)

    def action(conn: Connection) -> Optional[int]:
        result = conn.execute(statement, params)
        return result.rowcount
    return action


def add_column(table: str, column: str, ddl_type: str) -> Action:
    """
    ALTER TABLE ... ADD COLUMN. Pair with column_exists as the guard.

    No DEFAULT clause: SQLite refuses non-constant defaults here, so new
    columns are populated by a separate backfill step.
    """
    return execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}")


def dialect_insert(bind, table: Table):
    """
    INSERT construct with ON CONFLICT support for the bind's dialect.

    bind is anything with a ``dialect``: a Connection or an Engine.
    """
    name = bind.dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on {name}")


def upsert_rows(
    table: Table,
    rows: Sequence[dict],
    key: str = "name",
    update_columns: Optional[Sequence[str]] = None,
) -> Action:
    """
    Insert seed rows, updating existing ones matched on the natural key.

    Columns other than the key (and ``id``, unless it is the key) are
    overwritten on conflict, so rerunning converges to the seed data.
    """
    def action(conn: Connection) -> int:
        affected = 0
        for row in rows:
            stmt = dialect_insert(conn, table).values(**row)
            columns = update_columns or [c for c in row if c not in (key, "id")]
            if columns:
                stmt = stmt.on_conflict_do_update(
                    index_elements=[key],
                    set_={c: stmt.excluded[c] for c in columns},
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=[key])
            affected += conn.execute(stmt).rowcount
        return affected
    return action


def reset_sequence(table: str, column: str = "id") -> Action:
    """
    Move a PostgreSQL serial sequence past rows inserted with explicit ids.

    Guard with dialect_is_not("postgresql").
    """
    return execute(
        f"SELECT setval(pg_get_serial_sequence('{table}', '{column}'), "
        f"COALESCE((SELECT MAX({column}) FROM {table}), 1))"
    )


def drop_table(table: str) -> Action:
    def action(conn: Connection) -> None:
        cascade = " CASCADE" if conn.dialect.name == "postgresql" else ""
        conn.execute(text(f"DROP TABLE IF EXISTS {table}{cascade}"))
    return action
