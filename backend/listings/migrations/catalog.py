"""
The migrations the admin scripts run.

Each function returns the ordered steps for one script. Scripts are
independent of each other; order only matters inside a list (add a column
before backfilling it, backfill before adding a constraint).
"""

from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Connection

from listings.core.config import settings
from listings.core.database import Base
from listings.migrations import seeds
from listings.migrations.operations import (
    add_column,
    any_of,
    check_constraint_exists,
    column_exists,
    column_not_nullable,
    dialect_is_not,
    drop_table,
    execute,
    index_exists,
    reset_sequence,
    rows_match,
    tables_exist,
    upsert_rows,
)
from listings.migrations.step import MigrationStep
from listings.models import (
    Feature,
    OperationStatus,
    PropertyImage,
    PropertyStatus,
    PropertyType,
)

# Tables from earlier schema generations that are not modelled any more
LEGACY_TABLES = [
    "listings_history",
    "property_media",
    "user_saved_properties",
    "neighborhoods",
    "media_types",
]

SINGLE_COVER_INDEX = "uq_property_images_single_cover"


def _app_tables() -> list[str]:
    return [table.name for table in Base.metadata.sorted_tables]


# =============================================================================
# Schema setup
# =============================================================================

def _create_all(conn: Connection) -> None:
    Base.metadata.create_all(conn)


def _seed_steps(label: str, table, rows, key: str = "name") -> list[MigrationStep]:
    return [
        MigrationStep(
            name=f"Seed {label}",
            guard=rows_match(table, rows, key=key),
            action=upsert_rows(table, rows, key=key),
        )
    ]


def setup_database_steps() -> list[MigrationStep]:
    """Create every table and load the lookup data."""
    return [
        MigrationStep(
            name="Create application tables",
            guard=tables_exist(_app_tables()),
            action=_create_all,
        ),
        *_seed_steps("operation statuses", OperationStatus.__table__, seeds.OPERATION_STATUSES),
        MigrationStep(
            name="Reset operation status id sequence",
            guard=dialect_is_not("postgresql"),
            action=reset_sequence("property_operation_statuses"),
        ),
        *_seed_steps("property statuses", PropertyStatus.__table__, seeds.PROPERTY_STATUSES),
        *_seed_steps("property types", PropertyType.__table__, seeds.PROPERTY_TYPES),
        *_seed_steps("property features", Feature.__table__, seeds.FEATURES),
    ]


# =============================================================================
# Legacy text columns
# =============================================================================

def legacy_column_steps() -> list[MigrationStep]:
    """
    Keep the denormalized ``type``/``status``/``room`` columns older queries read.

    The text columns mirror the lookup tables and are re-synced on every run.
    """
    return [
        MigrationStep(
            name="Add properties.type",
            guard=column_exists("properties", "type"),
            action=add_column("properties", "type", "TEXT"),
        ),
        MigrationStep(
            name="Add properties.room",
            guard=column_exists("properties", "room"),
            action=add_column("properties", "room", "INTEGER"),
        ),
        MigrationStep(
            name="Add properties.status",
            guard=column_exists("properties", "status"),
            action=add_column("properties", "status", "TEXT"),
        ),
        MigrationStep(
            name="Backfill type from property_types",
            action=execute("""
                UPDATE properties
                SET type = (
                    SELECT pt.name FROM property_types pt
                    WHERE pt.id = properties.property_type_id
                )
                WHERE property_type_id IN (SELECT id FROM property_types)
            """),
        ),
        MigrationStep(
            name="Backfill status from property_statuses",
            action=execute("""
                UPDATE properties
                SET status = (
                    SELECT ps.name FROM property_statuses ps
                    WHERE ps.id = properties.property_status_id
                )
                WHERE property_status_id IN (SELECT id FROM property_statuses)
            """),
        ),
        MigrationStep(
            name="Backfill room from bedrooms",
            action=execute("UPDATE properties SET room = bedrooms WHERE room IS NULL"),
        ),
    ]


# =============================================================================
# Operation statuses
# =============================================================================

def _check_operation_status_ids(conn: Connection) -> None:
    table = OperationStatus.__table__
    expected = {row["name"]: row["id"] for row in seeds.OPERATION_STATUSES}
    rows = conn.execute(
        select(table.c.id, table.c.name).where(table.c.name.in_(list(expected)))
    ).all()
    mismatched = [
        f"{name} (id {id}, expected {expected[name]})"
        for id, name in rows
        if expected[name] != id
    ]
    if mismatched:
        raise ValueError(
            "Operation status ids differ from the seed set: "
            + ", ".join(mismatched)
            + ". Run reset_operation_statuses.py --confirm to rebuild them."
        )


def operation_status_steps() -> list[MigrationStep]:
    """Bring property_operation_statuses and the properties reference up to date."""
    table = OperationStatus.__table__
    return [
        MigrationStep(
            name="Add property_operation_statuses.color",
            guard=column_exists("property_operation_statuses", "color"),
            action=add_column("property_operation_statuses", "color", "VARCHAR(20)"),
        ),
        MigrationStep(
            name="Check operation status ids",
            guard=rows_match(table, seeds.OPERATION_STATUSES),
            action=_check_operation_status_ids,
        ),
        MigrationStep(
            name="Upsert operation statuses",
            guard=rows_match(table, seeds.OPERATION_STATUSES),
            action=upsert_rows(table, seeds.OPERATION_STATUSES),
        ),
        MigrationStep(
            name="Reset operation status id sequence",
            guard=dialect_is_not("postgresql"),
            action=reset_sequence("property_operation_statuses"),
        ),
        MigrationStep(
            name="Add properties.operation_status_id",
            guard=column_exists("properties", "operation_status_id"),
            action=add_column(
                "properties",
                "operation_status_id",
                "INTEGER REFERENCES property_operation_statuses(id)",
            ),
        ),
        MigrationStep(
            name="Index properties.operation_status_id",
            guard=any_of(
                index_exists("properties", "idx_properties_operation_status"),
                index_exists("properties", "ix_properties_operation_status_id"),
            ),
            action=execute(
                "CREATE INDEX idx_properties_operation_status ON properties (operation_status_id)"
            ),
        ),
        MigrationStep(
            name="Default missing operation statuses to sale",
            action=execute(
                "UPDATE properties SET operation_status_id = :status_id "
                "WHERE operation_status_id IS NULL",
                status_id=seeds.DEFAULT_OPERATION_STATUS_ID,
            ),
        ),
    ]


def _release_operation_status_names(conn: Connection) -> int:
    # Frees the unique names so the upsert by id cannot collide mid-way
    result = conn.execute(text(
        "UPDATE property_operation_statuses "
        "SET name = '__reset_' || CAST(id AS VARCHAR(20))"
    ))
    return result.rowcount


def reset_operation_status_steps() -> list[MigrationStep]:
    """
    Replace the operation statuses with the seed set and ids 1..4.

    Destructive: rows outside the seed ids are deleted and listings pointing
    at them fall back to sale.
    """
    table = OperationStatus.__table__
    seed_ids = ", ".join(str(row["id"]) for row in seeds.OPERATION_STATUSES)
    return [
        MigrationStep(
            name="Point listings with unknown operation statuses at sale",
            action=execute(
                "UPDATE properties SET operation_status_id = :status_id "
                f"WHERE operation_status_id IS NOT NULL AND operation_status_id NOT IN ({seed_ids})",
                status_id=seeds.DEFAULT_OPERATION_STATUS_ID,
            ),
        ),
        MigrationStep(
            name="Delete operation statuses outside the seed set",
            action=execute(f"DELETE FROM property_operation_statuses WHERE id NOT IN ({seed_ids})"),
            destructive=True,
        ),
        MigrationStep(
            name="Release operation status names",
            action=_release_operation_status_names,
            destructive=True,
        ),
        MigrationStep(
            name="Insert operation statuses with fixed ids",
            action=upsert_rows(table, seeds.OPERATION_STATUSES, key="id"),
        ),
        MigrationStep(
            name="Reset operation status id sequence",
            guard=dialect_is_not("postgresql"),
            action=reset_sequence("property_operation_statuses"),
        ),
    ]


# =============================================================================
# Images
# =============================================================================

IMAGE_METADATA_COLUMNS = [
    ("file_size", "INTEGER"),
    ("mime_type", "VARCHAR(100)"),
    ("original_filename", "VARCHAR(255)"),
    ("blob_path", "VARCHAR(500)"),
    ("alt_text", "TEXT"),
    ("updated_at", "TIMESTAMP"),
]


def _demote_duplicate_covers(conn: Connection) -> int:
    # Keep the oldest cover per property
    result = conn.execute(
        text("""
            UPDATE property_images SET is_cover = :no
            WHERE is_cover = :yes AND id NOT IN (
                SELECT MIN(id) FROM property_images
                WHERE is_cover = :yes
                GROUP BY property_id
            )
        """),
        {"yes": True, "no": False},
    )
    return result.rowcount


def image_schema_steps() -> list[MigrationStep]:
    """Metadata columns, indexes, checks and the one-cover-per-property rule."""
    steps = [
        MigrationStep(
            name=f"Add property_images.{column}",
            guard=column_exists("property_images", column),
            action=add_column("property_images", column, ddl_type),
        )
        for column, ddl_type in IMAGE_METADATA_COLUMNS
    ]
    steps += [
        MigrationStep(
            name="Backfill property_images.updated_at",
            action=execute(
                "UPDATE property_images SET updated_at = created_at WHERE updated_at IS NULL"
            ),
        ),
        MigrationStep(
            name="Create property_id index",
            guard=index_exists("property_images", "idx_property_images_property_id"),
            action=execute(
                "CREATE INDEX idx_property_images_property_id ON property_images (property_id)"
            ),
        ),
        MigrationStep(
            name="Create cover order index",
            guard=index_exists("property_images", "idx_property_images_cover_order"),
            action=execute(
                "CREATE INDEX idx_property_images_cover_order "
                "ON property_images (property_id, is_cover, display_order)"
            ),
        ),
        MigrationStep(
            name="Add valid display order constraint",
            guard=any_of(
                dialect_is_not("postgresql"),
                check_constraint_exists("property_images", "chk_valid_display_order"),
            ),
            action=execute(
                "ALTER TABLE property_images "
                "ADD CONSTRAINT chk_valid_display_order CHECK (display_order >= 0)"
            ),
        ),
        MigrationStep(
            name="Add valid file size constraint",
            guard=any_of(
                dialect_is_not("postgresql"),
                check_constraint_exists("property_images", "chk_valid_file_size"),
            ),
            action=execute(
                "ALTER TABLE property_images "
                "ADD CONSTRAINT chk_valid_file_size CHECK (file_size IS NULL OR file_size > 0)"
            ),
        ),
        MigrationStep(
            name="Demote duplicate cover images",
            guard=index_exists("property_images", SINGLE_COVER_INDEX),
            action=_demote_duplicate_covers,
        ),
        MigrationStep(
            name="Enforce a single cover image per property",
            guard=index_exists("property_images", SINGLE_COVER_INDEX),
            action=execute(
                f"CREATE UNIQUE INDEX {SINGLE_COVER_INDEX} "
                "ON property_images (property_id) WHERE is_cover"
            ),
        ),
    ]
    return steps


# =============================================================================
# Sellers
# =============================================================================

def seller_placeholder_steps(seller_id: str = None) -> list[MigrationStep]:
    """Give ownerless listings the placeholder seller, then forbid nulls."""
    seller_id = seller_id or settings.DEFAULT_SELLER_ID
    return [
        MigrationStep(
            name="Assign placeholder seller to ownerless properties",
            action=execute(
                "UPDATE properties SET seller_id = :seller_id WHERE seller_id IS NULL",
                seller_id=seller_id,
            ),
        ),
        MigrationStep(
            name="Make properties.seller_id NOT NULL",
            guard=any_of(
                dialect_is_not("postgresql"),
                column_not_nullable("properties", "seller_id"),
            ),
            action=execute("ALTER TABLE properties ALTER COLUMN seller_id SET NOT NULL"),
        ),
    ]


# =============================================================================
# Destructive
# =============================================================================

def _clear_tables(conn: Connection) -> None:
    inspector = inspect(conn)
    tables = [
        table.name
        for table in reversed(Base.metadata.sorted_tables)
        if inspector.has_table(table.name)
    ]
    if not tables:
        return
    if conn.dialect.name == "postgresql":
        conn.execute(text(f"TRUNCATE TABLE {', '.join(tables)} RESTART IDENTITY CASCADE"))
    else:
        for table in tables:
            conn.execute(text(f"DELETE FROM {table}"))


def clear_database_steps() -> list[MigrationStep]:
    """Delete every row from the application tables, keeping the schema."""
    return [
        MigrationStep(
            name="Delete all application data",
            action=_clear_tables,
            destructive=True,
        ),
    ]


def _drop_app_tables(conn: Connection) -> None:
    Base.metadata.drop_all(conn)


def drop_all_tables_steps() -> list[MigrationStep]:
    """Drop every application table, legacy ones included."""
    steps = [
        MigrationStep(name=f"Drop {table}", action=drop_table(table), destructive=True)
        for table in LEGACY_TABLES
    ]
    steps.append(
        MigrationStep(name="Drop application tables", action=_drop_app_tables, destructive=True)
    )
    return steps


def reassign_seller_steps(from_seller: str, to_seller: str) -> list[MigrationStep]:
    """Move every listing from one seller to another."""
    return [
        MigrationStep(
            name=f"Reassign properties from {from_seller} to {to_seller}",
            action=execute(
                "UPDATE properties SET seller_id = :to_seller, updated_at = CURRENT_TIMESTAMP "
                "WHERE seller_id = :from_seller",
                from_seller=from_seller,
                to_seller=to_seller,
            ),
        ),
    ]
