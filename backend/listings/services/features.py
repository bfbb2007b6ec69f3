"""Feature assignments (property <-> amenity)."""

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from listings.migrations.operations import dialect_insert
from listings.models import Feature, FeatureAssignment

logger = logging.getLogger(__name__)


def assign_features(db: Session, property_id: str, feature_ids: Iterable[int]) -> int:
    """
    Attach features to a property.

    Pairs that are already assigned are skipped by the database
    (ON CONFLICT DO NOTHING), so repeating a call is harmless.

    Returns:
        Number of newly created assignments.
    """
    table = FeatureAssignment.__table__
    created = 0
    for feature_id in dict.fromkeys(feature_ids):
        stmt = (
            dialect_insert(db.get_bind(), table)
            .values(property_id=property_id, feature_id=feature_id)
            .on_conflict_do_nothing(index_elements=["property_id", "feature_id"])
        )
        created += db.execute(stmt).rowcount
    db.commit()
    logger.debug(f"Assigned {created} new features to property {property_id}")
    return created


def assign_features_by_name(db: Session, property_id: str, names: Iterable[str]) -> tuple[int, list[str]]:
    """
    Same as assign_features, addressed by feature name.

    Returns:
        (newly created assignments, names that matched no feature)
    """
    names = list(dict.fromkeys(names))
    found = {
        name: feature_id
        for feature_id, name in db.execute(
            select(Feature.id, Feature.name).where(Feature.name.in_(names))
        )
    }
    unknown = [name for name in names if name not in found]
    created = assign_features(db, property_id, [found[name] for name in names if name in found])
    return created, unknown


def feature_rows(db, property_id: str) -> list[dict]:
    """Feature id/name pairs for a property, in assignment order."""
    result = db.execute(
        select(Feature.id, Feature.name)
        .join(FeatureAssignment, FeatureAssignment.feature_id == Feature.id)
        .where(FeatureAssignment.property_id == property_id)
        .order_by(FeatureAssignment.id)
    )
    return [dict(row) for row in result.mappings()]
