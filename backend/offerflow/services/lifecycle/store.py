"""
Persistence helpers for lifecycle items

All gate transitions go through conditional_update: the UPDATE carries the
expected current values in its WHERE clause, so of two concurrent writers
only one matches a row.
"""

import enum
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from offerflow.services.lifecycle.chains import ChainDescriptor


def lock_item(db: Session, chain: ChainDescriptor, item_id: UUID):
    """SELECT ... FOR UPDATE on one item row (no-op lock on SQLite)"""
    return db.execute(
        select(chain.model)
        .where(chain.model.id == item_id)
        .with_for_update()
    ).scalar_one_or_none()


def to_column_values(chain: ChainDescriptor, values: Mapping[str, Any]) -> dict:
    """Map plain status labels onto the kind's status enum before writing"""
    converted = dict(values)
    status = converted.get("status")
    if status is not None and not isinstance(status, enum.Enum):
        converted["status"] = chain.status_enum(status)
    return converted


def conditional_update(
    db: Session,
    chain: ChainDescriptor,
    item_id: UUID,
    expected: Mapping[str, Any],
    values: Mapping[str, Any],
) -> bool:
    """
    UPDATE item SET values WHERE id = item_id AND <field> = <expected value> ...

    Returns:
        True if the row matched and was updated, False if another writer got there first.
    """
    model = chain.model
    conditions = [model.id == item_id]
    for field_name, expected_value in expected.items():
        conditions.append(getattr(model, field_name) == expected_value)

    result = db.execute(
        update(model)
        .where(*conditions)
        .values(**to_column_values(chain, values))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def reload_item(db: Session, chain: ChainDescriptor, item_id: UUID) -> Optional[Any]:
    """Re-read an item after a bulk UPDATE so the session copy is current"""
    item = db.get(chain.model, item_id)
    if item is not None:
        db.refresh(item)
    return item
