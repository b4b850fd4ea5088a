"""
Activity trail for lifecycle items
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from offerflow.core.offers.models import OfferEvent
from offerflow.core.approvals.statuses import Decision, Gate, ItemKind


def record_event(
    db: Session,
    *,
    item_kind: ItemKind,
    item_id: UUID,
    action: str,
    actor_id: Optional[UUID] = None,
    gate: Optional[Gate] = None,
    decision: Optional[Decision] = None,
    stage_before: Optional[int] = None,
    stage_after: Optional[int] = None,
    status_after: Optional[str] = None,
    details: Optional[dict] = None,
) -> OfferEvent:
    """Append one event; sequence is per item and starts at 1"""
    last = db.execute(
        select(func.max(OfferEvent.sequence)).where(OfferEvent.item_id == item_id)
    ).scalar()
    event = OfferEvent(
        item_kind=item_kind,
        item_id=item_id,
        action=action,
        gate=gate,
        decision=decision,
        actor_id=actor_id,
        stage_before=stage_before,
        stage_after=stage_after,
        status_after=status_after,
        details=details,
        sequence=(last or 0) + 1,
    )
    db.add(event)
    db.flush()
    return event


def list_events(db: Session, item_id: UUID) -> list[OfferEvent]:
    return list(db.execute(
        select(OfferEvent)
        .where(OfferEvent.item_id == item_id)
        .order_by(OfferEvent.sequence.asc())
    ).scalars().all())
