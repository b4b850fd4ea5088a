"""
Concurrency tests for gate decisions

Every gate transition is a conditional UPDATE guarded on (gate = pending,
stage = gate stage). These tests interleave a competing writer between the
read and the write to check that the loser never double-applies.
"""

import pytest
from decimal import Decimal
from sqlalchemy import update
from sqlalchemy.orm import Session

from offerflow.core.approvals.statuses import Decision, Gate, GateStatus, OfferStatus, ViewerRole
from offerflow.core.offers.models import InvestmentOffer
from offerflow.services.lifecycle import ConflictError
from offerflow.services.lifecycle import gate_processor
from offerflow.services.lifecycle.chains import OFFER_CHAIN
from offerflow.services.lifecycle.store import conditional_update


@pytest.fixture
def pending_offer(lifecycle, db_session: Session, advised_investor, advisor_1, startup):
    offer = lifecycle.submit_offer(
        investor_id=advised_investor.id,
        startup_id=startup.id,
        offer_amount=Decimal("50000"),
        equity_percentage=Decimal("5"),
    )
    db_session.commit()
    return offer


def _competing_write(db_session: Session, offer_id, gate_status: GateStatus, status: OfferStatus, stage: int):
    db_session.execute(
        update(InvestmentOffer)
        .where(InvestmentOffer.id == offer_id)
        .values(investor_advisor_approval=gate_status, status=status, stage=stage)
        .execution_options(synchronize_session=False)
    )


def test_stale_conditional_update_matches_nothing(db_session: Session, pending_offer):
    expected = {"investor_advisor_approval": GateStatus.PENDING, "stage": 1}
    values = {"investor_advisor_approval": GateStatus.APPROVED, "stage": 3, "status": "pending"}

    assert conditional_update(db_session, OFFER_CHAIN, pending_offer.id, expected, values) is True
    assert conditional_update(db_session, OFFER_CHAIN, pending_offer.id, expected, values) is False


def test_lost_race_with_same_decision_is_noop(monkeypatch, lifecycle, db_session: Session, pending_offer, advisor_1):
    original = gate_processor.conditional_update

    def racing_update(db, chain, item_id, expected, values):
        _competing_write(db, item_id, GateStatus.APPROVED, OfferStatus.PENDING, 3)
        return original(db, chain, item_id, expected, values)

    monkeypatch.setattr(gate_processor, "conditional_update", racing_update)

    outcome = lifecycle.decide(pending_offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)

    assert outcome.changed is False
    assert outcome.item.stage == 3
    # Only the submission event: the winning writer is not this call
    events = lifecycle.list_events(pending_offer.id, ViewerRole.INVESTOR, pending_offer.investor_id)
    assert [e.action for e in events] == ["submitted"]


def test_lost_race_with_opposite_decision_conflicts(monkeypatch, lifecycle, db_session: Session, pending_offer, advisor_1):
    original = gate_processor.conditional_update

    def racing_update(db, chain, item_id, expected, values):
        _competing_write(db, item_id, GateStatus.REJECTED, OfferStatus.INVESTOR_ADVISOR_REJECTED, 1)
        return original(db, chain, item_id, expected, values)

    monkeypatch.setattr(gate_processor, "conditional_update", racing_update)

    with pytest.raises(ConflictError):
        lifecycle.decide(pending_offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)


def test_sequential_double_decision_applies_once(lifecycle, db_session: Session, pending_offer, advisor_1):
    outcomes = [
        lifecycle.decide(pending_offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)
        for _ in range(3)
    ]
    db_session.commit()

    assert [o.changed for o in outcomes] == [True, False, False]
    events = lifecycle.list_events(pending_offer.id, ViewerRole.INVESTOR, pending_offer.investor_id)
    decided = [e for e in events if e.action == "decided"]
    assert len(decided) == 1
