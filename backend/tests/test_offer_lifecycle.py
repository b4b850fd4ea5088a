"""
Plain investment offer lifecycle tests

Covers submission placement, the advisor gates, the startup's final decision,
resubmission after rejection, edits, contact reveal and the event trail.
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from offerflow.core.approvals.statuses import Decision, Gate, GateStatus, ItemKind, OfferStatus, ViewerRole
from offerflow.core.offers.models import InvestmentOffer
from offerflow.services.lifecycle import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from offerflow.services.lifecycle.events import list_events


def submit(lifecycle, investor, startup, amount="50000", equity="5"):
    return lifecycle.submit_offer(
        investor_id=investor.id,
        startup_id=startup.id,
        offer_amount=Decimal(amount),
        equity_percentage=Decimal(equity),
    )


def test_both_advisors_walk_every_stage(lifecycle, db_session, advised_investor, advisor_1, advised_startup, advisor_2):
    offer = submit(lifecycle, advised_investor, advised_startup)

    assert offer.stage == 1
    assert offer.status == OfferStatus.PENDING_INVESTOR_ADVISOR_APPROVAL
    assert offer.investor_advisor_approval == GateStatus.PENDING
    assert offer.startup_advisor_approval == GateStatus.NOT_REQUIRED
    assert offer.listing_id is not None
    assert offer.currency == "USD"

    outcome = lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)
    assert outcome.changed is True
    assert (outcome.stage_before, outcome.stage_after) == (1, 2)
    assert outcome.item.status == OfferStatus.PENDING_STARTUP_ADVISOR_APPROVAL
    assert outcome.item.startup_advisor_approval == GateStatus.PENDING

    outcome = lifecycle.decide(offer.id, Gate.STARTUP_ADVISOR, Decision.APPROVE, advisor_2.id)
    assert outcome.stage_after == 3
    assert outcome.item.status == OfferStatus.PENDING
    assert outcome.item.startup_approval_status == GateStatus.PENDING

    outcome = lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, advised_startup.owner_user_id)
    db_session.commit()

    assert outcome.stage_after == 4
    assert outcome.item.status == OfferStatus.ACCEPTED
    assert outcome.item.startup_approval_status == GateStatus.APPROVED


def test_investor_without_advisor_skips_to_startup_advisor(lifecycle, investor, advised_startup):
    offer = submit(lifecycle, investor, advised_startup)

    assert offer.stage == 2
    assert offer.status == OfferStatus.PENDING_STARTUP_ADVISOR_APPROVAL
    assert offer.investor_advisor_approval == GateStatus.NOT_REQUIRED
    assert offer.startup_advisor_approval == GateStatus.PENDING


def test_no_advisors_goes_straight_to_startup(lifecycle, investor, startup):
    offer = submit(lifecycle, investor, startup)

    assert offer.stage == 3
    assert offer.status == OfferStatus.PENDING
    assert offer.investor_advisor_approval == GateStatus.NOT_REQUIRED
    assert offer.startup_advisor_approval == GateStatus.NOT_REQUIRED
    assert offer.startup_approval_status == GateStatus.PENDING


def test_blank_advisor_codes_count_as_unadvised(lifecycle, make_user, make_startup):
    investor = make_user(entered="  ", assigned="")
    startup = make_startup(advisor_code=" ")

    offer = submit(lifecycle, investor, startup)

    assert offer.stage == 3
    assert offer.status == OfferStatus.PENDING
    assert offer.investor_advisor_approval == GateStatus.NOT_REQUIRED
    assert offer.startup_advisor_approval == GateStatus.NOT_REQUIRED
    visible = lifecycle.get_for_role(ItemKind.OFFER, offer.id, ViewerRole.STARTUP, startup.owner_user_id)
    assert visible.id == offer.id
    listed = lifecycle.list_visible(ItemKind.OFFER, ViewerRole.STARTUP, startup.owner_user_id)
    assert [o.id for o in listed] == [offer.id]


def test_investor_advisor_approval_skips_unadvised_startup(lifecycle, advised_investor, advisor_1, startup):
    offer = submit(lifecycle, advised_investor, startup)

    outcome = lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)

    assert (outcome.stage_before, outcome.stage_after) == (1, 3)
    assert outcome.item.startup_advisor_approval == GateStatus.NOT_REQUIRED
    assert outcome.item.status == OfferStatus.PENDING


def test_advisor_rejection_is_terminal(lifecycle, advised_investor, advisor_1, advised_startup, advisor_2):
    offer = submit(lifecycle, advised_investor, advised_startup)

    outcome = lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.REJECT, advisor_1.id)

    assert outcome.item.stage == 1
    assert outcome.item.status == OfferStatus.INVESTOR_ADVISOR_REJECTED
    assert outcome.item.investor_advisor_approval == GateStatus.REJECTED
    assert outcome.item.startup_advisor_approval == GateStatus.NOT_REQUIRED

    with pytest.raises(ConflictError):
        lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)
    with pytest.raises(ConflictError):
        lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, advised_startup.owner_user_id)


def test_repeated_decision_is_a_noop(lifecycle, advised_investor, advisor_1, advised_startup):
    offer = submit(lifecycle, advised_investor, advised_startup)

    first = lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)
    second = lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)

    assert first.changed is True
    assert second.changed is False
    assert second.item.stage == 2
    assert len(lifecycle.list_events(offer.id, ViewerRole.INVESTOR, advised_investor.id)) == 2


def test_repeated_rejection_is_a_noop(lifecycle, advised_investor, advisor_1, startup):
    offer = submit(lifecycle, advised_investor, startup)

    lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.REJECT, advisor_1.id)
    again = lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.REJECT, advisor_1.id)

    assert again.changed is False
    assert again.item.status == OfferStatus.INVESTOR_ADVISOR_REJECTED


def test_opposite_decision_after_approval_conflicts(lifecycle, advised_investor, advisor_1, advised_startup):
    offer = submit(lifecycle, advised_investor, advised_startup)
    lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)

    with pytest.raises(ConflictError):
        lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.REJECT, advisor_1.id)


def test_wrong_advisor_is_refused(lifecycle, advised_investor, advisor_2, advised_startup):
    offer = submit(lifecycle, advised_investor, advised_startup)

    with pytest.raises(AuthorizationError):
        lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_2.id)


def test_only_startup_owner_decides_final_gate(lifecycle, investor, startup, make_user):
    offer = submit(lifecycle, investor, startup)

    with pytest.raises(AuthorizationError):
        lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, investor.id)


def test_out_of_order_decision_conflicts(lifecycle, advised_investor, advised_startup, advisor_2):
    offer = submit(lifecycle, advised_investor, advised_startup)

    # Startup advisor gate is not_required while the investor gate is pending
    with pytest.raises(ConflictError):
        lifecycle.decide(offer.id, Gate.STARTUP_ADVISOR, Decision.APPROVE, advisor_2.id)
    with pytest.raises(ConflictError):
        lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, advised_startup.owner_user_id)


def test_unknown_gate_and_decision(lifecycle, investor, startup):
    offer = submit(lifecycle, investor, startup)
    owner_id = startup.owner_user_id

    with pytest.raises(NotFoundError):
        lifecycle.decide(offer.id, "board_review", Decision.APPROVE, owner_id)
    with pytest.raises(NotFoundError):
        lifecycle.decide(offer.id, Gate.LEAD_INVESTOR, Decision.APPROVE, owner_id)
    with pytest.raises(ValidationError):
        lifecycle.decide(offer.id, Gate.STARTUP_FINAL, "maybe", owner_id)
    with pytest.raises(NotFoundError):
        lifecycle.decide(uuid4(), Gate.STARTUP_FINAL, Decision.APPROVE, owner_id)


def test_startup_rejection(lifecycle, investor, startup):
    offer = submit(lifecycle, investor, startup)

    outcome = lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.REJECT, startup.owner_user_id)

    assert outcome.item.stage == 3
    assert outcome.item.status == OfferStatus.REJECTED
    assert outcome.item.startup_approval_status == GateStatus.REJECTED


def test_duplicate_submission_names_existing_offer(lifecycle, investor, startup):
    first = submit(lifecycle, investor, startup)

    with pytest.raises(ConflictError) as exc_info:
        submit(lifecycle, investor, startup, amount="75000")

    assert exc_info.value.conflicting_item_id == first.id


def test_resubmission_replaces_rejected_offer(lifecycle, db_session, investor, startup):
    first = submit(lifecycle, investor, startup)
    lifecycle.decide(first.id, Gate.STARTUP_FINAL, Decision.REJECT, startup.owner_user_id)
    first_id = first.id

    second = submit(lifecycle, investor, startup, amount="80000")
    db_session.commit()

    assert second.id != first_id
    assert second.offer_amount == Decimal("80000")
    assert db_session.get(InvestmentOffer, first_id) is None
    assert [e.action for e in list_events(db_session, first_id)][-1] == "deleted"


@pytest.mark.parametrize("terms, field", [
    ({"offer_amount": Decimal("0"), "equity_percentage": Decimal("5")}, "offer_amount"),
    ({"offer_amount": Decimal("-10"), "equity_percentage": Decimal("5")}, "offer_amount"),
    ({"offer_amount": Decimal("100"), "equity_percentage": Decimal("100.5")}, "equity_percentage"),
    ({"offer_amount": Decimal("100"), "equity_percentage": Decimal("5"), "currency": "DOLLARS"}, "currency"),
])
def test_invalid_terms(lifecycle, investor, startup, terms, field):
    with pytest.raises(ValidationError) as exc_info:
        lifecycle.submit_offer(investor_id=investor.id, startup_id=startup.id, **terms)

    assert exc_info.value.details["field"] == field


def test_unknown_startup(lifecycle, investor):
    with pytest.raises(NotFoundError):
        lifecycle.submit_offer(
            investor_id=investor.id,
            startup_id=uuid4(),
            offer_amount=Decimal("100"),
            equity_percentage=Decimal("1"),
        )


def test_generic_submit_dispatches_on_kind(lifecycle, investor, startup):
    offer = lifecycle.submit(
        ItemKind.OFFER,
        acting_party_id=investor.id,
        terms={"startup_id": startup.id, "offer_amount": "1000", "equity_percentage": "1"},
    )

    assert isinstance(offer, InvestmentOffer)
    assert offer.investor_id == investor.id


def test_event_trail(lifecycle, advised_investor, advisor_1, startup):
    offer = submit(lifecycle, advised_investor, startup)
    lifecycle.decide(offer.id, Gate.INVESTOR_ADVISOR, Decision.APPROVE, advisor_1.id)
    lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, startup.owner_user_id)

    events = lifecycle.list_events(offer.id, ViewerRole.INVESTOR, advised_investor.id)

    assert [e.sequence for e in events] == [1, 2, 3]
    assert [e.action for e in events] == ["submitted", "decided", "decided"]
    assert events[1].gate == Gate.INVESTOR_ADVISOR
    assert events[1].actor_id == advisor_1.id
    assert (events[1].stage_before, events[1].stage_after) == (1, 3)
    assert events[2].status_after == OfferStatus.ACCEPTED.value


def test_submitter_edits_terms(lifecycle, advised_investor, startup):
    offer = submit(lifecycle, advised_investor, startup)

    edited = lifecycle.edit(ItemKind.OFFER, offer.id, advised_investor.id, {"offer_amount": "60000"})

    assert edited.offer_amount == Decimal("60000")
    assert edited.stage == 1
    assert edited.investor_advisor_approval == GateStatus.PENDING
    assert lifecycle.list_events(offer.id, ViewerRole.INVESTOR, advised_investor.id)[-1].action == "edited"


def test_edit_rules(lifecycle, investor, startup):
    offer = submit(lifecycle, investor, startup)

    with pytest.raises(AuthorizationError):
        lifecycle.edit(ItemKind.OFFER, offer.id, startup.owner_user_id, {"offer_amount": "1"})
    with pytest.raises(ValidationError):
        lifecycle.edit(ItemKind.OFFER, offer.id, investor.id, {"stage": 4})

    lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, startup.owner_user_id)
    with pytest.raises(ConflictError):
        lifecycle.edit(ItemKind.OFFER, offer.id, investor.id, {"offer_amount": "1"})


def test_contact_reveal(lifecycle, make_user, investor, startup):
    offer = submit(lifecycle, investor, startup)

    with pytest.raises(ConflictError):
        lifecycle.reveal_contact_details(offer.id, investor.id)

    lifecycle.decide(offer.id, Gate.STARTUP_FINAL, Decision.APPROVE, startup.owner_user_id)

    with pytest.raises(AuthorizationError):
        lifecycle.reveal_contact_details(offer.id, make_user().id)

    revealed = lifecycle.reveal_contact_details(offer.id, startup.owner_user_id)
    again = lifecycle.reveal_contact_details(offer.id, investor.id)

    assert revealed.contact_details_revealed is True
    assert again.contact_details_revealed is True
    actions = [e.action for e in lifecycle.list_events(offer.id, ViewerRole.INVESTOR, investor.id)]
    assert actions.count("contact_revealed") == 1
