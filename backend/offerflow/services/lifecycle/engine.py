"""
Offer lifecycle engine - one surface over every item kind

Operations:
- submit_offer / submit_opportunity / submit_co_investment_offer (and the generic submit)
- decide: dispatches to the gate processor
- list_visible / get_for_role: visibility filter over role-scoped candidates
- edit, reveal_contact_details, update_opportunity_status, list_events

Every write goes through the caller's Session; the caller commits on success
and rolls back on any LifecycleError.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from offerflow.core.approvals.statuses import (
    GateStatus,
    ItemKind,
    OfferStatus,
    OpportunityStatus,
    ViewerRole,
    parse_enum,
)
from offerflow.core.users.models import User
from offerflow.core.startups.models import Startup
from offerflow.core.offers.models import InvestmentOffer, OfferEvent
from offerflow.core.co_investment.models import CoInvestmentOpportunity, CoInvestmentOffer
from offerflow.infrastructure.settings import get_settings
from offerflow.services.lifecycle.chains import (
    ACCEPTED_STAGE,
    Approver,
    CHAINS,
    CO_INVESTMENT_OFFER_CHAIN,
    ChainDescriptor,
    OFFER_CHAIN,
    OPPORTUNITY_CHAIN,
    Party,
    chain_for,
    is_terminal,
    status_value,
)
from offerflow.services.lifecycle.conflicts import (
    find_active_opportunity,
    find_existing_offer,
    find_open_co_investment_offer,
    find_open_offer,
    is_rejected_offer,
)
from offerflow.services.lifecycle.directory import AdvisorDirectory, SqlAdvisorDirectory, affiliations_for
from offerflow.services.lifecycle.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from offerflow.services.lifecycle.events import list_events, record_event
from offerflow.services.lifecycle.gate_processor import DecisionOutcome, apply_decision
from offerflow.services.lifecycle.listings import ListingDefaults, ListingStore, SqlListingStore
from offerflow.services.lifecycle.stage_resolver import resolve_stage, snapshot_of
from offerflow.services.lifecycle.store import conditional_update, lock_item, reload_item, to_column_values
from offerflow.services.lifecycle.visibility import check_visibility, filter_visible
from offerflow.utils.metrics import record_submission

logger = logging.getLogger(__name__)

OFFER_TERMS = ("offer_amount", "equity_percentage", "currency")
OPPORTUNITY_TERMS = (
    "investment_amount",
    "equity_percentage",
    "minimum_co_investment",
    "maximum_co_investment",
    "description",
    "currency",
)
EDITABLE_TERMS = {
    ItemKind.OFFER: OFFER_TERMS,
    ItemKind.CO_INVESTMENT_OFFER: OFFER_TERMS,
    ItemKind.CO_INVESTMENT_OPPORTUNITY: OPPORTUNITY_TERMS,
}


def _amount(value, name: str, *, allow_none: bool = False) -> Optional[Decimal]:
    if value is None:
        if allow_none:
            return None
        raise ValidationError(f"{name} is required", field=name)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number", field=name) from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{name} must be greater than 0", field=name)
    return amount


def _equity(value) -> Decimal:
    if value is None:
        raise ValidationError("equity_percentage is required", field="equity_percentage")
    try:
        equity = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("equity_percentage must be a number", field="equity_percentage") from None
    if not equity.is_finite() or equity < 0 or equity > 100:
        raise ValidationError("equity_percentage must be between 0 and 100", field="equity_percentage")
    return equity


def _currency(value: Optional[str]) -> str:
    currency = (value or get_settings().DEFAULT_CURRENCY).strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ValidationError(f"Invalid currency code: {value!r}", field="currency")
    return currency


def _check_ticket_bounds(minimum: Optional[Decimal], maximum: Optional[Decimal]) -> None:
    if minimum is not None and maximum is not None and minimum > maximum:
        raise ValidationError(
            "minimum_co_investment cannot exceed maximum_co_investment",
            field="minimum_co_investment",
        )


def _check_ticket(opportunity: CoInvestmentOpportunity, amount: Decimal) -> None:
    if opportunity.minimum_co_investment is not None and amount < opportunity.minimum_co_investment:
        raise ValidationError(
            f"offer_amount is below the minimum co-investment of {opportunity.minimum_co_investment}",
            field="offer_amount",
        )
    if opportunity.maximum_co_investment is not None and amount > opportunity.maximum_co_investment:
        raise ValidationError(
            f"offer_amount exceeds the maximum co-investment of {opportunity.maximum_co_investment}",
            field="offer_amount",
        )


class OfferLifecycleEngine:
    """
    Orchestrates submission, gate decisions and visibility for every item kind.

    Collaborators default to the SQL-backed directory and listing store of the
    same session; tests may pass their own.
    """

    def __init__(
        self,
        db: Session,
        directory: Optional[AdvisorDirectory] = None,
        listing_store: Optional[ListingStore] = None,
        listing_defaults: Optional[ListingDefaults] = None,
    ):
        self.db = db
        self.directory = directory or SqlAdvisorDirectory(db)
        self.listing_store = listing_store or SqlListingStore(db)
        self.listing_defaults = listing_defaults or ListingDefaults.from_settings()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, item_kind, *, acting_party_id: UUID, terms: Mapping[str, Any]):
        """Generic entry point; dispatches on item_kind"""
        kind = parse_enum(ItemKind, item_kind)
        if kind == ItemKind.OFFER:
            return self.submit_offer(investor_id=acting_party_id, **terms)
        if kind == ItemKind.CO_INVESTMENT_OPPORTUNITY:
            return self.submit_opportunity(lead_investor_id=acting_party_id, **terms)
        return self.submit_co_investment_offer(co_investor_id=acting_party_id, **terms)

    def submit_offer(
        self,
        *,
        investor_id: UUID,
        startup_id: UUID,
        offer_amount,
        equity_percentage,
        currency: Optional[str] = None,
        opportunity_id: Optional[UUID] = None,
    ) -> InvestmentOffer:
        """
        Submit a plain investment offer.

        Flow:
        1. Validate terms
        2. Lock the (investor, startup) slot; a rejected offer in it is deleted,
           any other offer is a conflict, as is an open co-investment offer
           to the same startup
        3. Find or create the startup's listing
        4. Insert at stage 1 and let the stage resolver place it

        Raises:
            ValidationError: Bad terms => 400
            NotFoundError: Unknown investor or startup => 404
            ConflictError: Pending or accepted offer or co-investment offer already exists (names it) => 409
        """
        chain = OFFER_CHAIN
        amount = _amount(offer_amount, "offer_amount")
        equity = _equity(equity_percentage)
        currency = _currency(currency)
        self._require_user(investor_id)
        startup = self._require_startup(startup_id)

        open_ticket_id = find_open_co_investment_offer(self.db, investor_id, startup.id)
        if open_ticket_id is not None:
            self._submission_conflict(
                chain,
                "A co-investment offer from this investor to this startup is already in progress",
                open_ticket_id,
            )
        existing = find_existing_offer(self.db, investor_id, startup.id)
        if existing is not None:
            if not is_rejected_offer(existing):
                self._submission_conflict(
                    chain,
                    "An offer from this investor to this startup is already in progress",
                    existing.id,
                )
            self._delete_rejected_offer(existing, investor_id)

        listing_id = self.listing_store.find_or_create_listing(startup.id, self.listing_defaults)
        offer = InvestmentOffer(
            investor_id=investor_id,
            startup_id=startup.id,
            listing_id=listing_id,
            opportunity_id=opportunity_id,
            offer_amount=amount,
            equity_percentage=equity,
            currency=currency,
        )
        return self._insert(chain, offer, investor_id)

    def submit_opportunity(
        self,
        *,
        lead_investor_id: UUID,
        startup_id: UUID,
        investment_amount,
        equity_percentage,
        minimum_co_investment=None,
        maximum_co_investment=None,
        description: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> CoInvestmentOpportunity:
        """
        Open a co-investment opportunity.

        Raises:
            ValidationError: Bad terms or ticket bounds => 400
            NotFoundError: Unknown lead investor or startup => 404
            ConflictError: An active opportunity exists for (startup, lead investor) => 409
        """
        chain = OPPORTUNITY_CHAIN
        amount = _amount(investment_amount, "investment_amount")
        equity = _equity(equity_percentage)
        minimum = _amount(minimum_co_investment, "minimum_co_investment", allow_none=True)
        maximum = _amount(maximum_co_investment, "maximum_co_investment", allow_none=True)
        _check_ticket_bounds(minimum, maximum)
        currency = _currency(currency)
        self._require_user(lead_investor_id)
        startup = self._require_startup(startup_id)

        existing_id = find_active_opportunity(self.db, startup.id, lead_investor_id)
        if existing_id is not None:
            self._submission_conflict(
                chain,
                "An active co-investment opportunity already exists for this startup",
                existing_id,
            )

        listing_id = self.listing_store.find_or_create_listing(startup.id, self.listing_defaults)
        opportunity = CoInvestmentOpportunity(
            startup_id=startup.id,
            lead_investor_id=lead_investor_id,
            listing_id=listing_id,
            investment_amount=amount,
            equity_percentage=equity,
            minimum_co_investment=minimum,
            maximum_co_investment=maximum,
            description=description,
            currency=currency,
            status=OpportunityStatus.ACTIVE,
        )
        return self._insert(chain, opportunity, lead_investor_id)

    def submit_co_investment_offer(
        self,
        *,
        co_investor_id: UUID,
        opportunity_id: UUID,
        offer_amount,
        equity_percentage,
        currency: Optional[str] = None,
    ) -> CoInvestmentOffer:
        """
        Submit a co-investor's ticket against an open opportunity.

        The opportunity must be active and accepted by the startup (stage 4),
        the ticket must lie within its bounds and the lead investor cannot
        co-invest in their own opportunity.

        Raises:
            ValidationError: Bad terms, ticket outside bounds, opportunity not open => 400
            NotFoundError: Unknown co-investor or opportunity => 404
            ConflictError: The co-investor already has a non-rejected offer or ticket for this startup => 409
        """
        chain = CO_INVESTMENT_OFFER_CHAIN
        amount = _amount(offer_amount, "offer_amount")
        equity = _equity(equity_percentage)
        self._require_user(co_investor_id)

        opportunity = lock_item(self.db, OPPORTUNITY_CHAIN, opportunity_id)
        if opportunity is None:
            raise NotFoundError(f"Co-investment opportunity {opportunity_id} not found", item_id=str(opportunity_id))
        if OpportunityStatus(opportunity.status) != OpportunityStatus.ACTIVE or opportunity.stage != ACCEPTED_STAGE:
            raise ValidationError(
                "Co-investment opportunity is not open for co-investment offers",
                opportunity_id=str(opportunity_id),
                opportunity_status=status_value(opportunity),
                opportunity_stage=opportunity.stage,
            )
        if opportunity.lead_investor_id == co_investor_id:
            raise ValidationError("Lead investor cannot co-invest in their own opportunity")
        _check_ticket(opportunity, amount)

        existing_id = find_open_co_investment_offer(self.db, co_investor_id, opportunity.startup_id)
        if existing_id is not None:
            self._submission_conflict(
                chain,
                "A co-investment offer from this investor to this startup is already in progress",
                existing_id,
            )
        existing_id = find_open_offer(self.db, co_investor_id, opportunity.startup_id)
        if existing_id is not None:
            self._submission_conflict(
                chain,
                "An offer from this investor to this startup is already in progress",
                existing_id,
            )

        co_offer = CoInvestmentOffer(
            opportunity_id=opportunity.id,
            co_investor_id=co_investor_id,
            lead_investor_id=opportunity.lead_investor_id,
            startup_id=opportunity.startup_id,
            offer_amount=amount,
            equity_percentage=equity,
            currency=_currency(currency or opportunity.currency),
        )
        return self._insert(chain, co_offer, co_investor_id)

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(
        self,
        item_id: UUID,
        gate,
        decision,
        acting_party_id: UUID,
        item_kind=None,
    ) -> DecisionOutcome:
        """Apply one gate decision; the item kind is looked up when not given"""
        chain = chain_for(item_kind) if item_kind is not None else self._chain_of(item_id)
        return apply_decision(
            db=self.db,
            chain=chain,
            item_id=item_id,
            gate=gate,
            decision=decision,
            acting_party_id=acting_party_id,
            directory=self.directory,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_visible(self, item_kind, role, party_id: UUID) -> List:
        """Items of one kind visible to (role, party); fail-closed items are left out"""
        chain = chain_for(item_kind)
        role = parse_enum(ViewerRole, role)
        condition = self._candidate_condition(chain, role, party_id)
        if condition is None:
            return []
        candidates = self.db.execute(
            select(chain.model).where(condition).order_by(chain.model.created_at.desc())
        ).scalars().all()
        return filter_visible(chain, candidates, role, party_id, self.directory)

    def get_for_role(self, item_kind, item_id: UUID, role, party_id: UUID):
        """
        One item as seen by (role, party).

        Raises:
            NotFoundError: Unknown item, or not visible to this viewer => 404
            InconsistentStateError: not_required gate on a party that has an advisor => 409
        """
        chain = chain_for(item_kind)
        role = parse_enum(ViewerRole, role)
        item = self.db.get(chain.model, item_id)
        if item is None or not check_visibility(chain, item, role, party_id, self.directory):
            raise NotFoundError(f"{chain.kind.value} {item_id} not found", item_id=str(item_id))
        return item

    def list_events(self, item_id: UUID, role, party_id: UUID, item_kind=None) -> List[OfferEvent]:
        """
        Activity trail of one item, for viewers that can see the item.

        Raises:
            NotFoundError: Unknown item, or not visible to this viewer => 404
        """
        chain = chain_for(item_kind) if item_kind is not None else self._chain_of(item_id)
        item = self.get_for_role(chain.kind, item_id, role, party_id)
        return list_events(self.db, item.id)

    # ------------------------------------------------------------------
    # Supplemented operations
    # ------------------------------------------------------------------

    def edit(self, item_kind, item_id: UUID, acting_party_id: UUID, terms: Mapping[str, Any]):
        """
        Change the terms of a non-terminal item. Only the submitter may edit;
        gate statuses and stage are left untouched.

        Raises:
            NotFoundError, AuthorizationError, ConflictError (terminal item), ValidationError
        """
        chain = chain_for(item_kind)
        item = lock_item(self.db, chain, item_id)
        if item is None:
            raise NotFoundError(f"{chain.kind.value} {item_id} not found", item_id=str(item_id))
        if chain.party_id(item, chain.submitter) != acting_party_id:
            raise AuthorizationError(f"Only the submitting {chain.submitter.value} can edit this item")
        if is_terminal(chain, item):
            raise ConflictError(
                f"{chain.kind.value} {item_id} is in terminal status {status_value(item)}",
                conflicting_item_id=item.id,
            )

        allowed = EDITABLE_TERMS[chain.kind]
        unknown = sorted(set(terms) - set(allowed))
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(unknown)}", fields=unknown)

        changes = self._validated_terms(chain, item, terms)
        if not changes:
            return item
        for name, value in changes.items():
            setattr(item, name, value)
        self.db.flush()

        record_event(
            self.db,
            item_kind=chain.kind,
            item_id=item.id,
            action="edited",
            actor_id=acting_party_id,
            stage_before=item.stage,
            stage_after=item.stage,
            status_after=status_value(item),
            details={name: str(value) if value is not None else None for name, value in changes.items()},
        )
        logger.info(
            "Lifecycle item edited",
            extra={"item_kind": chain.kind.value, "item_id": str(item.id), "fields": sorted(changes)},
        )
        return item

    def reveal_contact_details(self, offer_id: UUID, acting_party_id: UUID) -> InvestmentOffer:
        """
        Mark an accepted plain offer's contact details as revealed.

        Allowed for the investor, the startup owner, and either party's advisor.
        Repeating the call changes nothing.
        """
        chain = OFFER_CHAIN
        offer = lock_item(self.db, chain, offer_id)
        if offer is None:
            raise NotFoundError(f"offer {offer_id} not found", item_id=str(offer_id))
        if not self._may_reveal(offer, acting_party_id):
            raise AuthorizationError("Only the deal parties or their advisors can reveal contact details")
        if OfferStatus(offer.status) != OfferStatus.ACCEPTED:
            raise ConflictError(
                "Contact details can only be revealed on an accepted offer",
                conflicting_item_id=offer.id,
            )
        if offer.contact_details_revealed:
            return offer

        conditional_update(
            self.db, chain, offer.id,
            expected={"contact_details_revealed": False},
            values={"contact_details_revealed": True},
        )
        offer = reload_item(self.db, chain, offer.id)
        record_event(
            self.db,
            item_kind=chain.kind,
            item_id=offer.id,
            action="contact_revealed",
            actor_id=acting_party_id,
            stage_before=offer.stage,
            stage_after=offer.stage,
            status_after=status_value(offer),
        )
        logger.info("Contact details revealed", extra={"item_kind": chain.kind.value, "item_id": str(offer.id)})
        return offer

    def update_opportunity_status(
        self,
        opportunity_id: UUID,
        status,
        acting_party_id: UUID,
    ) -> CoInvestmentOpportunity:
        """
        Lead investor moves an opportunity between active and inactive, or closes it.

        completed and cancelled are terminal. Re-activation re-checks that no
        other active opportunity exists for (startup, lead investor).
        """
        chain = OPPORTUNITY_CHAIN
        try:
            target = parse_enum(OpportunityStatus, status)
        except ValueError as e:
            raise ValidationError(str(e), field="status") from None

        opportunity = lock_item(self.db, chain, opportunity_id)
        if opportunity is None:
            raise NotFoundError(f"Co-investment opportunity {opportunity_id} not found", item_id=str(opportunity_id))
        if opportunity.lead_investor_id != acting_party_id:
            raise AuthorizationError("Only the lead investor can change the opportunity status")

        current = OpportunityStatus(opportunity.status)
        if current == target:
            return opportunity
        if current.value in chain.terminal_statuses:
            raise ConflictError(
                f"Co-investment opportunity is {current.value}",
                conflicting_item_id=opportunity.id,
            )
        if target == OpportunityStatus.ACTIVE:
            existing_id = find_active_opportunity(
                self.db, opportunity.startup_id, opportunity.lead_investor_id, exclude_id=opportunity.id,
            )
            if existing_id is not None:
                raise ConflictError(
                    "An active co-investment opportunity already exists for this startup",
                    conflicting_item_id=existing_id,
                )

        updated = conditional_update(
            self.db, chain, opportunity.id,
            expected={"status": current},
            values={"status": target},
        )
        opportunity = reload_item(self.db, chain, opportunity.id)
        if not updated:
            raise ConflictError("Opportunity status changed concurrently", conflicting_item_id=opportunity.id)

        record_event(
            self.db,
            item_kind=chain.kind,
            item_id=opportunity.id,
            action="status_changed",
            actor_id=acting_party_id,
            stage_before=opportunity.stage,
            stage_after=opportunity.stage,
            status_after=target.value,
            details={"from": current.value, "to": target.value},
        )
        logger.info(
            "Opportunity status changed",
            extra={"item_id": str(opportunity.id), "from_status": current.value, "to_status": target.value},
        )
        return opportunity

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_user(self, user_id: UUID) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", item_id=str(user_id))
        return user

    def _require_startup(self, startup_id: UUID) -> Startup:
        startup = self.db.get(Startup, startup_id)
        if startup is None:
            raise NotFoundError(f"Startup {startup_id} not found", item_id=str(startup_id))
        return startup

    def _chain_of(self, item_id: UUID) -> ChainDescriptor:
        for chain in CHAINS.values():
            if self.db.get(chain.model, item_id) is not None:
                return chain
        raise NotFoundError(f"Item {item_id} not found", item_id=str(item_id))

    def _submission_conflict(self, chain: ChainDescriptor, message: str, conflicting_item_id: UUID) -> None:
        record_submission(chain.kind.value, "conflict")
        logger.info(
            "Submission conflict",
            extra={"item_kind": chain.kind.value, "conflicting_item_id": str(conflicting_item_id)},
        )
        raise ConflictError(message, conflicting_item_id=conflicting_item_id)

    def _delete_rejected_offer(self, offer: InvestmentOffer, actor_id: UUID) -> None:
        """Free the (investor, startup) slot held by a rejected offer"""
        record_event(
            self.db,
            item_kind=ItemKind.OFFER,
            item_id=offer.id,
            action="deleted",
            actor_id=actor_id,
            stage_before=offer.stage,
            status_after=status_value(offer),
            details={"reason": "resubmission"},
        )
        self.db.delete(offer)
        self.db.flush()
        logger.info(
            "Rejected offer deleted on resubmission",
            extra={"item_kind": ItemKind.OFFER.value, "item_id": str(offer.id)},
        )

    def _place(self, chain: ChainDescriptor, item) -> None:
        """Initial gate values, then let the stage resolver pick the starting stage"""
        item.stage = 1
        for definition in chain.gates:
            initial = GateStatus.NOT_REQUIRED if definition.conditional else GateStatus.PENDING
            setattr(item, definition.status_field, initial)
        setattr(item, chain.final.status_field, GateStatus.PENDING)
        if chain.final.pending_label is not None:
            item.status = chain.status_enum(chain.final.pending_label)

        parties = {party: chain.party_id(item, party) for party in chain.parties}
        resolution = resolve_stage(chain, snapshot_of(chain, item), affiliations_for(self.directory, parties))
        for name, value in to_column_values(chain, resolution.changes).items():
            setattr(item, name, value)

    def _insert(self, chain: ChainDescriptor, item, actor_id: UUID):
        self._place(chain, item)
        try:
            with self.db.begin_nested():
                self.db.add(item)
                self.db.flush()
        except IntegrityError:
            record_submission(chain.kind.value, "conflict")
            logger.warning("Submission lost a uniqueness race", extra={"item_kind": chain.kind.value})
            raise ConflictError(f"A conflicting {chain.kind.value} was submitted concurrently") from None

        record_event(
            self.db,
            item_kind=chain.kind,
            item_id=item.id,
            action="submitted",
            actor_id=actor_id,
            stage_after=item.stage,
            status_after=status_value(item),
        )
        record_submission(chain.kind.value, "created")
        logger.info(
            "Lifecycle item submitted",
            extra={
                "item_kind": chain.kind.value,
                "item_id": str(item.id),
                "stage": item.stage,
                "status": status_value(item),
            },
        )
        return item

    def _candidate_condition(self, chain: ChainDescriptor, role: ViewerRole, party_id: UUID):
        model = chain.model
        if role == ViewerRole.STARTUP:
            startup_ids = self.directory.startup_ids_owned_by(party_id)
            return model.startup_id.in_(startup_ids) if startup_ids else None
        if role == ViewerRole.INVESTOR:
            return getattr(model, chain.parties[chain.submitter]) == party_id
        if role == ViewerRole.LEAD_INVESTOR:
            if Party.LEAD_INVESTOR not in chain.parties:
                return None
            return getattr(model, chain.parties[Party.LEAD_INVESTOR]) == party_id

        code = self.directory.issued_advisor_code(party_id)
        if code is None:
            return None
        advised = self.directory.parties_advised_by(code)
        if not advised:
            return None
        columns = {
            chain.parties[definition.party]
            for definition in chain.gates
            if definition.approver == Approver.ADVISOR
        }
        return or_(*(getattr(model, column).in_(advised) for column in sorted(columns)))

    def _validated_terms(self, chain: ChainDescriptor, item, terms: Mapping[str, Any]) -> dict:
        changes = {}
        for name, value in terms.items():
            if name in ("offer_amount", "investment_amount"):
                value = _amount(value, name)
            elif name in ("minimum_co_investment", "maximum_co_investment"):
                value = _amount(value, name, allow_none=True)
            elif name == "equity_percentage":
                value = _equity(value)
            elif name == "currency":
                value = _currency(value)
            if getattr(item, name) != value:
                changes[name] = value

        if chain.kind == ItemKind.CO_INVESTMENT_OPPORTUNITY:
            _check_ticket_bounds(
                changes.get("minimum_co_investment", item.minimum_co_investment),
                changes.get("maximum_co_investment", item.maximum_co_investment),
            )
        elif chain.kind == ItemKind.CO_INVESTMENT_OFFER and "offer_amount" in changes:
            _check_ticket(item.opportunity, changes["offer_amount"])
        return changes

    def _may_reveal(self, offer: InvestmentOffer, acting_party_id: UUID) -> bool:
        if acting_party_id == offer.investor_id:
            return True
        if self.directory.startup_owner_id(offer.startup_id) == acting_party_id:
            return True
        acting_code = self.directory.issued_advisor_code(acting_party_id)
        if acting_code is None:
            return False
        return acting_code in (
            self.directory.advisor_code_of_party(offer.investor_id),
            self.directory.advisor_code_of_party(offer.startup_id),
        )
