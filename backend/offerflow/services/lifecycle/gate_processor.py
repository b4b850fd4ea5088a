"""
Gate processor - applies one approve/reject decision at one gate of one item

Flow:
1. Lock the item row (SELECT ... FOR UPDATE)
2. Check the acting party is the gate's approver
3. Same decision already recorded -> no-op (idempotent)
4. Terminal item, or gate not currently awaiting a decision -> ConflictError
5. Approve: gate -> approved, then the stage resolver places the item on its next stage
   Reject: gate -> rejected, overall status -> the gate's rejection label
   Final approve: stage 4, status accepted
6. Write everything in one conditional UPDATE guarded on (gate = pending, stage = gate stage)
7. Zero rows matched -> re-read: same decision already applied is a no-op, anything else conflicts

Caller MUST commit the transaction.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from offerflow.core.approvals.statuses import Decision, Gate, GateStatus, ItemKind, parse_enum
from offerflow.services.lifecycle.chains import (
    ACCEPTED_STAGE,
    Approver,
    ChainDescriptor,
    FinalGateDefinition,
    Party,
    is_terminal,
    status_value,
)
from offerflow.services.lifecycle.conflicts import find_accepted_item
from offerflow.services.lifecycle.directory import AdvisorDirectory, affiliations_for
from offerflow.services.lifecycle.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from offerflow.services.lifecycle.events import record_event
from offerflow.services.lifecycle.stage_resolver import resolve_stage, snapshot_of
from offerflow.services.lifecycle.store import conditional_update, lock_item, reload_item
from offerflow.utils.metrics import record_gate_decision

logger = logging.getLogger(__name__)


@dataclass
class DecisionOutcome:
    item_kind: ItemKind
    item: Any
    gate: Gate
    decision: Decision
    changed: bool
    stage_before: int
    stage_after: int


def parse_gate(gate) -> Gate:
    try:
        return parse_enum(Gate, gate)
    except ValueError as e:
        raise NotFoundError(str(e)) from None


def parse_decision(decision) -> Decision:
    try:
        return parse_enum(Decision, decision)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def _has_rejection(chain: ChainDescriptor, item) -> bool:
    return any(GateStatus(getattr(item, f)) == GateStatus.REJECTED for f in chain.status_fields())


def authorize_gate(
    chain: ChainDescriptor,
    definition,
    item,
    acting_party_id: UUID,
    directory: AdvisorDirectory,
) -> None:
    """
    Raise AuthorizationError unless `acting_party_id` decides this gate.

    - advisor gates: the actor's issued advisor code equals the party's current affiliation
    - lead-investor gate: the actor is the item's lead investor
    - startup final: the actor owns the startup
    """
    gate_name = definition.gate.value
    if isinstance(definition, FinalGateDefinition):
        owner_id = directory.startup_owner_id(chain.party_id(item, Party.STARTUP))
        if owner_id is None or owner_id != acting_party_id:
            raise AuthorizationError(f"Only the startup owner can decide the {gate_name} gate", gate=gate_name)
        return

    party_id = chain.party_id(item, definition.party)
    if definition.approver == Approver.PARTY:
        if party_id != acting_party_id:
            raise AuthorizationError(f"Only the {definition.party.value} can decide the {gate_name} gate", gate=gate_name)
        return

    governing_code = directory.advisor_code_of_party(party_id)
    acting_code = directory.issued_advisor_code(acting_party_id)
    if governing_code is None or acting_code is None or acting_code != governing_code:
        raise AuthorizationError(f"Acting party is not the advisor for the {gate_name} gate", gate=gate_name)


def apply_decision(
    *,
    db: Session,
    chain: ChainDescriptor,
    item_id: UUID,
    gate,
    decision,
    acting_party_id: UUID,
    directory: AdvisorDirectory,
) -> DecisionOutcome:
    """
    Apply `decision` at `gate` of item `item_id`.

    Returns:
        DecisionOutcome; `changed` is False for an idempotent repeat of an applied decision

    Raises:
        NotFoundError: Unknown item, or the chain has no such gate => 404
        AuthorizationError: Acting party is not the gate's approver => 403
        ConflictError: Terminal item, gate not pending, or opposite decision already recorded => 409
        ValidationError: Unknown decision value => 400
    """
    gate = parse_gate(gate)
    decision = parse_decision(decision)
    log_extra = {
        "item_kind": chain.kind.value,
        "item_id": str(item_id),
        "gate": gate.value,
        "decision": decision.value,
        "actor_id": str(acting_party_id),
    }

    item = lock_item(db, chain, item_id)
    if item is None:
        raise NotFoundError(f"{chain.kind.value} {item_id} not found", item_id=str(item_id))

    definition = chain.gate_definition(gate)
    if definition is None:
        raise NotFoundError(f"{chain.kind.value} has no {gate.value} gate", gate=gate.value)

    try:
        authorize_gate(chain, definition, item, acting_party_id, directory)
    except AuthorizationError:
        record_gate_decision(chain.kind.value, gate.value, decision.value, "forbidden")
        logger.warning("Gate decision refused: wrong party", extra=log_extra)
        raise

    target = GateStatus.APPROVED if decision == Decision.APPROVE else GateStatus.REJECTED
    field = definition.status_field
    current = GateStatus(getattr(item, field))
    stage_before = item.stage

    if current == target:
        if decision == Decision.APPROVE and _has_rejection(chain, item):
            _conflict(chain, gate, decision, log_extra, f"{chain.kind.value} {item_id} was rejected")
        return _noop(chain, item, gate, decision, log_extra)

    if is_terminal(chain, item):
        _conflict(
            chain, gate, decision, log_extra,
            f"{chain.kind.value} {item_id} is in terminal status {status_value(item)}",
        )
    if current != GateStatus.PENDING or item.stage != definition.stage:
        _conflict(
            chain, gate, decision, log_extra,
            f"{gate.value} gate is {current.value} at stage {item.stage}; it is not awaiting a decision",
        )

    if decision == Decision.REJECT:
        values = {field: GateStatus.REJECTED, "status": definition.rejected_label}
    elif isinstance(definition, FinalGateDefinition):
        investor_party = chain.submitter
        if chain.accepted_is_exclusive:
            existing = find_accepted_item(
                db,
                chain.party_id(item, investor_party),
                chain.party_id(item, Party.STARTUP),
                exclude_id=item.id,
            )
            if existing is not None:
                _conflict(
                    chain, gate, decision, log_extra,
                    "Investor already has an accepted deal with this startup",
                    conflicting_item_id=existing,
                )
        values = {field: GateStatus.APPROVED, "stage": ACCEPTED_STAGE}
        if definition.accepted_label is not None:
            values["status"] = definition.accepted_label
    else:
        snapshot = snapshot_of(chain, item)
        snapshot[field] = GateStatus.APPROVED
        parties = {party: chain.party_id(item, party) for party in chain.parties}
        resolution = resolve_stage(chain, snapshot, affiliations_for(directory, parties))
        values = {field: GateStatus.APPROVED, **resolution.changes}

    updated = conditional_update(
        db, chain, item.id,
        expected={field: GateStatus.PENDING, "stage": definition.stage},
        values=values,
    )
    item = reload_item(db, chain, item_id)
    if not updated:
        if GateStatus(getattr(item, field)) == target:
            return _noop(chain, item, gate, decision, log_extra)
        _conflict(chain, gate, decision, log_extra, f"{gate.value} gate was decided concurrently")

    record_event(
        db,
        item_kind=chain.kind,
        item_id=item.id,
        action="decided",
        actor_id=acting_party_id,
        gate=gate,
        decision=decision,
        stage_before=stage_before,
        stage_after=item.stage,
        status_after=status_value(item),
    )
    record_gate_decision(chain.kind.value, gate.value, decision.value, "applied")
    logger.info(
        "Gate decision applied",
        extra={**log_extra, "stage_before": stage_before, "stage_after": item.stage, "status": status_value(item)},
    )
    return DecisionOutcome(
        item_kind=chain.kind,
        item=item,
        gate=gate,
        decision=decision,
        changed=True,
        stage_before=stage_before,
        stage_after=item.stage,
    )


def _noop(chain: ChainDescriptor, item, gate: Gate, decision: Decision, log_extra: dict) -> DecisionOutcome:
    record_gate_decision(chain.kind.value, gate.value, decision.value, "noop")
    logger.info("Gate decision already applied", extra=log_extra)
    return DecisionOutcome(
        item_kind=chain.kind,
        item=item,
        gate=gate,
        decision=decision,
        changed=False,
        stage_before=item.stage,
        stage_after=item.stage,
    )


def _conflict(
    chain: ChainDescriptor,
    gate: Gate,
    decision: Decision,
    log_extra: dict,
    message: str,
    conflicting_item_id: Optional[UUID] = None,
) -> None:
    record_gate_decision(chain.kind.value, gate.value, decision.value, "conflict")
    logger.warning("Gate decision conflict", extra={**log_extra, "reason": message})
    raise ConflictError(message, conflicting_item_id=conflicting_item_id, gate=gate.value)
