"""
Stage resolver

Pure function from (chain, persisted gate fields, advisor affiliation facts)
to the changes that place an item on its correct stage. Called on submission
and after every approval; never after a rejection.

Walk:
- gates already behind the current stage are passed;
- an approved gate is passed;
- a conditional gate whose party has no advisor becomes not_required and is passed;
- the first remaining gate becomes pending and the item holds on that gate's stage;
- when every gate is passed the item moves to stage 3 with the startup decision pending.

Stage 4 is never produced here: only an explicit startup accept reaches it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from offerflow.core.approvals.statuses import Gate, GateStatus, parse_gate_status
from offerflow.services.lifecycle.chains import ChainDescriptor, Party, STARTUP_REVIEW_STAGE


@dataclass(frozen=True)
class Resolution:
    """Outcome of a resolver pass; `changes` only holds fields whose value differs"""
    stage: int
    next_gate: Optional[Gate]
    changes: Dict[str, Any] = field(default_factory=dict)

    @property
    def advanced(self) -> bool:
        return "stage" in self.changes


def snapshot_of(chain: ChainDescriptor, item) -> Dict[str, Any]:
    """Read the fields the resolver depends on from a persisted row"""
    snapshot = {"stage": item.stage, "status": getattr(item, "status", None)}
    for status_field in chain.status_fields():
        snapshot[status_field] = getattr(item, status_field)
    return snapshot


def _set(changes: Dict[str, Any], snapshot: Mapping[str, Any], key: str, value) -> None:
    current = snapshot.get(key)
    current = getattr(current, "value", current)
    target = getattr(value, "value", value)
    if current != target:
        changes[key] = value


def resolve_stage(
    chain: ChainDescriptor,
    snapshot: Mapping[str, Any],
    affiliations: Mapping[Party, bool],
) -> Resolution:
    """
    Compute the stage an item should occupy.

    Args:
        chain: Descriptor of the item kind
        snapshot: Current stage, status and gate fields (see snapshot_of)
        affiliations: Party -> has an advisor; blank codes must already be mapped to False

    Returns:
        Resolution with the target stage, the gate that must act next (None if
        the item is stuck on a rejection) and the field changes needed to get there.
        Applying the changes and resolving again yields no changes.

    Raises:
        ValueError: a gate field holds a value outside GateStatus
    """
    stage = int(snapshot["stage"])
    changes: Dict[str, Any] = {}

    if stage >= STARTUP_REVIEW_STAGE:
        final_status = parse_gate_status(snapshot[chain.final.status_field])
        next_gate = chain.final.gate if final_status == GateStatus.PENDING and stage == STARTUP_REVIEW_STAGE else None
        return Resolution(stage=stage, next_gate=next_gate)

    for definition in chain.gates:
        status = parse_gate_status(snapshot[definition.status_field])
        if definition.stage < stage or status == GateStatus.APPROVED:
            continue
        if status == GateStatus.REJECTED:
            return Resolution(stage=stage, next_gate=None)

        if definition.conditional and not affiliations.get(definition.party, False):
            _set(changes, snapshot, definition.status_field, GateStatus.NOT_REQUIRED)
            continue

        _set(changes, snapshot, definition.status_field, GateStatus.PENDING)
        _set(changes, snapshot, "stage", definition.stage)
        if definition.pending_label is not None:
            _set(changes, snapshot, "status", definition.pending_label)
        return Resolution(stage=definition.stage, next_gate=definition.gate, changes=changes)

    _set(changes, snapshot, chain.final.status_field, GateStatus.PENDING)
    _set(changes, snapshot, "stage", STARTUP_REVIEW_STAGE)
    if chain.final.pending_label is not None:
        _set(changes, snapshot, "status", chain.final.pending_label)
    return Resolution(stage=STARTUP_REVIEW_STAGE, next_gate=chain.final.gate, changes=changes)
