"""
Visibility filter - may viewer R see item X now?

Pure reads: the item's persisted stage and gate fields plus a fresh
affiliation lookup from the directory. Nothing here writes.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from offerflow.core.approvals.statuses import GateStatus, ViewerRole, parse_gate_status
from offerflow.services.lifecycle.chains import (
    Approver,
    ChainDescriptor,
    Party,
    STARTUP_REVIEW_STAGE,
)
from offerflow.services.lifecycle.directory import AdvisorDirectory
from offerflow.services.lifecycle.errors import InconsistentStateError
from offerflow.utils.metrics import record_visibility_fail_closed

logger = logging.getLogger(__name__)


def visible_to_startup(chain: ChainDescriptor, item, directory: AdvisorDirectory) -> bool:
    """
    Startup-side rule, independent of who the viewer is.

    Stage >= 3 is always visible. At stage 1 or 2 the gate owning that stage
    must be not_required or approved. A not_required gate whose party does have
    an advisor raises InconsistentStateError.
    """
    if item.stage >= STARTUP_REVIEW_STAGE:
        return True

    definition = chain.gate_for_stage(item.stage)
    if definition is None:
        return False

    status = parse_gate_status(getattr(item, definition.status_field))
    if status == GateStatus.APPROVED:
        return True
    if status != GateStatus.NOT_REQUIRED:
        return False

    party_id = chain.party_id(item, definition.party)
    if definition.conditional and directory.has_advisor_affiliation(party_id):
        raise InconsistentStateError(
            f"{definition.gate.value} gate is not_required but the {definition.party.value} has an advisor",
            item_id=str(item.id),
            gate=definition.gate.value,
        )
    return definition.conditional


def _visible_to_advisor(chain: ChainDescriptor, item, viewer_id: UUID, directory: AdvisorDirectory) -> bool:
    code = directory.issued_advisor_code(viewer_id)
    if code is None:
        return False
    for definition in chain.gates:
        if definition.approver != Approver.ADVISOR or item.stage < definition.stage:
            continue
        if directory.advisor_code_of_party(chain.party_id(item, definition.party)) == code:
            return True
    return False


def _lead_investor_stage(chain: ChainDescriptor) -> Optional[int]:
    for definition in chain.gates:
        if definition.party == Party.LEAD_INVESTOR and definition.approver == Approver.PARTY:
            return definition.stage
    return None


def check_visibility(
    chain: ChainDescriptor,
    item,
    role: ViewerRole,
    viewer_id: UUID,
    directory: AdvisorDirectory,
) -> bool:
    """
    Visibility of one item for (role, viewer). Raises InconsistentStateError on the fail-closed case.

    - startup: viewer owns the item's startup, and the startup-side rule holds
    - investor: viewer submitted the item
    - lead_investor: viewer is the item's lead investor; for tickets only once the lead-investor gate is reached
    - advisor: viewer's issued code is the current affiliation of a gated party and that gate's stage is reached
    """
    role = ViewerRole(role)
    if role == ViewerRole.STARTUP:
        if directory.startup_owner_id(chain.party_id(item, Party.STARTUP)) != viewer_id:
            return False
        return visible_to_startup(chain, item, directory)

    if role == ViewerRole.INVESTOR:
        return chain.party_id(item, chain.submitter) == viewer_id

    if role == ViewerRole.LEAD_INVESTOR:
        if Party.LEAD_INVESTOR not in chain.parties or chain.party_id(item, Party.LEAD_INVESTOR) != viewer_id:
            return False
        if chain.submitter == Party.LEAD_INVESTOR:
            return True
        gate_stage = _lead_investor_stage(chain)
        return gate_stage is not None and item.stage >= gate_stage

    return _visible_to_advisor(chain, item, viewer_id, directory)


def is_visible(
    chain: ChainDescriptor,
    item,
    role: ViewerRole,
    viewer_id: UUID,
    directory: AdvisorDirectory,
) -> bool:
    """check_visibility, but the fail-closed case hides the item instead of raising"""
    try:
        return check_visibility(chain, item, role, viewer_id, directory)
    except InconsistentStateError as e:
        record_visibility_fail_closed(chain.kind.value)
        logger.warning(
            "Item hidden: inconsistent advisor gate",
            extra={"item_kind": chain.kind.value, "item_id": str(item.id), "reason": e.message},
        )
        return False


def filter_visible(
    chain: ChainDescriptor,
    items: Iterable,
    role: ViewerRole,
    viewer_id: UUID,
    directory: AdvisorDirectory,
) -> List:
    return [item for item in items if is_visible(chain, item, role, viewer_id, directory)]
