"""
Approval status registry tests
"""

import pytest

from offerflow.core.approvals.statuses import (
    Gate,
    GateStatus,
    OfferStatus,
    enum_values,
    parse_enum,
    parse_gate_status,
    parse_optional,
)


def test_gate_status_values():
    assert enum_values(GateStatus) == ["not_required", "pending", "approved", "rejected"]


@pytest.mark.parametrize("raw", ["approved", " approved ", GateStatus.APPROVED])
def test_parse_gate_status_accepts_known_labels(raw):
    assert parse_gate_status(raw) == GateStatus.APPROVED


@pytest.mark.parametrize("raw", [None, "", "APPROVED", "maybe"])
def test_parse_gate_status_refuses_unknown_labels(raw):
    with pytest.raises(ValueError):
        parse_gate_status(raw)


def test_parse_enum_does_not_coerce_across_enums():
    with pytest.raises(ValueError):
        parse_enum(Gate, "pending")


def test_parse_optional():
    assert parse_optional(OfferStatus, None) is None
    assert parse_optional(OfferStatus, "accepted") == OfferStatus.ACCEPTED
