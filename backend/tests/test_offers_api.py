"""
HTTP surface tests for the lifecycle endpoints
"""

from uuid import uuid4

from fastapi.testclient import TestClient

from auth_utils import auth_headers

API = "/api/v1"


def offer_body(startup, **overrides):
    body = {"startup_id": str(startup.id), "offer_amount": "50000", "equity_percentage": "5"}
    body.update(overrides)
    return body


def test_submit_offer(client: TestClient, investor, startup, headers_for):
    response = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor))

    assert response.status_code == 201
    data = response.json()
    assert data["investor_id"] == str(investor.id)
    assert data["stage"] == 3
    assert data["status"] == "pending"
    assert data["investor_advisor_approval"] == "not_required"
    assert data["startup_approval_status"] == "pending"
    assert data["currency"] == "USD"
    assert "X-Trace-ID" in response.headers


def test_duplicate_offer_returns_conflicting_id(client: TestClient, investor, startup, headers_for):
    first = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor)).json()

    response = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor))

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "CONFLICT"
    assert error["conflicting_item_id"] == first["id"]
    assert error["trace_id"]


def test_missing_token(client: TestClient, startup):
    response = client.post(f"{API}/offers", json=offer_body(startup))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHORIZATION_MISSING"


def test_token_for_unknown_user(client: TestClient, startup):
    response = client.post(f"{API}/offers", json=offer_body(startup), headers=auth_headers(str(uuid4())))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


def test_bad_token_signature(client: TestClient, investor, startup):
    headers = auth_headers(str(investor.id), secret="another-secret-key-min-32-chars-long")

    response = client.post(f"{API}/offers", json=offer_body(startup), headers=headers)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_request_validation(client: TestClient, investor, startup, headers_for):
    response = client.post(
        f"{API}/offers",
        json=offer_body(startup, offer_amount="-1"),
        headers=headers_for(investor),
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_unknown_startup(client: TestClient, investor, headers_for):
    response = client.post(
        f"{API}/offers",
        json={"startup_id": str(uuid4()), "offer_amount": "100", "equity_percentage": "1"},
        headers=headers_for(investor),
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_advisor_decision_flow(client: TestClient, advised_investor, advisor_1, advisor_2, advised_startup, headers_for):
    offer = client.post(
        f"{API}/offers", json=offer_body(advised_startup), headers=headers_for(advised_investor),
    ).json()
    assert offer["status"] == "pending_investor_advisor_approval"

    forbidden = client.post(
        f"{API}/offers/{offer['id']}/decisions",
        json={"gate": "investor_advisor", "decision": "approve"},
        headers=headers_for(advisor_2),
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "FORBIDDEN"

    response = client.post(
        f"{API}/items/{offer['id']}/decisions",
        json={"gate": "investor_advisor", "decision": "approve"},
        headers=headers_for(advisor_1),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["item_kind"] == "offer"
    assert data["changed"] is True
    assert (data["stage_before"], data["stage_after"]) == (1, 2)
    assert data["status"] == "pending_startup_advisor_approval"

    repeat = client.post(
        f"{API}/offers/{offer['id']}/decisions",
        json={"gate": "investor_advisor", "decision": "approve"},
        headers=headers_for(advisor_1),
    )
    assert repeat.status_code == 200
    assert repeat.json()["changed"] is False


def test_unknown_gate_is_rejected(client: TestClient, investor, startup, headers_for):
    offer = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor)).json()

    response = client.post(
        f"{API}/offers/{offer['id']}/decisions",
        json={"gate": "board_review", "decision": "approve"},
        headers=headers_for(investor),
    )

    assert response.status_code == 422


def test_startup_lists_and_accepts(client: TestClient, investor, startup, headers_for, db_session):
    offer = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor)).json()
    owner = startup.owner
    owner_headers = headers_for(owner)

    listed = client.get(f"{API}/offers", params={"role": "startup"}, headers=owner_headers)
    assert listed.status_code == 200
    assert [o["id"] for o in listed.json()] == [offer["id"]]

    accepted = client.post(
        f"{API}/offers/{offer['id']}/decisions",
        json={"gate": "startup_final", "decision": "approve"},
        headers=owner_headers,
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    revealed = client.post(f"{API}/offers/{offer['id']}/reveal-contact", headers=headers_for(investor))
    assert revealed.status_code == 200
    assert revealed.json()["contact_details_revealed"] is True

    events = client.get(
        f"{API}/offers/{offer['id']}/events", params={"role": "investor"}, headers=headers_for(investor),
    )
    assert [e["action"] for e in events.json()] == ["submitted", "decided", "contact_revealed"]


def test_get_offer_hidden_from_other_startup(client: TestClient, investor, startup, make_startup, headers_for):
    offer = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor)).json()
    other = make_startup()

    response = client.get(
        f"{API}/offers/{offer['id']}", params={"role": "startup"}, headers=headers_for(other.owner),
    )
    assert response.status_code == 404

    own = client.get(f"{API}/offers/{offer['id']}", params={"role": "investor"}, headers=headers_for(investor))
    assert own.status_code == 200


def test_edit_offer(client: TestClient, investor, startup, headers_for):
    offer = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor)).json()

    response = client.patch(
        f"{API}/offers/{offer['id']}", json={"offer_amount": "75000"}, headers=headers_for(investor),
    )

    assert response.status_code == 200
    assert response.json()["offer_amount"] in ("75000", "75000.00")


def test_co_investment_flow(client: TestClient, make_user, investor, startup, headers_for):
    lead = make_user()
    opportunity = client.post(
        f"{API}/co-investment/opportunities",
        json={
            "startup_id": str(startup.id),
            "investment_amount": "500000",
            "equity_percentage": "10",
            "minimum_co_investment": "1000",
            "maximum_co_investment": "50000",
        },
        headers=headers_for(lead),
    )
    assert opportunity.status_code == 201
    opportunity_id = opportunity.json()["id"]
    assert opportunity.json()["status"] == "active"
    assert opportunity.json()["stage"] == 3

    accepted = client.post(
        f"{API}/co-investment/opportunities/{opportunity_id}/decisions",
        json={"gate": "startup_final", "decision": "approve"},
        headers=headers_for(startup.owner),
    )
    assert accepted.json()["stage_after"] == 4

    too_small = client.post(
        f"{API}/co-investment/offers",
        json={"opportunity_id": opportunity_id, "offer_amount": "10", "equity_percentage": "0.1"},
        headers=headers_for(investor),
    )
    assert too_small.status_code == 400
    assert too_small.json()["error"]["details"]["field"] == "offer_amount"

    ticket = client.post(
        f"{API}/co-investment/offers",
        json={"opportunity_id": opportunity_id, "offer_amount": "5000", "equity_percentage": "0.1"},
        headers=headers_for(investor),
    )
    assert ticket.status_code == 201
    assert ticket.json()["status"] == "pending_lead_investor_approval"

    lead_view = client.get(f"{API}/co-investment/offers", params={"role": "lead_investor"}, headers=headers_for(lead))
    assert [t["id"] for t in lead_view.json()] == [ticket.json()["id"]]

    closed = client.post(
        f"{API}/co-investment/opportunities/{opportunity_id}/status",
        json={"status": "completed"},
        headers=headers_for(lead),
    )
    assert closed.status_code == 200
    assert closed.json()["status"] == "completed"


def test_opportunity_bounds_validated_by_schema(client: TestClient, investor, startup, headers_for):
    response = client.post(
        f"{API}/co-investment/opportunities",
        json={
            "startup_id": str(startup.id),
            "investment_amount": "500000",
            "equity_percentage": "10",
            "minimum_co_investment": "9000",
            "maximum_co_investment": "100",
        },
        headers=headers_for(investor),
    )

    assert response.status_code == 422


def test_event_trail_follows_item_visibility(client: TestClient, advised_investor, startup, make_user, headers_for):
    offer = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(advised_investor)).json()
    assert offer["stage"] == 1
    stranger = make_user()

    for path in (f"{API}/offers/{offer['id']}/events", f"{API}/items/{offer['id']}/events"):
        as_stranger = client.get(path, params={"role": "investor"}, headers=headers_for(stranger))
        assert as_stranger.status_code == 404

        # Startup cannot see the offer while the investor's advisor has not approved it
        as_owner = client.get(path, params={"role": "startup"}, headers=headers_for(startup.owner))
        assert as_owner.status_code == 404

        as_submitter = client.get(path, params={"role": "investor"}, headers=headers_for(advised_investor))
        assert as_submitter.status_code == 200
        assert [e["action"] for e in as_submitter.json()] == ["submitted"]


def test_event_trail_requires_role(client: TestClient, investor, startup, headers_for):
    offer = client.post(f"{API}/offers", json=offer_body(startup), headers=headers_for(investor)).json()

    response = client.get(f"{API}/items/{offer['id']}/events", headers=headers_for(investor))

    assert response.status_code == 422
