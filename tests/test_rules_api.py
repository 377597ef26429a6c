"""Tests for the rules and approval policy API."""
import pytest
from httpx import AsyncClient, ASGITransport
from approvals.main import app
from approvals.policies.directory import entity_directory

GUARD = "{event_name == 'submitted_for_approval'}"


def leaf(operator, name, right_operand):
    return {"operator": operator, "left_operand": {"name": name}, "right_operand": right_operand}


RANGE_TRIGGER = {
    "all": [
        GUARD,
        leaf("in", "invoice.tags.id", ["t-1"]),
        leaf("==", "invoice.currency", "EUR"),
        leaf(">=", "invoice.amount", 1000),
        leaf("<=", "invoice.amount", 5000),
        leaf("==", "invoice.status", "draft"),
    ]
}


@pytest.mark.asyncio
async def test_decode_endpoint():
    """Test decoding a trigger returns triggers, passthrough and summary."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/v1/rules/decode", json={"trigger": RANGE_TRIGGER})
        assert response.status_code == 200
        data = response.json()
        assert data["triggers"]["tags"] == ["t-1"]
        assert data["triggers"]["amount"] == {
            "currency": "EUR",
            "value": [[">=", 1000], ["<=", 5000]],
        }
        assert data["triggers"]["counterpart_id"] is None
        assert data["passthrough"] == [leaf("==", "invoice.status", "draft")]
        assert data["summary"] == ["Tags", "Currency", "Amount"]


@pytest.mark.asyncio
async def test_decode_endpoint_parse_error():
    """Test malformed amounts return a structured 422."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/v1/rules/decode",
            json={"trigger": {"all": [leaf(">", "invoice.amount", "ten")]}},
        )
        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "ParseError"
        assert "invoice.amount" in data["message"]
        assert "correlation_id" in data


@pytest.mark.asyncio
async def test_encode_endpoint():
    """Test encoding triggers with passthrough elements."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/v1/rules/encode",
            json={
                "triggers": {
                    "amount": {"currency": "USD", "value": [[">", 200]]},
                    "was_created_by_user_id": ["u-1"],
                },
                "passthrough": [leaf("==", "invoice.status", "draft")],
            },
        )
        assert response.status_code == 200
        assert response.json()["trigger"] == {
            "all": [
                GUARD,
                leaf("in", "invoice.was_created_by_user_id", ["u-1"]),
                leaf(">", "invoice.amount", 200),
                leaf("==", "invoice.currency", "USD"),
                leaf("==", "invoice.status", "draft"),
            ]
        }


@pytest.mark.asyncio
async def test_policy_crud():
    """Test creating, reading, patching and deleting a policy."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/v1/approval-policies",
            json={"name": "Range policy", "trigger": RANGE_TRIGGER},
        )
        assert response.status_code == 201
        policy = response.json()
        policy_id = policy["id"]
        assert policy["trigger"] == RANGE_TRIGGER

        response = await client.get(f"/v1/approval-policies/{policy_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Range policy"

        response = await client.patch(
            f"/v1/approval-policies/{policy_id}",
            json={"description": "Updated"},
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Updated"
        assert response.json()["name"] == "Range policy"

        response = await client.get("/v1/approval-policies")
        assert response.status_code == 200
        assert policy_id in [p["id"] for p in response.json()["policies"]]

        response = await client.delete(f"/v1/approval-policies/{policy_id}")
        assert response.status_code == 204

        response = await client.get(f"/v1/approval-policies/{policy_id}")
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_policy_rejects_unreadable_trigger():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/v1/approval-policies",
            json={"name": "Any policy", "trigger": {"any": []}},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "ParseError"


@pytest.mark.asyncio
async def test_policy_triggers_endpoint():
    """Test a stored policy's triggers are decoded with resolved references."""
    entity_directory.register("tag", "t-1", "Marketing")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/v1/approval-policies",
            json={"name": "Tagged", "trigger": RANGE_TRIGGER},
        )
        policy_id = response.json()["id"]

        response = await client.get(f"/v1/approval-policies/{policy_id}/triggers")
        assert response.status_code == 200
        data = response.json()
        assert data["policy_id"] == policy_id
        assert data["triggers"]["tags"] == ["t-1"]
        assert data["summary"] == ["Tags", "Currency", "Amount"]
        assert data["references"]["tags"][0]["display_name"] == "Marketing"

        response = await client.get("/v1/approval-policies/missing/triggers")
        assert response.status_code == 404
