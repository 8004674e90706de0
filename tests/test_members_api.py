"""
Test member and team endpoints
"""
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from pymongo.errors import ServerSelectionTimeoutError
from app import main as main_module
from app.main import app
from app.api.deps import get_member_service
from conftest import ALL_TEAM_ID, TECH_TEAM_ID, cursor_returning, update_result


@pytest_asyncio.fixture
async def client(member_service):
    app.dependency_overrides[get_member_service] = lambda: member_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_create_member_form(client, mock_collection):
    response = await client.post(
        "/api/v1/members/",
        data={"name": "Ann", "email": "ann@example.com", "content": "Hi", "teamIds": f'["{TECH_TEAM_ID}"]'},
        files={"profilePic": ("ann.png", b"png-bytes", "image/png")}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    member = body["data"]["memberData"]["memberID"]
    assert member["bio"] == "Hi"
    assert member["team"] == [{"_id": TECH_TEAM_ID, "name": "Technology"}]
    assert member["profilePicture"]["size"] == len(b"png-bytes")
    assert mock_collection.update_one.await_count == 2


@pytest.mark.asyncio
async def test_create_member_without_name(client, mock_collection):
    response = await client.post("/api/v1/members/", data={"email": "ann@example.com"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    mock_collection.update_one.assert_not_called()


@pytest.mark.asyncio
async def test_update_member_form(client, mock_collection, org_document):
    mock_collection.find_one.return_value = org_document

    response = await client.post(
        "/api/v1/members/update",
        data={"importance": "m-ann", "about": "Updated bio"}
    )

    assert response.status_code == 200
    member = response.json()["data"]["member"]
    assert member["bio"] == "Updated bio"
    assert member["name"] == "Ann"


@pytest.mark.asyncio
async def test_update_unknown_member(client, mock_collection):
    response = await client.post("/api/v1/members/update", data={"importance": "ghost", "name": "X"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_twice(client, mock_collection):
    mock_collection.find_one.side_effect = [{"_id": "doc"}, None]

    first = await client.delete("/api/v1/members/m-ann")
    second = await client.delete("/api/v1/members/m-ann")

    assert first.status_code == 200
    assert first.json()["data"]["modifiedCount"] == 1
    assert second.status_code == 404
    assert second.json()["success"] is False


@pytest.mark.asyncio
async def test_list_members(client, mock_collection, org_document):
    mock_collection.find.return_value = cursor_returning([org_document])

    response = await client.get("/api/v1/members/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [team["_id"] for team in data[0]["teams"]][0] == ALL_TEAM_ID


@pytest.mark.asyncio
async def test_team_members(client, mock_collection, ann_entry):
    mock_collection.aggregate.return_value = cursor_returning([{"members": [ann_entry]}])

    response = await client.get(f"/api/v1/teams/{TECH_TEAM_ID}/members")

    assert response.status_code == 200
    assert response.json()["data"][0]["memberID"]["name"] == "Ann"


@pytest.mark.asyncio
async def test_team_members_unknown_team(client):
    response = await client.get("/api/v1/teams/ghost/members")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reorder(client, mock_collection):
    response = await client.post(
        "/api/v1/teams/reorder",
        json={"team": TECH_TEAM_ID, "members": [{"_id": "m-ann", "name": "Ann"}]}
    )

    assert response.status_code == 200
    assert response.json()["data"]["memberCount"] == 1


@pytest.mark.asyncio
async def test_reorder_members_not_list(client):
    response = await client.post("/api/v1/teams/reorder", json={"team": TECH_TEAM_ID, "members": "nope"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reorder_conflict(client, mock_collection):
    mock_collection.update_one.return_value = update_result(1, 0)

    response = await client.post("/api/v1/teams/reorder", json={"team": TECH_TEAM_ID, "members": []})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_store_failure_reports_cause_outside_production(client, mock_collection):
    mock_collection.find.side_effect = ServerSelectionTimeoutError("cluster unreachable")

    response = await client.get("/api/v1/members/")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Failed to retrieve team data"
    assert "cluster unreachable" in body["error"]


@pytest.mark.asyncio
async def test_health():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["success"] is True


@pytest.mark.asyncio
async def test_unknown_route():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/nowhere")

    assert response.status_code == 404
    assert response.json()["message"] == "Route not found"


@pytest.mark.asyncio
async def test_malformed_body_uses_error_envelope(client, mock_collection):
    response = await client.post("/api/v1/teams/reorder", json={"team": 5, "members": []})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["data"][0]["field"] == "team"
    mock_collection.update_one.assert_not_called()


def test_lifespan_opens_and_closes_store(monkeypatch):
    connect = AsyncMock()
    close = AsyncMock()
    monkeypatch.setattr(main_module, "connect_to_mongo", connect)
    monkeypatch.setattr(main_module, "close_mongo_connection", close)
    app.state.otp_store.issue("ann@example.com")

    with TestClient(app) as client:
        connect.assert_awaited_once()
        assert client.get("/health").status_code == 200
        close.assert_not_awaited()

    close.assert_awaited_once()
    assert len(app.state.otp_store) == 0
