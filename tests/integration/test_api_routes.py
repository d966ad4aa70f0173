"""
API Route Tests
===============

INVARIANTS TESTED:
1. Every response uses the {success, data, error} envelope
2. New wheels start private with a single central node
3. Private wheels read as missing to other users; writes are forbidden
4. Votes are validated as integers 1..5
"""

import pytest
from fastapi.testclient import TestClient

from futures_wheel.api.server import create_app
from futures_wheel.storage import InMemoryDiagramRepository


@pytest.fixture
def client():
    return TestClient(create_app(InMemoryDiagramRepository()))


@pytest.fixture
def wheel(client):
    response = client.post("/api/wheels", json={"title": "Remote work", "ownerId": "u1"})
    return response.json()["data"]


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "online"}


class TestCreateAndList:

    def test_create_starts_with_central_node(self, wheel):
        assert wheel["title"] == "Remote work"
        assert wheel["ownerId"] == "u1"
        assert wheel["visibility"] == "private"
        assert len(wheel["nodes"]) == 1
        central = wheel["nodes"][0]
        assert central["id"] == "0"
        assert central["data"]["tier"] == 0
        assert central["data"]["label"] == "Remote work"
        assert wheel["edges"] == []

    def test_create_requires_title(self, client):
        response = client.post("/api/wheels", json={"ownerId": "u1"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "title is required"}

    def test_list_by_owner(self, client, wheel):
        client.post("/api/wheels", json={"title": "Other", "ownerId": "u2"})

        response = client.get("/api/wheels", params={"userId": "u1"})

        assert [w["id"] for w in response.json()["data"]] == [wheel["id"]]

    def test_list_requires_user(self, client):
        assert client.get("/api/wheels").status_code == 400


class TestAccess:

    def test_owner_reads_private(self, client, wheel):
        response = client.get(f"/api/wheels/{wheel['id']}", params={"userId": "u1"})

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_private_hidden_from_others(self, client, wheel):
        response = client.get(f"/api/wheels/{wheel['id']}", params={"userId": "u2"})

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_public_readable_by_anyone(self, client, wheel):
        client.patch(f"/api/wheels/{wheel['id']}", json={"userId": "u1", "visibility": "public"})

        response = client.get(f"/api/wheels/{wheel['id']}")

        assert response.status_code == 200

    def test_unknown_wheel(self, client):
        assert client.get("/api/wheels/nope", params={"userId": "u1"}).status_code == 404

    def test_invalid_visibility(self, client, wheel):
        response = client.patch(
            f"/api/wheels/{wheel['id']}", json={"userId": "u1", "visibility": "friends"}
        )

        assert response.status_code == 400


class TestReplace:

    def test_owner_replaces_nodes_keeping_edges(self, client, wheel):
        nodes = wheel["nodes"] + [{
            "id": "n1",
            "position": {"x": 0, "y": 150},
            "data": {"label": "Less commuting", "tier": 1},
            "type": "custom",
        }]

        response = client.put(
            f"/api/wheels/{wheel['id']}",
            json={"userId": "u1", "title": "Remote work v2", "nodes": nodes},
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["title"] == "Remote work v2"
        assert [n["id"] for n in data["nodes"]] == ["0", "n1"]
        assert data["edges"] == []

    def test_non_owner_forbidden_on_public(self, client, wheel):
        client.patch(f"/api/wheels/{wheel['id']}", json={"userId": "u1", "visibility": "public"})

        response = client.put(f"/api/wheels/{wheel['id']}", json={"userId": "u2", "title": "Mine"})

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_malformed_nodes(self, client, wheel):
        response = client.put(
            f"/api/wheels/{wheel['id']}",
            json={"userId": "u1", "nodes": [{"id": "bad", "data": {"tier": "one"}}]},
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("data", [
        ["x"],
        {"label": "x", "tier": 1, "votes": {"u1": "high"}},
        {"label": "x", "tier": 1, "votes": {"u1": 3.7}, "probability": 3.7},
        {"label": "x", "tier": 1, "votes": ["u1", 3]},
    ])
    def test_bad_node_data_rejected_without_change(self, client, wheel, data):
        nodes = wheel["nodes"] + [{"id": "n1", "position": {"x": 0, "y": 0}, "data": data}]

        response = client.put(f"/api/wheels/{wheel['id']}", json={"userId": "u1", "nodes": nodes})

        assert response.status_code == 400
        assert response.json()["success"] is False
        stored = client.get(f"/api/wheels/{wheel['id']}", params={"userId": "u1"}).json()["data"]
        assert [n["id"] for n in stored["nodes"]] == ["0"]

    def test_bad_position_rejected(self, client, wheel):
        nodes = wheel["nodes"] + [{"id": "n1", "position": [0, 0], "data": {"label": "x", "tier": 1}}]

        response = client.put(f"/api/wheels/{wheel['id']}", json={"userId": "u1", "nodes": nodes})

        assert response.status_code == 400


class TestDelete:

    def test_owner_deletes(self, client, wheel):
        response = client.delete(f"/api/wheels/{wheel['id']}", params={"userId": "u1"})

        assert response.json()["data"] == {"id": wheel["id"], "deleted": True}
        assert client.get(f"/api/wheels/{wheel['id']}", params={"userId": "u1"}).status_code == 404

    def test_delete_requires_user(self, client, wheel):
        assert client.delete(f"/api/wheels/{wheel['id']}").status_code == 400

    def test_other_user_cannot_delete(self, client, wheel):
        response = client.delete(f"/api/wheels/{wheel['id']}", params={"userId": "u2"})

        assert response.status_code == 403


class TestVotes:

    def test_votes_average(self, client, wheel):
        url = f"/api/wheels/{wheel['id']}/nodes/0/vote"

        client.post(url, json={"userId": "u1", "vote": 5})
        response = client.post(url, json={"userId": "u2", "vote": 2})

        data = response.json()["data"]["data"]
        assert data["votes"] == {"u1": 5, "u2": 2}
        assert data["probability"] == 3.5

    @pytest.mark.parametrize("vote", [0, 6, 3.5, "3", None])
    def test_invalid_vote(self, client, wheel, vote):
        response = client.post(
            f"/api/wheels/{wheel['id']}/nodes/0/vote", json={"userId": "u1", "vote": vote}
        )

        assert response.status_code == 400

    def test_vote_needs_user(self, client, wheel):
        response = client.post(f"/api/wheels/{wheel['id']}/nodes/0/vote", json={"vote": 3})

        assert response.status_code == 400

    def test_vote_unknown_node(self, client, wheel):
        response = client.post(
            f"/api/wheels/{wheel['id']}/nodes/missing/vote", json={"userId": "u1", "vote": 3}
        )

        assert response.status_code == 404
