"""HTTP tests for the weight entry and authentication endpoints."""
from __future__ import annotations

from datetime import timedelta

import pytest

from health_tracker.models import utcnow


def _login(client, login: str, password: str = "secret") -> dict[str, str]:
    response = client.post("/api/login", json={"login": login, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['access_token']}"}


@pytest.fixture
def alice(client, users):
    return _login(client, "alice")


@pytest.fixture
def admin(client, users):
    return _login(client, "admin")


def _iso(days_ago: float = 0) -> str:
    return (utcnow() - timedelta(days=days_ago)).isoformat()


def test_health_endpoint(client) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_register_and_login(client, users) -> None:
    response = client.post(
        "/api/register",
        json={"login": "Carol", "email": "carol@example.com", "password": "pa55word"},
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body["login"] == "carol"
    assert body["role"] == "ROLE_USER"
    assert "password_hash" not in body

    assert "Authorization" in _login(client, "carol", "pa55word")


def test_register_duplicate_login_conflicts(client, users) -> None:
    response = client.post(
        "/api/register",
        json={"login": "alice", "email": "other@example.com", "password": "pa55word"},
    )
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "CONFLICT"


def test_register_validates_body(client, users) -> None:
    response = client.post("/api/register", json={"login": "dave"})
    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert set(error["fields"]) == {"email", "password"}


def test_login_with_bad_password(client, users) -> None:
    response = client.post("/api/login", json={"login": "alice", "password": "nope"})
    assert response.status_code == 401


def test_weight_endpoints_require_token(client, users) -> None:
    assert client.get("/api/weights").status_code == 401
    assert client.post("/api/weights", json={"weight": 70, "timestamp": _iso()}).status_code == 401


def test_create_assigns_caller_as_owner(client, users, alice) -> None:
    response = client.post(
        "/api/weights",
        json={"weight": 70.4, "timestamp": _iso(), "user_id": users["bob"].id},
        headers=alice,
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body["user_id"] == users["alice"].id
    assert body["user_login"] == "alice"
    assert body["id"] is not None


def test_admin_create_keeps_owner(client, users, admin) -> None:
    response = client.post(
        "/api/weights",
        json={"weight": 88.0, "timestamp": _iso(), "user_id": users["bob"].id},
        headers=admin,
    )
    assert response.status_code == 201
    assert response.get_json()["user_login"] == "bob"


def test_create_with_id_is_rejected(client, users, alice) -> None:
    response = client.post("/api/weights", json={"id": 5, "weight": 70.0, "timestamp": _iso()}, headers=alice)
    assert response.status_code == 400


def test_create_validates_weight(client, users, alice) -> None:
    response = client.post("/api/weights", json={"weight": -3, "timestamp": _iso()}, headers=alice)
    assert response.status_code == 400
    assert "weight" in response.get_json()["error"]["fields"]


def test_update_requires_id(client, users, alice) -> None:
    response = client.put("/api/weights", json={"weight": 70.0, "timestamp": _iso()}, headers=alice)
    assert response.status_code == 400


def test_update_changes_entry(client, users, alice) -> None:
    created = client.post("/api/weights", json={"weight": 70.0, "timestamp": _iso()}, headers=alice).get_json()

    response = client.put(
        "/api/weights",
        json={"id": created["id"], "weight": 69.1, "timestamp": created["timestamp"]},
        headers=alice,
    )

    assert response.status_code == 200
    assert client.get(f"/api/weights/{created['id']}", headers=alice).get_json()["weight"] == 69.1


def test_list_is_scoped_by_role(client, users, alice, admin) -> None:
    client.post("/api/weights", json={"weight": 70.0, "timestamp": _iso(2)}, headers=alice)
    client.post("/api/weights", json={"weight": 69.0, "timestamp": _iso(1)}, headers=alice)
    client.post("/api/weights", json={"weight": 90.0, "timestamp": _iso()}, headers=admin)

    own = client.get("/api/weights", headers=alice)
    assert own.status_code == 200
    assert own.headers["X-Total-Count"] == "2"
    assert [e["weight"] for e in own.get_json()] == [69.0, 70.0]

    everything = client.get("/api/weights?size=2", headers=admin)
    assert everything.headers["X-Total-Count"] == "3"
    assert [e["weight"] for e in everything.get_json()] == [90.0, 69.0]


def test_list_rejects_bad_pagination(client, users, alice) -> None:
    assert client.get("/api/weights?page=zero", headers=alice).status_code == 400
    assert client.get("/api/weights?size=1000", headers=alice).status_code == 400


def test_get_missing_entry_is_404(client, users, alice) -> None:
    response = client.get("/api/weights/999", headers=alice)
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "NOT_FOUND"


def test_delete_entry(client, users, alice) -> None:
    created = client.post("/api/weights", json={"weight": 70.0, "timestamp": _iso()}, headers=alice).get_json()

    assert client.delete(f"/api/weights/{created['id']}", headers=alice).status_code == 204
    assert client.get(f"/api/weights/{created['id']}", headers=alice).status_code == 404
    assert client.delete(f"/api/weights/{created['id']}", headers=alice).status_code == 204


def test_weight_by_days(client, users, alice) -> None:
    client.post("/api/weights", json={"weight": 70.0, "timestamp": _iso(1)}, headers=alice)
    client.post("/api/weights", json={"weight": 71.0, "timestamp": _iso(10)}, headers=alice)

    response = client.get("/api/weight-by-days/7", headers=alice)

    assert response.status_code == 200
    body = response.get_json()
    assert body["period"] == "Last 7 Days"
    assert [e["weight"] for e in body["weigh_ins"]] == [70.0]


def test_search_endpoint(client, users, alice) -> None:
    client.post("/api/weights", json={"weight": 70.7, "timestamp": _iso()}, headers=alice)
    client.post("/api/weights", json={"weight": 72.2, "timestamp": _iso(1)}, headers=alice)

    response = client.get("/api/_search/weights?query=70.7", headers=alice)

    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "1"
    hit = response.get_json()[0]
    assert hit["weight"] == 70.7
    assert hit["user_login"] == "alice"
    assert "content" not in hit


def test_admin_create_for_missing_owner_is_404(client, users, admin) -> None:
    response = client.post(
        "/api/weights",
        json={"weight": 88.0, "timestamp": _iso(), "user_id": 9999},
        headers=admin,
    )
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "NOT_FOUND"
    assert client.get("/api/weights", headers=admin).headers["X-Total-Count"] == "0"


def test_weight_by_days_accepts_huge_day_counts(client, users, alice) -> None:
    client.post("/api/weights", json={"weight": 70.0, "timestamp": _iso(400)}, headers=alice)

    response = client.get("/api/weight-by-days/800000", headers=alice)

    assert response.status_code == 200
    assert [e["weight"] for e in response.get_json()["weigh_ins"]] == [70.0]


def test_search_endpoint_with_non_ascii_digit_id(client, users, alice) -> None:
    response = client.get("/api/_search/weights", query_string={"query": "id:²"}, headers=alice)
    assert response.status_code == 200
    assert response.get_json() == []
