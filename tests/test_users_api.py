"""Tests for the user RPC endpoints."""
import json

from fastapi.testclient import TestClient

RPC = "/rpc/UserService"


def read_stream(response) -> list:
    return [json.loads(line) for line in response.text.splitlines() if line]


def test_create_user(client: TestClient):
    """Test user creation with a blank role."""
    response = client.post(
        f"{RPC}/CreateUser",
        json={
            "email": "a@b.com",
            "password": "secret1",
            "firstName": "A",
            "lastName": "B",
            "role": ""
        }
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] > 0
    assert data["role"] == "Customer"
    assert data["isActive"] is True
    assert data["lastLogin"] == ""
    assert "passwordHash" not in data
    assert "password" not in data


def test_create_duplicate_email(client: TestClient, test_user):
    """Test creation with an email already in use."""
    response = client.post(
        f"{RPC}/CreateUser",
        json={
            "email": test_user.email,
            "password": "secret1",
            "firstName": "Dup",
            "lastName": "User"
        }
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "ALREADY_EXISTS"
    assert "already exists" in body["error"]


def test_create_invalid_request(client: TestClient):
    """Test validation failures are joined into one message."""
    response = client.post(
        f"{RPC}/CreateUser",
        json={"email": "bad", "password": "123", "firstName": "", "lastName": "B"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "INVALID_ARGUMENT"
    assert body["error"] == (
        "A valid email is required, Password must be at least 6 characters, "
        "First name is required"
    )
    assert [v["field"] for v in body["details"]["violations"]] == [
        "email", "password", "firstName"
    ]


def test_malformed_body_is_invalid_argument(client: TestClient):
    response = client.post(f"{RPC}/GetUser", json={"id": "not-a-number"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_ARGUMENT"


def test_get_user(client: TestClient, test_user):
    response = client.post(f"{RPC}/GetUser", json={"id": test_user.id})

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == test_user.email
    assert data["firstName"] == "Test"
    assert data["createdAt"].endswith("+00:00")


def test_get_user_not_found(client: TestClient):
    response = client.post(f"{RPC}/GetUser", json={"id": 404})

    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"


def test_get_user_invalid_id(client: TestClient):
    response = client.post(f"{RPC}/GetUser", json={"id": 0})

    assert response.status_code == 400
    assert response.json()["error"] == "User ID must be greater than zero"


def test_update_user(client: TestClient, test_user):
    response = client.post(
        f"{RPC}/UpdateUser",
        json={
            "id": test_user.id,
            "email": "updated@example.com",
            "firstName": "Updated",
            "lastName": "User",
            "role": "Premium",
            "isActive": True
        }
    )

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "updated@example.com"
    assert data["role"] == "Premium"


def test_delete_user_keeps_row(client: TestClient, test_user):
    response = client.post(f"{RPC}/DeleteUser", json={"id": test_user.id})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": f"User with ID {test_user.id} deleted successfully"
    }

    fetched = client.post(f"{RPC}/GetUser", json={"id": test_user.id})
    assert fetched.status_code == 200
    assert fetched.json()["isActive"] is False


def test_list_users_stream(client: TestClient, test_user, inactive_user):
    response = client.post(f"{RPC}/ListUsers", json={"pageNumber": 1, "pageSize": 10})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    records = read_stream(response)
    assert [r["firstName"] for r in records] == ["Gone", "Test"]


def test_list_users_active_only(client: TestClient, test_user, inactive_user):
    response = client.post(f"{RPC}/ListUsers", json={"activeOnly": True})

    records = read_stream(response)
    assert [r["id"] for r in records] == [test_user.id]


def test_list_users_rejects_large_page(client: TestClient):
    response = client.post(f"{RPC}/ListUsers", json={"pageNumber": 1, "pageSize": 101})

    assert response.status_code == 400
    assert response.json()["error"] == "Page size cannot exceed 100 items"


def test_root_lists_operations(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    assert len(response.json()["operations"]) == 5
