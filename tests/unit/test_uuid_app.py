"""
Endpoint tests for the UUID in-memory users API.
"""

import uuid


def _create(client, name="Maria Santos", email="maria@example.com"):
    response = client.post("/users", json={"name": name, "email": email})
    assert response.status_code == 201
    return response.json()


class TestUuidUsers:
    def test_list_starts_empty(self, uuid_client):
        response = uuid_client.get("/users")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_assigns_uuid_and_timestamp(self, uuid_client):
        user = _create(uuid_client)
        assert uuid.UUID(user["id"])
        assert user["created_at"]
        assert uuid_client.get(f"/users/{user['id']}").json()["email"] == "maria@example.com"

    def test_duplicate_email_returns_409(self, uuid_client):
        _create(uuid_client)
        response = uuid_client.post(
            "/users", json={"name": "Maria S.", "email": "maria@example.com"}
        )
        assert response.status_code == 409
        assert response.json()["message"] == "This email is already in use."

    def test_name_shorter_than_three_rejected(self, uuid_client):
        response = uuid_client.post("/users", json={"name": "Al", "email": "al@example.com"})
        assert response.status_code == 400

    def test_malformed_uuid_returns_400(self, uuid_client):
        response = uuid_client.get("/users/123")
        assert response.status_code == 400
        assert response.json()["error"] == "Validation Error"

    def test_unknown_uuid_returns_404(self, uuid_client):
        response = uuid_client.get(f"/users/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "User not found."

    def test_put_merges_fields(self, uuid_client):
        user = _create(uuid_client)
        response = uuid_client.put(f"/users/{user['id']}", json={"name": "Maria Souza"})
        assert response.status_code == 200
        updated = response.json()
        assert updated["name"] == "Maria Souza"
        assert updated["email"] == "maria@example.com"
        assert updated["created_at"] == user["created_at"]

    def test_patch_to_taken_email_returns_409(self, uuid_client):
        first = _create(uuid_client)
        _create(uuid_client, name="Pedro Costa", email="pedro@example.com")
        response = uuid_client.patch(f"/users/{first['id']}", json={"email": "pedro@example.com"})
        assert response.status_code == 409

    def test_delete_returns_204(self, uuid_client):
        user = _create(uuid_client)
        response = uuid_client.delete(f"/users/{user['id']}")
        assert response.status_code == 204
        assert response.content == b""
        assert uuid_client.delete(f"/users/{user['id']}").status_code == 404
