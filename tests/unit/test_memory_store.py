"""
Tests for the in-memory user store.
"""

import uuid

import pytest

from crudapi.db.memory_store import (
    SEED_USERS,
    EmailInUseError,
    MemoryUserStore,
    new_uuid,
    next_integer_id,
)


@pytest.fixture
def store():
    return MemoryUserStore(seed=SEED_USERS)


class TestIdGeneration:
    def test_next_integer_id_empty(self):
        assert next_integer_id([]) == 1

    def test_next_integer_id_uses_max_not_length(self):
        assert next_integer_id([{"id": 2}, {"id": 7}]) == 8

    def test_new_uuid(self):
        assert isinstance(new_uuid([]), uuid.UUID)


class TestMemoryUserStore:
    """Test suite for MemoryUserStore."""

    def test_seed_is_loaded_and_copied(self, store):
        """Seed users are loaded without aliasing the module constant."""
        assert len(store) == len(SEED_USERS)
        store.users[0]["name"] = "Changed"
        assert SEED_USERS[0]["name"] != "Changed"

    def test_create_assigns_next_id(self, store):
        user = store.create(name="Lucas", email="lucas@example.com", active=True)
        assert user["id"] == len(SEED_USERS) + 1
        assert store.get(user["id"]) == user

    def test_create_duplicate_email_raises(self, store):
        with pytest.raises(EmailInUseError) as excinfo:
            store.create(name="Joao", email=SEED_USERS[0]["email"])

        assert excinfo.value.email == SEED_USERS[0]["email"]
        assert len(store) == len(SEED_USERS)

    def test_create_drops_none_extras(self, store):
        user = store.create(name="Lucas", email="lucas@example.com", password=None)
        assert "password" not in user

    def test_get_missing_returns_none(self, store):
        assert store.get(999) is None

    def test_update_merges_and_ignores_none(self, store):
        user = store.update(1, {"name": "Joao S.", "email": None})
        assert user["name"] == "Joao S."
        assert user["email"] == SEED_USERS[0]["email"]

    def test_update_keeps_own_email(self, store):
        user = store.update(1, {"email": SEED_USERS[0]["email"]})
        assert user["id"] == 1

    def test_update_to_other_users_email_raises(self, store):
        with pytest.raises(EmailInUseError):
            store.update(1, {"email": SEED_USERS[1]["email"]})

    def test_update_cannot_change_id(self, store):
        user = store.update(1, {"id": 42, "name": "Renamed"})
        assert user["id"] == 1

    def test_update_missing_returns_none(self, store):
        assert store.update(999, {"name": "Nobody"}) is None

    def test_replace_preserves_id_and_active(self, store):
        user = store.replace(3, {"name": "Pedro O.", "email": "pedro.o@example.com"})
        assert user == {
            "id": 3,
            "name": "Pedro O.",
            "email": "pedro.o@example.com",
            "active": False,
        }

    def test_delete(self, store):
        removed = store.delete(2)
        assert removed["id"] == 2
        assert store.get(2) is None
        assert store.delete(2) is None

    def test_reset_restores_seed(self, store):
        store.delete(1)
        store.create(name="Lucas", email="lucas@example.com")
        store.reset()
        assert store.list() == SEED_USERS

    def test_uuid_store_with_timestamps(self):
        store = MemoryUserStore(id_factory=new_uuid, timestamps=True)
        assert store.list() == []

        user = store.create(name="Ana", email="ana@example.com")
        assert isinstance(user["id"], uuid.UUID)
        assert "created_at" in user

        replaced = store.replace(user["id"], {"name": "Ana C.", "email": "ana@example.com"})
        assert replaced["created_at"] == user["created_at"]
