"""
In-memory user storage.

A plain list stands in for a database table. Contents are reset on every
process start; there is no locking because all handlers run on one event loop.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from crudapi.utils.logging_utils import get_logger

logger = get_logger(__name__)

# Mock data for the integer-id demo
SEED_USERS: List[Dict[str, Any]] = [
    {"id": 1, "name": "Joao Silva", "email": "joao@example.com", "active": True},
    {"id": 2, "name": "Maria Santos", "email": "maria@example.com", "active": True},
    {"id": 3, "name": "Pedro Oliveira", "email": "pedro@example.com", "active": False},
    {"id": 4, "name": "Ana Costa", "email": "ana@example.com", "active": True},
    {"id": 5, "name": "Carlos Eduardo", "email": "carlos@example.com", "active": True},
]


class EmailInUseError(ValueError):
    """Raised when an email already belongs to another user."""

    def __init__(self, email: str):
        super().__init__(f"Email {email} is already in use")
        self.email = email


def next_integer_id(users: List[Dict[str, Any]]) -> int:
    """Highest existing id plus one, or 1 for an empty list."""
    return max((user["id"] for user in users), default=0) + 1


def new_uuid(users: List[Dict[str, Any]]) -> uuid.UUID:
    return uuid.uuid4()


class MemoryUserStore:
    """
    Manages a list of user dicts with email uniqueness checked by linear scan.

    Args:
        seed: Users loaded on creation and on every reset()
        id_factory: Called with the current list to produce the next id
        timestamps: Stamp new users with a ``created_at`` datetime
    """

    def __init__(
        self,
        seed: Optional[List[Dict[str, Any]]] = None,
        id_factory: Callable[[List[Dict[str, Any]]], Any] = next_integer_id,
        timestamps: bool = False,
    ):
        self._seed = copy.deepcopy(seed or [])
        self.id_factory = id_factory
        self.timestamps = timestamps
        self.users: List[Dict[str, Any]] = []
        self.reset()

    def reset(self):
        """Restore the seed data."""
        self.users = copy.deepcopy(self._seed)

    def _index_of(self, user_id) -> int:
        for index, user in enumerate(self.users):
            if user["id"] == user_id:
                return index
        return -1

    def _check_email(self, email: Optional[str], exclude_id=None):
        if email is None:
            return
        for user in self.users:
            if user["email"] == email and user["id"] != exclude_id:
                raise EmailInUseError(email)

    def list(self) -> List[Dict[str, Any]]:
        return list(self.users)

    def get(self, user_id) -> Optional[Dict[str, Any]]:
        index = self._index_of(user_id)
        return self.users[index] if index != -1 else None

    def create(self, name: str, email: str, **extra) -> Dict[str, Any]:
        """
        Append a new user.

        Raises:
            EmailInUseError: If another user already has this email
        """
        self._check_email(email)

        user = {"id": self.id_factory(self.users), "name": name, "email": email}
        user.update({key: value for key, value in extra.items() if value is not None})
        if self.timestamps:
            user["created_at"] = datetime.now(timezone.utc)

        self.users.append(user)
        logger.debug(f"Created user {user['id']} ({email})")
        return user

    def replace(self, user_id, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Overwrite the given fields (PUT); id and created_at are preserved."""
        index = self._index_of(user_id)
        if index == -1:
            return None

        self._check_email(data.get("email"), exclude_id=user_id)

        current = self.users[index]
        replaced = {
            key: value for key, value in data.items() if key not in ("id", "created_at")
        }
        replaced["id"] = current["id"]
        if "created_at" in current:
            replaced["created_at"] = current["created_at"]
        if "active" in current and "active" not in replaced:
            replaced["active"] = current["active"]

        self.users[index] = replaced
        return replaced

    def update(self, user_id, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge the non-None fields of ``changes`` into the user (PATCH)."""
        index = self._index_of(user_id)
        if index == -1:
            return None

        changes = {
            key: value
            for key, value in changes.items()
            if value is not None and key not in ("id", "created_at")
        }
        self._check_email(changes.get("email"), exclude_id=user_id)

        updated = {**self.users[index], **changes}
        self.users[index] = updated
        return updated

    def delete(self, user_id) -> Optional[Dict[str, Any]]:
        index = self._index_of(user_id)
        if index == -1:
            return None
        return self.users.pop(index)

    def __len__(self):
        return len(self.users)
