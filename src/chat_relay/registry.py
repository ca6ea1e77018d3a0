"""User registry: the in-memory roster of registered display names.

Single-instance store shared by the HTTP registration endpoint and the
channel protocol. All data lives in a list, lost on restart. Names are
unique under case-insensitive comparison ("Alice" and "alice" are the same
identity).
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional

from chat_relay.models import User

logger = logging.getLogger(__name__)


class NameTaken(Exception):
    """Raised when a display name is already held by another user."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Name {name!r} is already taken")
        self.name = name


def _key(name: str) -> str:
    return name.casefold()


class UserRegistry:
    def __init__(self) -> None:
        # append-only order is the roster order
        self._users: list[User] = []
        self._lock = threading.Lock()

    def register(self, name: str) -> User:
        """Create a user with a fresh id. Raises NameTaken on collision."""
        with self._lock:
            if self._find_locked(name) is not None:
                raise NameTaken(name)
            user = User(id=str(uuid.uuid4()), name=name)
            self._users.append(user)

        logger.info("New user created: id=%s name=%s", user.id, user.name)
        return user

    def register_existing(self, user: User) -> User:
        """Insert a client-supplied user record, keeping its id. Raises NameTaken on collision."""
        with self._lock:
            if self._find_locked(user.name) is not None:
                raise NameTaken(user.name)
            self._users.append(user)

        logger.info("User joined: id=%s name=%s", user.id, user.name)
        return user

    def remove(self, name: str, user_id: Optional[str] = None) -> Optional[User]:
        """Remove the user holding ``name``. Returns None if there is none.

        When ``user_id`` is given, the user is only removed if its id matches.
        """
        with self._lock:
            user = self._find_locked(name)
            if user is None or (user_id is not None and user.id != user_id):
                return None
            self._users.remove(user)

        logger.info("User %r left the chat", user.name)
        return user

    def find(self, name: str) -> Optional[User]:
        with self._lock:
            return self._find_locked(name)

    def snapshot(self) -> list[User]:
        """Point-in-time copy of the roster in insertion order."""
        with self._lock:
            return list(self._users)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def _find_locked(self, name: str) -> Optional[User]:
        key = _key(name)
        for user in self._users:
            if _key(user.name) == key:
                return user
        return None
