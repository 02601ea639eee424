"""User directory — the target of the ledger's weak party references.

Shipments store user ids only; nothing in the ledger requires a user to be
present here.  The directory exists so dashboards and the CLI can show
names and roles.
"""

from __future__ import annotations

from coldchain.core.errors import NotFoundError
from coldchain.models.users import User, UserRole

DEMO_USERS: tuple[User, ...] = (
    User(
        id="manu-001",
        name="TechCorp Manufacturing",
        role=UserRole.MANUFACTURER,
        address="0x1234...abcd",
    ),
    User(
        id="logi-001",
        name="FastTrack Logistics",
        role=UserRole.LOGISTICS,
        address="0x5678...efgh",
    ),
    User(
        id="cons-001",
        name="Global Retail Chain",
        role=UserRole.CONSUMER,
        address="0x9012...ijkl",
    ),
)


class UserDirectory:
    """In-memory user lookup."""

    def __init__(self, users: tuple[User, ...] | list[User] = DEMO_USERS) -> None:
        self._users: dict[str, User] = {u.id: u for u in users}

    def add(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def get(self, user_id: str) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise NotFoundError(f"User not found: {user_id}") from None

    def find(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def list_users(self, role: UserRole | None = None) -> list[User]:
        return [u for u in self._users.values() if role is None or u.role == role]
