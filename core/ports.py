"""
Record store contracts consumed by the services.

The SQLAlchemy implementations live in ``database.stores``; tests plug in
the in-memory fakes from ``tests/fakes.py``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Protocol

from core.filters import TaskFilter


@dataclass
class UserRecord:
    id: int
    username: str
    name: str
    password: str
    token: Optional[str] = None

    def public(self) -> Dict[str, Any]:
        """The fields a read may expose: never the hash or the token."""
        return {"id": self.id, "username": self.username, "name": self.name}


@dataclass
class TaskRecord:
    id: int
    user_id: int
    title: str
    description: Optional[str]
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UserStore(Protocol):
    async def count_by_username(self, username: str) -> int: ...

    async def find_by_username(self, username: str) -> Optional[UserRecord]: ...

    async def find_by_token(self, token: str) -> Optional[UserRecord]: ...

    async def create(self, *, username: str, name: str, password: str) -> UserRecord:
        """Insert a user with no token.  Raises ``ConflictError`` on a duplicate username."""
        ...

    async def update(self, username: str, patch: Dict[str, Any]) -> UserRecord:
        """Apply ``patch`` to the named user, leaving absent columns untouched."""
        ...


class TaskStore(Protocol):
    async def find_many(self, task_filter: TaskFilter, *, take: int, skip: int) -> List[TaskRecord]: ...

    async def count(self, task_filter: TaskFilter) -> int: ...
