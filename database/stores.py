"""
SQLAlchemy-backed record stores.

Each store wraps one ``AsyncSession`` (one unit of work) and returns plain
``UserRecord`` / ``TaskRecord`` values so nothing above this layer
touches ORM objects.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import Integer, Select, and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

from core.errors import ConflictError, NotFoundError
from core.filters import Contains, Equals, Predicate, Scope, TaskField, TaskFilter
from core.ports import TaskRecord, UserRecord
from database.models import Task, User

logger = logging.getLogger(__name__)

_PATCHABLE_USER_COLUMNS = frozenset({"name", "password", "token"})

_TASK_COLUMNS = {
    TaskField.USER_ID: Task.user_id,
    TaskField.TITLE: Task.title,
    TaskField.DESCRIPTION: Task.description,
    TaskField.COMPLETED: Task.completed,
}


def _to_user_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        name=row.name,
        password=row.password,
        token=row.token,
    )


def _to_task_record(row: Task) -> TaskRecord:
    return TaskRecord(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        completed=bool(row.completed),
    )


# ── Task query composition ──────────────────────────────────────────


class substring_position(FunctionElement):
    """
    1-based position of ``needle`` in ``haystack``, 0 when absent.

    Case-sensitive on PostgreSQL and SQLite alike; ``%`` and ``_`` in the
    needle are plain characters.
    """

    type = Integer()
    name = "substring_position"
    inherit_cache = True


@compiles(substring_position)
def _compile_strpos(element, compiler, **kw):
    return "strpos(%s)" % compiler.process(element.clauses, **kw)


@compiles(substring_position, "sqlite")
def _compile_instr(element, compiler, **kw):
    return "instr(%s)" % compiler.process(element.clauses, **kw)


def _clause(predicate: Predicate):
    column = _TASK_COLUMNS[predicate.field]
    if isinstance(predicate, (Scope, Equals)):
        return column == predicate.value
    if isinstance(predicate, Contains):
        return substring_position(column, predicate.value) > 0
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def where_clause(task_filter: TaskFilter):
    return and_(*(_clause(p) for p in task_filter.predicates))


def page_statement(task_filter: TaskFilter, *, take: int, skip: int) -> Select:
    return (
        select(Task)
        .where(where_clause(task_filter))
        .order_by(Task.id.asc())
        .limit(take)
        .offset(skip)
    )


def count_statement(task_filter: TaskFilter) -> Select:
    return select(func.count()).select_from(Task).where(where_clause(task_filter))


# ── Stores ──────────────────────────────────────────────────────────


class SqlUserStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get(self, **criteria: Any) -> Optional[User]:
        result = await self._session.execute(select(User).filter_by(**criteria))
        return result.scalar_one_or_none()

    async def count_by_username(self, username: str) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(User).where(User.username == username)
        )
        return int(result.scalar_one())

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        row = await self._get(username=username)
        return _to_user_record(row) if row is not None else None

    async def find_by_token(self, token: str) -> Optional[UserRecord]:
        row = await self._get(token=token)
        return _to_user_record(row) if row is not None else None

    async def create(self, *, username: str, name: str, password: str) -> UserRecord:
        row = User(username=username, name=name, password=password, token=None)
        self._session.add(row)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Lost the register race: another insert took the username first.
            logger.debug("Unique violation on users.username=%s", username)
            raise ConflictError("Username already exists") from exc
        return _to_user_record(row)

    async def update(self, username: str, patch: Dict[str, Any]) -> UserRecord:
        unknown = set(patch) - _PATCHABLE_USER_COLUMNS
        if unknown:
            raise ValueError(f"Cannot patch user columns: {sorted(unknown)}")

        row = await self._get(username=username)
        if row is None:
            raise NotFoundError("user is not found")

        for column, value in patch.items():
            setattr(row, column, value)
        await self._session.flush()
        return _to_user_record(row)


class SqlTaskStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_many(self, task_filter: TaskFilter, *, take: int, skip: int) -> List[TaskRecord]:
        result = await self._session.execute(page_statement(task_filter, take=take, skip=skip))
        return [_to_task_record(row) for row in result.scalars().all()]

    async def count(self, task_filter: TaskFilter) -> int:
        result = await self._session.execute(count_statement(task_filter))
        return int(result.scalar_one())

    async def create(
        self,
        *,
        user_id: int,
        title: str,
        description: Optional[str] = None,
        completed: bool = False,
    ) -> TaskRecord:
        """Insert a task row (seeding; task creation is not part of the service API)."""
        row = Task(user_id=user_id, title=title, description=description, completed=completed)
        self._session.add(row)
        await self._session.flush()
        return _to_task_record(row)
