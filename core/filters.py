"""
Conjunctive task filters.

A ``TaskFilter`` is a list of typed predicates that must all hold.  It is
always scoped to one user; the optional search fields add ``Contains`` or
``Equals`` predicates on top.  Stores decide how to evaluate the list:
``database.stores`` renders it to SQL, fakes call ``matches``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Union


class TaskField(str, Enum):
    USER_ID = "user_id"
    TITLE = "title"
    DESCRIPTION = "description"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Scope:
    """Ownership predicate.  Always the first entry of a filter."""

    field: TaskField
    value: Any

    def matches(self, record: Any) -> bool:
        return getattr(record, self.field.value) == self.value


@dataclass(frozen=True)
class Equals:
    field: TaskField
    value: Any

    def matches(self, record: Any) -> bool:
        return getattr(record, self.field.value) == self.value


@dataclass(frozen=True)
class Contains:
    """Case-sensitive substring match."""

    field: TaskField
    value: str

    def matches(self, record: Any) -> bool:
        current = getattr(record, self.field.value)
        return current is not None and self.value in current


Predicate = Union[Scope, Equals, Contains]


class TaskFilter:
    def __init__(self, user_id: Any) -> None:
        self._predicates: List[Predicate] = [Scope(TaskField.USER_ID, user_id)]

    @property
    def user_id(self) -> Any:
        return self._predicates[0].value

    @property
    def predicates(self) -> List[Predicate]:
        return list(self._predicates)

    def contains(self, field: TaskField, text: str) -> "TaskFilter":
        if field not in (TaskField.TITLE, TaskField.DESCRIPTION):
            raise ValueError(f"'{field.value}' does not support substring matching")
        self._predicates.append(Contains(field, text))
        return self

    def equals(self, field: TaskField, value: Any) -> "TaskFilter":
        if field is TaskField.USER_ID:
            raise ValueError("user scope is fixed at construction")
        self._predicates.append(Equals(field, value))
        return self

    def matches(self, record: Any) -> bool:
        return all(p.matches(record) for p in self._predicates)

    def __len__(self) -> int:
        return len(self._predicates)

    def __repr__(self) -> str:
        return f"TaskFilter({self._predicates!r})"
