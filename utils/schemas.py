"""
Pydantic request schemas for the account and task services.

Unknown keys are rejected and empty strings are not accepted where a
value is required.
"""

from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter

Username = Annotated[str, StringConstraints(min_length=1, max_length=100)]

username_schema: TypeAdapter = TypeAdapter(Username)


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterUserRequest(_Request):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)


class LoginUserRequest(_Request):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=100)


class UpdateUserRequest(_Request):
    """Partial update: ``None`` means leave the stored value as it is."""

    username: str = Field(..., min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=100)


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class SearchTaskRequest(_Request):
    page: int = Field(1, ge=1)
    size: int = Field(10, ge=1, le=100)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=200)
    completed: Optional[bool] = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.size
