"""
Account lifecycle: register, login, profile read / update, logout.

Sessions are a single opaque token stored on the user row: login
overwrites it (so any earlier session stops working), logout clears it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from auth.password import hash_password, verify_password
from auth.tokens import generate_token
from config.settings import config
from core.errors import ConflictError, NotFoundError, UnauthorizedError
from core.ports import UserStore
from utils.schemas import (
    LoginUserRequest,
    RegisterUserRequest,
    UpdateUserRequest,
    username_schema,
)
from utils.validators import validate

logger = logging.getLogger(__name__)

# Both login failure branches raise exactly this message.
_BAD_CREDENTIALS = "Username or password wrong"


class AccountService:
    def __init__(
        self,
        users: UserStore,
        *,
        bcrypt_rounds: Optional[int] = None,
        token_factory: Callable[[], str] = generate_token,
    ):
        self._users = users
        self._rounds = bcrypt_rounds or config.bcrypt_rounds
        self._new_token = token_factory

    async def register(self, request: Any) -> Dict[str, Any]:
        """Create a user.  The password is stored hashed and never echoed."""
        req = validate(RegisterUserRequest, request)

        if await self._users.count_by_username(req.username) > 0:
            raise ConflictError("Username already exists")

        user = await self._users.create(
            username=req.username,
            name=req.name,
            password=hash_password(req.password, self._rounds),
        )
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user.public()

    async def login(self, request: Any) -> Dict[str, Any]:
        """
        Verify credentials and issue a fresh token.

        Not idempotent: every successful call invalidates the previous token.
        """
        req = validate(LoginUserRequest, request)

        user = await self._users.find_by_username(req.username)
        if user is None or not verify_password(req.password, user.password):
            raise UnauthorizedError(_BAD_CREDENTIALS)

        token = self._new_token()
        updated = await self._users.update(user.username, {"token": token})
        logger.info("Login: %s (%s)", updated.username, updated.id)

        return {"id": updated.id, "token": updated.token}

    async def get(self, username: Any) -> Dict[str, Any]:
        username = validate(username_schema, username)

        user = await self._users.find_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return user.public()

    async def update(self, request: Any) -> Dict[str, Any]:
        """Patch ``name`` and/or ``password``; absent fields stay untouched."""
        req = validate(UpdateUserRequest, request)

        if await self._users.count_by_username(req.username) != 1:
            raise NotFoundError("user is not found")

        patch: Dict[str, Any] = {}
        if req.name is not None:
            patch["name"] = req.name
        if req.password is not None:
            patch["password"] = hash_password(req.password, self._rounds)

        user = await self._users.update(req.username, patch)
        logger.info("Updated user %s fields=%s", user.username, sorted(patch))
        return {"username": user.username, "name": user.name}

    async def logout(self, username: Any) -> Dict[str, Any]:
        username = validate(username_schema, username)

        user = await self._users.find_by_username(username)
        if user is None:
            raise NotFoundError("user is not found")

        await self._users.update(username, {"token": None})
        logger.info("Logout: %s (%s)", user.username, user.id)
        return {"username": username}

    async def authenticate(self, token: Optional[str]) -> Dict[str, Any]:
        """Resolve the current session token to its user."""
        if not token:
            raise UnauthorizedError("Unauthorized")

        user = await self._users.find_by_token(token)
        if user is None:
            raise UnauthorizedError("Unauthorized")
        return user.public()
