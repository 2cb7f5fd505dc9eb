"""In-memory user service — the server side of the page requests.

UserService answers the async calls a user form and a user listing make:
load one user, validate and save one user, list all users. Failures are
raised as NotFoundError/ValidationError so the orchestrator can turn them
into user-visible messages.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from reactform.errors import NotFoundError, ValidationError

logger = logging.getLogger("reactform.service")


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: int
    firstname: str
    lastname: str
    update_date: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """Async CRUD over an in-memory user table.

    latency (seconds) is awaited before every call to mimic a network hop;
    clock stamps update_date on save.
    """

    def __init__(
        self,
        users: Iterable[User] = (),
        *,
        credentials: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] | None = None,
        latency: float = 0.0,
    ) -> None:
        self._users: dict[int, User] = {u.code: u for u in users}
        self._credentials = dict(credentials or {})
        self._clock = clock or _utcnow
        self._latency = latency

    async def _hop(self) -> None:
        await asyncio.sleep(self._latency)

    async def load_user(self, code: int) -> User:
        await self._hop()
        user = self._users.get(code)
        if user is None:
            raise NotFoundError("User not found!")
        return user

    async def save_user(self, user: User) -> User:
        """Validate, stamp update_date and store. Returns the stored user."""
        await self._hop()
        if user.code not in self._users:
            raise NotFoundError("User not found!")
        if not user.firstname.strip():
            raise ValidationError("Firstname is empty.")
        if not user.lastname.strip():
            raise ValidationError("Lastname is empty.")

        saved = user.model_copy(update={"update_date": self._clock()})
        self._users[saved.code] = saved
        logger.info("Saved user %d", saved.code)
        return saved

    async def list_users(self) -> tuple[User, ...]:
        await self._hop()
        return tuple(self._users[code] for code in sorted(self._users))

    def authenticate(self, username: str, password: str) -> bool:
        ok = self._credentials.get(username) == password
        if not ok:
            logger.info("Rejected login for %r", username)
        return ok
