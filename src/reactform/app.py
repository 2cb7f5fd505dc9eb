"""Application state — the current endpoint and the logged-in user.

Navigation is a transition on an explicit AppState object handed to every
page, not a mutation of a shared global. Protected endpoints require a
logged-in user: navigating to one while logged out lands on the login
endpoint and remembers where the user was headed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from reactform.action import action
from reactform.store import Store
from reactform.view import View

logger = logging.getLogger("reactform.app")


@dataclass(frozen=True)
class Endpoint:
    name: str
    params: tuple[Any, ...] = ()
    protected: bool = False

    def __str__(self) -> str:
        if not self.params:
            return self.name
        return f"{self.name}/{'/'.join(str(p) for p in self.params)}"


class AppState(Store):
    """Endpoint + session state with navigation transitions."""

    def __init__(self, home: Endpoint, *, login_endpoint: Endpoint) -> None:
        super().__init__({"endpoint": home, "user": None, "return_to": None})
        self.home = home
        self.login_endpoint = login_endpoint
        self.endpoint = self.cell("endpoint")
        self.user = self.cell("user")
        self.authenticated: View[bool] = self.user.map(lambda name: name is not None)

    @action
    def navigate(self, target: Endpoint) -> Endpoint:
        """Move to target, or to the login endpoint if target needs a user.

        Returns the endpoint actually reached.
        """
        if target.protected and self.get("user") is None:
            logger.info("Redirecting %s to %s: not logged in", target, self.login_endpoint)
            self.set("return_to", target)
            target = self.login_endpoint
        else:
            logger.info("Navigating to %s", target)
        self.set("endpoint", target)
        return target

    @action
    def login(self, username: str) -> Endpoint:
        """Start a session and continue to the remembered endpoint (or home)."""
        target = self.get("return_to") or self.home
        self.set("user", username)
        self.set("return_to", None)
        logger.info("Logged in %r", username)
        return self.navigate(target)

    @action
    def logout(self) -> Endpoint:
        """End the session and go home."""
        logger.info("Logged out %r", self.get("user"))
        self.set("user", None)
        self.set("return_to", None)
        return self.navigate(self.home)
