"""Async request orchestration — one call, exactly one outcome.

A Request wraps an async callable and moves through

    IDLE -> PENDING -> COMPLETED (Ok | Err)

Expected failures (RequestError and subclasses) become Err(message). Any
other exception is a bug: the request is marked ABORTED and the exception
propagates to the caller unchanged.

orchestrate() runs one Request and routes its outcome to exactly one of two
handlers. There is no retry and no cancellation; a caller that may go away
while the call is in flight passes is_active so a late outcome is dropped
instead of written into a dead page.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from reactform.errors import RequestError

logger = logging.getLogger("reactform.request")

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[T], Err[str]]


class RequestState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMPLETED = "completed"
    ABORTED = "aborted"


class Request(Generic[T]):
    """A one-shot asynchronous call producing a single Outcome."""

    def __init__(self, call: Callable[[], Awaitable[Any]], *, name: str | None = None) -> None:
        self._call = call
        self.name = name or getattr(call, "__name__", "request")
        self._state = RequestState.IDLE
        self._outcome: Outcome | None = None

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def outcome(self) -> Outcome | None:
        """The outcome once COMPLETED, otherwise None."""
        return self._outcome

    @property
    def pending(self) -> bool:
        return self._state is RequestState.PENDING

    async def run(self) -> Outcome:
        """Await the call once and return its outcome."""
        if self._state is not RequestState.IDLE:
            raise RuntimeError(f"request {self.name!r} already {self._state.value}")

        self._state = RequestState.PENDING
        logger.debug("Request %s started", self.name)
        try:
            result = await self._call()
        except RequestError as exc:
            outcome: Outcome = Err(exc.message)
        except BaseException:
            self._state = RequestState.ABORTED
            raise
        else:
            outcome = result if isinstance(result, (Ok, Err)) else Ok(result)

        self._outcome = outcome
        self._state = RequestState.COMPLETED
        if outcome.ok:
            logger.debug("Request %s succeeded", self.name)
        else:
            logger.info("Request %s failed: %s", self.name, outcome.error)
        return outcome

    def __repr__(self) -> str:
        return f"Request({self.name}, {self._state.value})"


async def orchestrate(
    call: Callable[[], Awaitable[Any]],
    *,
    on_ok: Callable[[Any], None],
    on_err: Callable[[str], None],
    is_active: Callable[[], bool] | None = None,
    name: str | None = None,
) -> Outcome:
    """Run call once and hand the outcome to on_ok or on_err.

    The only suspension point is the awaited call; the handler runs
    synchronously right after it. When is_active() is false by then, neither
    handler runs and the outcome is only returned.

    Usage:
        outcome = await orchestrate(
            lambda: service.load_user(42),
            on_ok=page.model.write,
            on_err=page.status.write,
            is_active=lambda: page.mounted,
        )
    """
    request: Request[Any] = Request(call, name=name)
    outcome = await request.run()

    if is_active is not None and not is_active():
        logger.debug("Discarding outcome of %s: owner is no longer active", request.name)
        return outcome

    if outcome.ok:
        on_ok(outcome.value)
    else:
        on_err(outcome.error)
    return outcome
