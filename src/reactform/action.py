"""Actions and transactions — one scheduling tick of cell writes.

Writes made inside an @action or `with transaction()` are applied right away,
but subscriptions and reactions only run once the outermost scope exits. A
page can load a model, clear its status message and trigger its submitter,
and observers see a single transition instead of three.

Batches are synchronous. They must not span an await: an async function
cannot be an action, and a transaction inside a coroutine must close before
the next suspension point.
"""

from __future__ import annotations

import functools
import inspect
from contextlib import contextmanager
from typing import Callable, ParamSpec, TypeVar

from reactform._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch all cell writes inside fn.

    Observers only fire after fn returns, not during.

    Usage:
        model = Cell()
        status = Cell("Loading...")

        @action
        def loaded(user):
            model.write(user)
            status.write(None)
            # observers see both changes at once
    """
    if inspect.iscoroutinefunction(fn):
        raise TypeError(f"{fn.__qualname__} is async; batches cannot span an await")

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper


@contextmanager
def transaction():
    """Context manager for batching writes.

    Usage:
        with transaction():
            first.write("Ann")
            last.write("Lee")
            # observers fire here, after both are written
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()
