"""Dependency tracking engine.

Uses contextvars to track which cells are read during a view/subscription
evaluation, building the dependency graph automatically.

Propagation runs in two passes. Views are invalidated eagerly (a cheap
marking pass that walks down the graph); subscriptions and reactions are
queued and run once marking is over. Every Cell.write() is its own small
batch, and transaction()/@action widen the batch to a whole scheduling tick,
so effects only ever see settled, glitch-free values.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reactform.reaction import Reaction, Subscription
    from reactform.view import View

    Derivation = View | Subscription | Reaction

logger = logging.getLogger("reactform.tracking")

# The currently-evaluating derivation.
# When set, any Cell.read() call registers itself as a dependency.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# Batch depth counter. When > 0, effects are deferred.
_batch_depth: int = 0

# Effects that were invalidated during a batch, awaiting flush.
# A dict keeps insertion order so observers run in subscription order.
_pending: dict[Derivation, None] = {}


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending effects."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def in_batch() -> bool:
    return _batch_depth > 0


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation after one of its sources changed.

    Views are marked stale immediately. Effects wait for the batch to close,
    or run right away when no batch is open.
    """
    if derivation._eager:
        derivation._run()
    elif _batch_depth > 0:
        _pending[derivation] = None
    else:
        derivation._run()


def _flush_pending() -> None:
    """Run all pending effects. Handles effects scheduled during flush.

    A failing effect does not stop the others: every queued effect runs, then
    the first error is re-raised. Later errors are logged.
    """
    error: Exception | None = None
    while _pending:
        # Effects may schedule new ones during run.
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            try:
                derivation._run()
            except Exception as exc:
                if error is None:
                    error = exc
                else:
                    logger.error("Effect %r failed during flush", derivation, exc_info=exc)
    if error is not None:
        raise error


@contextmanager
def untracked():
    """Read cells without registering them as dependencies."""
    token = current_derivation.set(None)
    try:
        yield
    finally:
        current_derivation.reset(token)


def get_pending_count() -> int:
    """Number of effects waiting to run. Useful for testing."""
    return len(_pending)
