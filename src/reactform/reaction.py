"""Reactions and subscriptions — side effects triggered by state changes.

Unlike a View (which is lazy and only evaluates on read), effects eagerly
re-run whenever their tracked dependencies change. They are queued during the
marking pass and run once the current batch closes, so each effect runs once
per settled change and sees only final values.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when anything it read changes.
- subscribe(source, fn): calls fn(value) with the source's latest value after
  every change. This is how cells and views expose observers.

All state lives in _anchor; instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from reactform import _anchor
from reactform._tracking import current_derivation, untracked
from reactform.cell import UNSET

T = TypeVar("T")


class Reaction:
    """A reactive side effect that re-runs when its dependencies change.

    Reactions run eagerly (unlike View which is lazy).
    """

    __slots__ = ("_id", "_name")

    _eager = False

    def __init__(self, fn: Callable[[], None]) -> None:
        self._id = _anchor.new_id()
        self._name = getattr(fn, "__name__", "fn")
        _anchor.derivation_fns[self._id] = fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False

    @property
    def _fn(self) -> Callable[[], None]:
        return _anchor.derivation_fns[self._id]

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @property
    def disposed(self) -> bool:
        return _anchor.disposed.get(self._id, True)

    def _run(self) -> None:
        """Re-evaluate the reaction function, re-tracking dependencies."""
        if self.disposed:
            return

        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()

        token = current_derivation.set(self)
        try:
            self._fn()
        finally:
            current_derivation.reset(token)

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all dependencies and frees its state."""
        if self.disposed:
            return
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.release(self._id)

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "active"
        return f"{type(self).__name__}({self._name}, {state})"


class Subscription(Reaction):
    """An observer of one source: calls callback(value) after every change.

    The callback receives UNSET when the source has no value (an unset cell,
    or a view over one). The callback itself runs untracked, so reading other
    cells inside it does not widen the subscription.
    """

    __slots__ = ("_callback",)

    def __init__(self, source, callback: Callable[[T], None]) -> None:
        super().__init__(lambda: source.try_read(UNSET))
        self._callback = callback

    def _run(self) -> None:
        if self.disposed:
            return

        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()

        token = current_derivation.set(self)
        try:
            value = self._fn()
        finally:
            current_derivation.reset(token)

        with untracked():
            self._callback(value)

    def _track_only(self) -> None:
        """Establish dependencies without calling the callback."""
        token = current_derivation.set(self)
        try:
            self._fn()
        finally:
            current_derivation.reset(token)

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "active"
        return f"Subscription({getattr(self._callback, '__name__', 'fn')}, {state})"


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn immediately, then re-run whenever any cell it reads changes.

    Returns the Reaction (call .dispose() to stop).

    Usage:
        counter = Cell(0)
        log = []

        r = autorun(lambda: log.append(counter.read()))
        # log == [0]: ran immediately

        counter.write(1)
        # log == [0, 1]: re-ran because counter changed

        r.dispose()
        counter.write(2)
        # log == [0, 1]: stopped
    """
    r = Reaction(fn)
    r._run()  # Initial run to establish dependencies
    return r


def subscribe(
    source,
    fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> Subscription:
    """Call fn(value) whenever source changes.

    Every write notifies, even when the new value equals the old one. Writes
    grouped in a transaction() notify once, with the final value.

    Returns the Subscription (call .dispose() to stop).

    Usage:
        name = Cell("Ann")
        seen = []
        sub = subscribe(name, seen.append)

        name.write("Bob")
        # seen == ["Bob"]

        sub.dispose()
    """
    s = Subscription(source, fn)
    if fire_immediately:
        s._run()
    else:
        s._track_only()
    return s
