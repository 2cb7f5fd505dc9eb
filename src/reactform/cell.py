"""Reactive cells — mutable values that track their readers.

When a Cell is read inside a View or Subscription evaluation, the dependency
is registered automatically. Every write bumps the cell's version and
notifies all dependents.

A Cell may start unset (waiting for data). Reading an unset cell raises
NotReadyError; try_read() and is_ready() never do.

All state lives in _anchor; instances are thin handles holding an _id.

Thread safety: call set_scheduler() once from the main thread. After that,
any write from a background thread is auto-marshaled. Main-thread writes
remain synchronous.
"""

from __future__ import annotations

import threading
import weakref
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from reactform import _anchor
from reactform._tracking import begin_batch, current_derivation, end_batch, schedule
from reactform.errors import NotReadyError

if TYPE_CHECKING:
    from reactform.reaction import Subscription
    from reactform.view import View

T = TypeVar("T")
U = TypeVar("U")


class _Unset:
    """Sentinel type for a cell that has not received a value yet."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global thread scheduler for cross-thread cell writes.

    Call once from the thread that owns the reactive graph:
        reactform.set_scheduler(loop.call_soon_threadsafe)

    After this, any Cell.write() from a background thread is automatically
    marshaled. Writes from the owning thread remain synchronous.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread()


def _marshal(fn: Callable[[], None]) -> bool:
    """Hand fn to the scheduler if called off the scheduler thread."""
    if _scheduler is not None and threading.current_thread() != _scheduler_thread:
        _scheduler(fn)
        return True
    return False


def track(source) -> None:
    """Register source as a dependency of the currently-evaluating derivation."""
    derivation = current_derivation.get()
    if derivation is None:
        return
    dependencies = _anchor.dependencies.get(derivation._id)
    # A derivation disposed mid-run stops collecting sources.
    if dependencies is not None:
        _anchor.observers[source._id].add(derivation)
        dependencies.add(source)


class Cell(Generic[T]):
    """A single observable value, optionally starting unset."""

    __slots__ = ("_id", "__weakref__")

    def __init__(self, value: T = UNSET) -> None:
        self._id = _anchor.new_id()
        _anchor.values[self._id] = value
        _anchor.versions[self._id] = 0
        _anchor.observers[self._id] = set()
        # Entries go away with the handle. The finalizer holds release and the
        # id, never the cell, and runs before interpreter teardown at exit.
        weakref.finalize(self, _anchor.release, self._id)

    def read(self) -> T:
        """Read the value. Raises NotReadyError while the cell is unset."""
        track(self)
        value = _anchor.values[self._id]
        if value is UNSET:
            raise NotReadyError(f"{self!r} has no value yet")
        return value

    def try_read(self, default: Any = None) -> T | Any:
        """Read the value, or default while the cell is unset."""
        track(self)
        value = _anchor.values[self._id]
        return default if value is UNSET else value

    def is_ready(self) -> bool:
        track(self)
        return _anchor.values[self._id] is not UNSET

    @property
    def version(self) -> int:
        """Number of writes so far. Not tracked."""
        return _anchor.versions[self._id]

    def write(self, value: T) -> None:
        """Write a new value and notify. Auto-marshals from background threads."""
        if not _marshal(lambda v=value: self._write_direct(v)):
            self._write_direct(value)

    def reset(self) -> None:
        """Put the cell back into the unset state."""
        self.write(UNSET)

    def update(self, fn: Callable[[T], T]) -> None:
        """Atomically replace the value with fn(current value).

        The whole read-modify-write is marshaled as one unit, so concurrent
        updates never apply fn to a stale value.
        """
        if not _marshal(lambda: self._update_direct(fn)):
            self._update_direct(fn)

    def _update_direct(self, fn: Callable[[T], T]) -> None:
        current = _anchor.values[self._id]
        if current is UNSET:
            raise NotReadyError(f"cannot update {self!r} before it has a value")
        self._write_direct(fn(current))

    def _write_direct(self, value: T) -> None:
        """Store value and notify. Always runs on the scheduler thread."""
        _anchor.values[self._id] = value
        _anchor.versions[self._id] += 1
        begin_batch()
        try:
            self._notify()
        finally:
            end_batch()

    def _notify(self) -> None:
        """Schedule all observers for re-evaluation."""
        for observer in list(_anchor.observers[self._id]):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        """Remove an observer. Called during dependency cleanup."""
        observers = _anchor.observers.get(self._id)
        if observers is not None:
            observers.discard(observer)

    def subscribe(self, fn: Callable[[T], None], *, fire_immediately: bool = False) -> Subscription:
        """Call fn(value) after every settled change. Returns the Subscription."""
        from reactform.reaction import subscribe

        return subscribe(self, fn, fire_immediately=fire_immediately)

    def map(self, fn: Callable[[T], U]) -> View[U]:
        """Derive a read-only View of fn(value)."""
        from reactform.view import mapped

        return mapped(self, fn)

    def __repr__(self) -> str:
        return f"Cell({_anchor.values.get(self._id, UNSET)!r})"
