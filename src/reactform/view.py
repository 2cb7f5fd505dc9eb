"""Derived views — read-only projections with automatic dependency tracking.

A View wraps a function. When evaluated, it tracks which cells (or other
views) the function reads and memoizes the result. When any dependency
changes, the memo is invalidated. On next read, it re-evaluates, so the
function runs at most once per settled change no matter how many upstream
writes happened in between.

A failed evaluation is memoized too: reading a view over an unset cell
re-raises the same NotReadyError until a dependency changes.

All state lives in _anchor; instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from reactform import _anchor
from reactform._tracking import current_derivation, schedule
from reactform.cell import track
from reactform.errors import NotReadyError, ReactFormError

if TYPE_CHECKING:
    from reactform.reaction import Subscription

T = TypeVar("T")
U = TypeVar("U")
A = TypeVar("A")
B = TypeVar("B")

_UNSET = object()


class _Failure:
    __slots__ = ("error",)

    def __init__(self, error: Exception) -> None:
        self.error = error


class View(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_id", "_name")

    # Views are invalidated during the marking pass, never deferred.
    _eager = True

    def __init__(self, fn: Callable[[], T]) -> None:
        self._id = _anchor.new_id()
        self._name = getattr(fn, "__name__", "fn")
        _anchor.derivation_fns[self._id] = fn
        _anchor.cached_values[self._id] = _UNSET
        _anchor.dirty_flags[self._id] = True
        _anchor.dependencies[self._id] = set()
        _anchor.observers[self._id] = set()

    @property
    def _fn(self) -> Callable[[], T]:
        return _anchor.derivation_fns[self._id]

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @property
    def disposed(self) -> bool:
        return self._id not in _anchor.dirty_flags

    def read(self) -> T:
        """Read the derived value. Recomputes if dirty."""
        if self.disposed:
            raise ReactFormError(f"{self!r} was disposed")
        track(self)

        if _anchor.dirty_flags[self._id]:
            self._recompute()

        value = _anchor.cached_values[self._id]
        if isinstance(value, _Failure):
            raise value.error
        return value

    def try_read(self, default: Any = None) -> T | Any:
        """Read the derived value, or default while a dependency is unset."""
        try:
            return self.read()
        except NotReadyError:
            return default

    def is_ready(self) -> bool:
        try:
            self.read()
        except NotReadyError:
            return False
        return True

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()

        token = current_derivation.set(self)
        try:
            _anchor.cached_values[self._id] = self._fn()
        except Exception as exc:
            _anchor.cached_values[self._id] = _Failure(exc)
        finally:
            current_derivation.reset(token)

        _anchor.dirty_flags[self._id] = False

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed.

        Marks the view dirty and propagates to its own observers. The
        recomputation itself waits for the next read().
        """
        if self.disposed:
            return
        if not _anchor.dirty_flags[self._id]:
            _anchor.dirty_flags[self._id] = True
            for observer in list(_anchor.observers[self._id]):
                schedule(observer)

    def _remove_observer(self, observer) -> None:
        observers = _anchor.observers.get(self._id)
        if observers is not None:
            observers.discard(observer)

    def subscribe(self, fn: Callable[[T], None], *, fire_immediately: bool = False) -> Subscription:
        """Call fn(value) after every settled change. Returns the Subscription."""
        from reactform.reaction import subscribe

        return subscribe(self, fn, fire_immediately=fire_immediately)

    def map(self, fn: Callable[[T], U]) -> View[U]:
        return mapped(self, fn)

    def dispose(self) -> None:
        """Disconnect from all dependencies and free the cached state.

        Reading a disposed view raises ReactFormError. Disposing twice is a no-op.
        """
        if self.disposed:
            return
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.release(self._id)

    def __repr__(self) -> str:
        if self.disposed:
            state = "disposed"
        elif _anchor.dirty_flags[self._id]:
            state = "dirty"
        else:
            state = f"cached={_anchor.cached_values[self._id]!r}"
        return f"View({self._name}, {state})"


def view(fn: Callable[[], T]) -> View[T]:
    """Decorator/factory to create a View from a function.

    Usage:
        counter = Cell(0)

        @view
        def doubled():
            return counter.read() * 2

        doubled.read()  # 0
        counter.write(5)
        doubled.read()  # 10
    """
    return View(fn)


def mapped(source, fn: Callable[[A], T]) -> View[T]:
    """View of fn(source.read()) for any readable source."""
    return View(lambda: fn(source.read()))


def combine(first, second, fn: Callable[[A, B], T]) -> View[T]:
    """View of fn(first.read(), second.read())."""
    return View(lambda: fn(first.read(), second.read()))
