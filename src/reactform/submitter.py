"""Submitter — a manually gated relay between a source and its observers.

The submitter follows its source (a Cell, View or Lens) into an internal
buffer, but its published output only moves when trigger() is called. A page
can therefore load a model and reset its status message as separate writes
and still show the user a single transition: from "loading" straight to the
loaded form.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from reactform.cell import UNSET, Cell
from reactform.reaction import Subscription, subscribe
from reactform.view import View

T = TypeVar("T")


class Submitter(Generic[T]):
    """Buffers the latest source value; publishes it on trigger()."""

    __slots__ = ("_source", "_buffer", "_published", "_output", "_subscription")

    def __init__(self, source) -> None:
        self._source = source
        self._buffer: Any = source.try_read(UNSET)
        self._published: Cell[T] = Cell()
        self._output: View[T] = View(self._published.read)
        self._subscription = subscribe(source, self._observe)

    def _observe(self, value: T) -> None:
        self._buffer = value

    @property
    def buffered(self) -> T:
        """Last observed source value (UNSET if the source never had one)."""
        return self._buffer

    @property
    def version(self) -> int:
        """Number of times trigger() published."""
        return self._published.version

    def trigger(self) -> None:
        """Publish the buffered value and notify observers exactly once.

        The buffer is settled from the source first, so triggering inside a
        transaction publishes the value written earlier in that transaction.
        """
        self._buffer = self._source.try_read(UNSET)
        self._published.write(self._buffer)

    def view(self) -> View[T]:
        """The published output as a read-only View."""
        return self._output

    def read(self) -> T:
        return self._output.read()

    def try_read(self, default: Any = None) -> T | Any:
        return self._output.try_read(default)

    def is_ready(self) -> bool:
        return self._output.is_ready()

    def subscribe(self, fn: Callable[[T], None], *, fire_immediately: bool = False) -> Subscription:
        return subscribe(self._output, fn, fire_immediately=fire_immediately)

    def dispose(self) -> None:
        """Stop following the source and release the published view.

        buffered and version stay readable; reading the view raises ReactFormError.
        """
        self._subscription.dispose()
        self._output.dispose()

    def __repr__(self) -> str:
        return f"Submitter(published={self._published.try_read(UNSET)!r}, buffered={self._buffer!r})"
