"""Field lenses — read/write windows onto part of a cell's value.

A Lens pairs a getter and a setter over a source (a Cell, or another Lens).
Reading it returns get(source value). Writing v replaces the source value
with set(source value, v). The lens owns no storage, so the source remains
the single place the value lives and every observer of the source sees the
edit.

Writes are read-modify-write through Cell.update(): the setter is always
applied to the source's latest value, so two lenses over disjoint fields of
the same cell never clobber each other.

Laws, for every reachable o and v:
    set(o, get(o)) == o
    get(set(o, v)) == v
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from pydantic import BaseModel

from reactform.cell import UNSET

if TYPE_CHECKING:
    from reactform.reaction import Subscription
    from reactform.view import View

O = TypeVar("O")
I = TypeVar("I")
U = TypeVar("U")


def replace_field(obj: Any, name: str, value: Any) -> Any:
    """Return a copy of obj with attribute/key name set to value."""
    if isinstance(obj, BaseModel):
        return obj.model_copy(update={name: value})
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.replace(obj, **{name: value})
    if isinstance(obj, Mapping):
        return {**obj, name: value}
    raise TypeError(f"cannot replace field {name!r} on {type(obj).__name__}")


def replace_item(obj: Any, key: Any, value: Any) -> Any:
    """Return a copy of a mapping, list or tuple with obj[key] set to value."""
    if isinstance(obj, Mapping):
        return {**obj, key: value}
    if isinstance(obj, (list, tuple)):
        items = list(obj)
        items[key] = value
        return type(obj)(items)
    raise TypeError(f"cannot replace item {key!r} on {type(obj).__name__}")


class Lens(Generic[O, I]):
    """A synthetic cell exposing get(source) with write-through via set."""

    __slots__ = ("_source", "_get", "_set")

    def __init__(self, source, get: Callable[[O], I], set: Callable[[O, I], O]) -> None:
        self._source = source
        self._get = get
        self._set = set

    @property
    def source(self):
        return self._source

    def read(self) -> I:
        """Read through the lens. Raises NotReadyError while the source is unset."""
        return self._get(self._source.read())

    def try_read(self, default: Any = None) -> I | Any:
        outer = self._source.try_read(UNSET)
        return default if outer is UNSET else self._get(outer)

    def is_ready(self) -> bool:
        return self._source.is_ready()

    def write(self, value: I) -> None:
        """Write through the lens into the source's latest value."""
        self.update(lambda _: value)

    def update(self, fn: Callable[[I], I]) -> None:
        """Atomically replace the focused part with fn(current part)."""
        self._source.update(lambda outer: self._set(outer, fn(self._get(outer))))

    def lens(self, get: Callable[[I], U], set: Callable[[I, U], I]) -> Lens[I, U]:
        """Compose a further lens over this one."""
        return Lens(self, get, set)

    def field(self, name: str) -> Lens[I, Any]:
        return field(self, name)

    def item(self, key: Any) -> Lens[I, Any]:
        return item(self, key)

    def subscribe(self, fn: Callable[[I], None], *, fire_immediately: bool = False) -> Subscription:
        from reactform.reaction import subscribe

        return subscribe(self, fn, fire_immediately=fire_immediately)

    def map(self, fn: Callable[[I], U]) -> View[U]:
        from reactform.view import mapped

        return mapped(self, fn)

    def __repr__(self) -> str:
        return f"Lens({self._source!r})"


def lens(source, get: Callable[[O], I], set: Callable[[O, I], O]) -> Lens[O, I]:
    """Build a Lens over source.

    Usage:
        user = Cell(User(code=42, firstname="Ann", lastname="Lee", ...))
        first = lens(user, lambda u: u.firstname,
                     lambda u, v: u.model_copy(update={"firstname": v}))
        first.write("Bob")
        user.read().firstname  # "Bob"
    """
    return Lens(source, get, set)


def field(source, name: str) -> Lens[Any, Any]:
    """Lens over attribute (or mapping key) name of the source's value."""

    def get(obj):
        if isinstance(obj, Mapping):
            return obj[name]
        return getattr(obj, name)

    return Lens(source, get, lambda obj, value: replace_field(obj, name, value))


def item(source, key: Any) -> Lens[Any, Any]:
    """Lens over source_value[key] for mappings, lists and tuples."""
    return Lens(source, lambda obj: obj[key], lambda obj, value: replace_item(obj, key, value))

