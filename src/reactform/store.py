"""Store — key-based Cell container with subscription lifecycle.

A Store wraps a schema of named Cells. Subscriptions and reactions that
belong to the store are registered with track() and torn down together by
dispose().
"""

from __future__ import annotations

from typing import Any

from reactform.action import action
from reactform.cell import Cell


class Store:
    """Key-based Cell container with subscription lifecycle."""

    def __init__(self, schema: dict[str, object], initial: dict | None = None) -> None:
        self._cells: dict[str, Cell] = {}
        self._disposers: list = []
        for key, default in schema.items():
            value = initial.get(key, default) if initial else default
            self._cells[key] = Cell(value)

    def cell(self, key: str) -> Cell:
        """The Cell behind key. Raises KeyError for keys outside the schema."""
        return self._cells[key]

    def get(self, key: str) -> Any:
        cell = self._cells.get(key)
        return cell.try_read() if cell is not None else None

    def set(self, key: str, value: object) -> None:
        self.cell(key).write(value)

    @action
    def update(self, values: dict) -> None:
        for key, value in values.items():
            self.set(key, value)

    def track(self, disposable):
        """Dispose disposable together with the store. Returns it."""
        self._disposers.append(disposable)
        return disposable

    def dispose(self) -> None:
        for d in self._disposers:
            d.dispose()
        self._disposers.clear()
