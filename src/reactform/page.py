"""Page models — cells, a submitter and requests wired into a page lifecycle.

A Page loads its model once per mount. Until the first successful load the
submitter has never triggered, so `form` stays unset and the rendering
boundary shows its loading affordance. A failed load only writes the status
message.

A FormPage adds field lenses and save(). Lens edits land in `model` right
away (optimistic local edits); `confirmed` keeps the last model the server
accepted, and `dirty` tells the two apart. A successful save replaces both
with the server's canonical model in one render transition. A failed save
only writes the status message.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from reactform.action import transaction
from reactform.cell import Cell
from reactform.errors import ReactFormError
from reactform.lens import Lens, field
from reactform.request import Outcome, orchestrate
from reactform.submitter import Submitter
from reactform.view import View, combine

logger = logging.getLogger("reactform.page")

M = TypeVar("M")


class Page(Generic[M]):
    """A page whose model comes from one async load per mount.

    Pages are single-use: unmount() releases the views and the submitter, and
    the cells stay readable until the page itself is dropped.
    """

    def __init__(self, load: Callable[..., Awaitable[M]]) -> None:
        self._load = load
        self.mounted = False
        self.unmounted = False
        self._disposers: list = []

        self.model: Cell[M] = Cell()
        self.confirmed: Cell[M] = Cell()
        self.status: Cell[str | None] = Cell(None)
        self.submitter: Submitter[M] = self.track(Submitter(self.model))

        self.loading: View[bool] = self.track(View(lambda: not self.submitter.is_ready()))
        self.message: View[str | None] = self.track(View(self.status.read))

    @property
    def form(self) -> View[M]:
        """What the rendering boundary shows: unset until the first load lands."""
        return self.submitter.view()

    def track(self, disposable):
        """Dispose disposable when the page unmounts. Returns it."""
        self._disposers.append(disposable)
        return disposable

    def _is_active(self) -> bool:
        return self.mounted

    async def mount(self, *args: Any) -> Outcome:
        """Mark the page mounted and load its model."""
        if self.unmounted:
            raise ReactFormError(f"{type(self).__name__} was unmounted; create a new page")
        self.mounted = True
        logger.debug("Mounting %s%r", type(self).__name__, args)
        return await orchestrate(
            lambda: self._load(*args),
            on_ok=self._loaded,
            on_err=self.status.write,
            is_active=self._is_active,
            name=getattr(self._load, "__name__", "load"),
        )

    def _loaded(self, model: M) -> None:
        with transaction():
            self.model.write(model)
            self.confirmed.write(model)
            self.status.write(None)
            self.submitter.trigger()

    def unmount(self) -> None:
        """Drop outcomes that arrive from now on and release the reactive state."""
        self.mounted = False
        self.unmounted = True
        for d in reversed(self._disposers):
            d.dispose()
        self._disposers.clear()
        logger.debug("Unmounted %s", type(self).__name__)


class FormPage(Page[M]):
    """A page with an editable model and a save request."""

    def __init__(
        self,
        load: Callable[..., Awaitable[M]],
        save: Callable[[M], Awaitable[M]],
        *,
        saved_message: str = "Saved!",
    ) -> None:
        super().__init__(load)
        self._save = save
        self.saved_message = saved_message
        self.saving: Cell[bool] = Cell(False)

        self.busy: View[bool] = self.track(self.saving.map(bool))
        self.dirty: View[bool] = self.track(
            combine(self.model, self.confirmed, lambda shown, saved: shown != saved)
        )

    def field(self, name: str) -> Lens[M, Any]:
        """Two-way binding for one field of the model."""
        return field(self.model, name)

    async def save(self) -> Outcome | None:
        """Send the current model to the server.

        While a save is in flight, further calls are ignored and return None.
        Raises NotReadyError if the model never loaded.
        """
        if self.saving.read():
            logger.warning("Ignoring save on %s: a save is already pending", type(self).__name__)
            return None

        snapshot = self.model.read()
        self.saving.write(True)
        try:
            return await orchestrate(
                lambda: self._save(snapshot),
                on_ok=self._saved,
                on_err=self.status.write,
                is_active=self._is_active,
                name=getattr(self._save, "__name__", "save"),
            )
        finally:
            self.saving.write(False)

    def _saved(self, model: M) -> None:
        with transaction():
            self.model.write(model)
            self.confirmed.write(model)
            self.status.write(self.saved_message)
            self.submitter.trigger()


def _matches(row: Any, text: str) -> bool:
    if isinstance(row, dict):
        fields = row.values()
    elif hasattr(row, "model_dump"):
        fields = row.model_dump().values()
    else:
        fields = (row,)
    needle = text.casefold()
    return any(needle in str(value).casefold() for value in fields)


class ListPage(Page[tuple]):
    """A listing page with a client-side text filter."""

    def __init__(self, load: Callable[..., Awaitable[Any]]) -> None:
        super().__init__(load)
        self.filter: Cell[str] = Cell("")
        self.visible: View[tuple] = self.track(combine(
            self.form,
            self.filter,
            lambda rows, text: tuple(r for r in rows if _matches(r, text)) if text else tuple(rows),
        ))
        self.count: View[int] = self.track(View(lambda: len(self.visible.try_read(()))))

    @property
    def rows(self) -> View[tuple]:
        return self.form

