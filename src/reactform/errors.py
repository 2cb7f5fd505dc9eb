"""Exception taxonomy.

NotReadyError is a usage error: something read or wrote through a cell before
its data arrived. It is never caught by the library.

RequestError and its subclasses are expected, user-facing failures raised by
request functions. The orchestrator turns them into Err(message) outcomes.
"""

from __future__ import annotations


class ReactFormError(Exception):
    """Base class for every error raised by reactform."""


class NotReadyError(ReactFormError):
    """A cell (or a lens over one) was used while still unset."""


class RequestError(ReactFormError):
    """A request failed in an expected way. ``message`` is shown to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RequestError):
    """The request payload was rejected."""


class NotFoundError(RequestError):
    """The requested entity does not exist."""
