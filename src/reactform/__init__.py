"""reactform: reactive cells, lenses and submitters for request-bound forms."""

from importlib.metadata import version as _version

__version__ = _version("reactform")

from reactform._tracking import get_pending_count, untracked
from reactform.errors import (
    NotFoundError,
    NotReadyError,
    ReactFormError,
    RequestError,
    ValidationError,
)
from reactform.cell import UNSET, Cell, set_scheduler
from reactform.view import View, combine, mapped, view
from reactform.reaction import Reaction, Subscription, autorun, subscribe
from reactform.action import action, transaction
from reactform.lens import Lens, field, item, lens
from reactform.submitter import Submitter
from reactform.request import Err, Ok, Outcome, Request, RequestState, orchestrate
from reactform.page import FormPage, ListPage, Page
from reactform.store import Store
from reactform.app import AppState, Endpoint
from reactform.service import User, UserService
# textual is opt-in: import reactform.textual explicitly

__all__ = [
    "UNSET",
    "Cell",
    "set_scheduler",
    "View",
    "view",
    "mapped",
    "combine",
    "Reaction",
    "Subscription",
    "autorun",
    "subscribe",
    "action",
    "transaction",
    "untracked",
    "get_pending_count",
    "Lens",
    "lens",
    "field",
    "item",
    "Submitter",
    "Ok",
    "Err",
    "Outcome",
    "Request",
    "RequestState",
    "orchestrate",
    "Page",
    "FormPage",
    "ListPage",
    "Store",
    "AppState",
    "Endpoint",
    "User",
    "UserService",
    "ReactFormError",
    "NotReadyError",
    "RequestError",
    "ValidationError",
    "NotFoundError",
]
