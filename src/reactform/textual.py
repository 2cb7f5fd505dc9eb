"""Textual rendering boundary for reactform. Opt-in — requires textual.

render() and autorun() push reactive state into Textual widgets. Both are
guarded: they do nothing while the app is not running or is paused for a
widget swap, marshal calls made off the UI thread through call_from_thread,
and ignore NoMatches from queries against widgets that are not mounted yet.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from reactform.reaction import autorun as _autorun, subscribe

# Keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded renders during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn):
    main = threading.get_ident()

    def _safe(*args):
        try:
            fn(*args)
        except NoMatches:
            pass

    def _guarded(*args):
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_safe, *args)
        else:
            _safe(*args)

    return _guarded


def render(app, source, fn, *, fire_immediately=True):
    """Call fn(value) with source's value now and after every change.

    source is anything with subscribe support: a Cell, View, Lens, or a
    Submitter's published view. fn receives UNSET while nothing is loaded,
    which is the cue to show a loading indicator.

    Usage:
        render(app, page.form, lambda user: app.query_one(UserForm).show(user))
        render(app, page.message, lambda text: app.query_one(Alert).update(text or ""))
    """
    return subscribe(source, _guard(app, fn), fire_immediately=fire_immediately)


def autorun(app, fn):
    """autorun() guarded the same way as render()."""
    return _autorun(_guard(app, fn))
