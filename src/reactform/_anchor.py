"""Data anchor — plain Python structures that hold all reactive state.

Cells, Views, and Subscriptions are thin handles holding an _id; their
values, versions, and graph edges live here so that behavior and data stay
separate.
"""

import itertools

# Cell state
values: dict[int, object] = {}
versions: dict[int, int] = {}
observers: dict[int, set] = {}  # source id -> set of derivations

# Derivation state (View + Subscription + Reaction)
dependencies: dict[int, set] = {}  # deriv id -> set of sources
dirty_flags: dict[int, bool] = {}
cached_values: dict[int, object] = {}
derivation_fns: dict[int, object] = {}  # deriv id -> callable
disposed: dict[int, bool] = {}

# itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def release(id_: int) -> None:
    """Drop every entry stored under id_. Safe to call more than once."""
    for table in (values, versions, observers, dependencies, dirty_flags,
                  cached_values, derivation_fns, disposed):
        table.pop(id_, None)
