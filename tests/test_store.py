"""Tests for Store."""

import pytest

from reactform import Store, autorun, subscribe


class TestStore:
    def test_creation_from_schema(self):
        s = Store({"x": 10, "y": "hello"})
        assert s.get("x") == 10
        assert s.get("y") == "hello"

    def test_initial_overrides(self):
        s = Store({"x": 10, "y": "hello"}, initial={"x": 99})
        assert s.get("x") == 99
        assert s.get("y") == "hello"

    def test_get_nonexistent(self):
        s = Store({"x": 1})
        assert s.get("nope") is None

    def test_set(self):
        s = Store({"x": 0})
        s.set("x", 42)
        assert s.get("x") == 42

    def test_set_nonexistent_raises(self):
        s = Store({"x": 0})
        with pytest.raises(KeyError):
            s.set("nope", 99)

    def test_update_batches(self):
        s = Store({"x": 0, "y": 0})
        log = []
        autorun(lambda: log.append((s.get("x"), s.get("y"))))
        assert log == [(0, 0)]
        s.update({"x": 1, "y": 2})
        assert log == [(0, 0), (1, 2)]  # single batch

    def test_cell_access(self):
        s = Store({"count": 0})
        seen = []
        subscribe(s.cell("count"), seen.append)
        s.set("count", 1)
        assert seen == [1]

    def test_dispose_tracked(self):
        s = Store({"x": 0})
        log = []
        s.track(subscribe(s.cell("x"), log.append))
        s.set("x", 1)
        assert log == [1]

        s.dispose()
        s.set("x", 2)
        assert log == [1]
