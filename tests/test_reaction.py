"""Tests for Reaction, autorun, and subscribe."""

import logging

import pytest

from reactform import Cell, autorun, get_pending_count, subscribe, transaction, untracked
from reactform import _anchor


class TestAutorun:
    def test_runs_immediately(self):
        c = Cell(10)
        log = []
        autorun(lambda: log.append(c.read()))
        assert log == [10]

    def test_reruns_on_change(self):
        c = Cell(10)
        log = []
        autorun(lambda: log.append(c.read()))
        c.write(20)
        assert log == [10, 20]

    def test_dispose_stops(self):
        c = Cell(10)
        log = []
        r = autorun(lambda: log.append(c.read()))
        r.dispose()
        c.write(20)
        assert log == [10]

    def test_repr(self):
        def render():
            pass

        r = autorun(render)
        assert repr(r) == "Reaction(render, active)"
        r.dispose()
        assert repr(r) == "Reaction(render, disposed)"

    def test_dispose_releases_state(self):
        c = Cell(1)
        r = autorun(lambda: c.read())
        r.dispose()
        r.dispose()
        assert r.disposed
        assert r._id not in _anchor.derivation_fns
        assert r not in _anchor.observers[c._id]

    def test_dispose_inside_run(self):
        a = Cell(1)
        b = Cell(2)
        log = []
        holder = []

        def body():
            if a.read() > 1 and holder:
                holder[0].dispose()
            log.append(b.read())

        holder.append(autorun(body))
        a.write(5)
        b.write(3)
        assert log == [2, 2]
        assert not _anchor.observers[b._id]


class TestSubscribe:
    def test_no_initial_call(self):
        c = Cell("a")
        seen = []
        subscribe(c, seen.append)
        assert seen == []

    def test_fires_on_change(self):
        c = Cell("a")
        seen = []
        subscribe(c, seen.append)
        c.write("b")
        assert seen == ["b"]

    def test_deferred_inside_transaction(self):
        c = Cell(0)
        seen = []
        subscribe(c, seen.append)
        with transaction():
            c.write(1)
            assert seen == []
            assert get_pending_count() == 1
        assert seen == [1]
        assert get_pending_count() == 0

    def test_disposed_while_pending(self):
        c = Cell(0)
        seen = []
        sub = subscribe(c, seen.append)
        with transaction():
            c.write(1)
            sub.dispose()
        assert seen == []

    def test_write_from_callback_settles_before_return(self):
        source = Cell(0)
        echo = Cell(0)
        seen = []
        subscribe(source, lambda v: echo.write(v * 2))
        subscribe(echo, seen.append)
        source.write(4)
        assert echo.read() == 8
        assert seen == [8]

    def test_failing_callback_does_not_starve_others(self):
        a = Cell(0)
        b = Cell(0)
        seen = []

        def explode(value):
            raise RuntimeError("boom")

        subscribe(a, explode)
        subscribe(b, seen.append)

        with pytest.raises(RuntimeError, match="boom"):
            with transaction():
                a.write(1)
                b.write(1)

        assert seen == [1]
        assert get_pending_count() == 0
        b.write(2)
        assert seen == [1, 2]

    def test_later_failures_are_logged(self, caplog):
        a = Cell(0)
        b = Cell(0)

        def first(value):
            raise RuntimeError("first")

        def second(value):
            raise ValueError("second")

        subscribe(a, first)
        subscribe(b, second)

        with caplog.at_level(logging.ERROR, logger="reactform.tracking"):
            with pytest.raises(RuntimeError, match="first"):
                with transaction():
                    a.write(1)
                    b.write(1)

        assert "Subscription(second, active) failed during flush" in caplog.text
        assert "ValueError: second" in caplog.text


class TestUntracked:
    def test_reads_inside_are_not_dependencies(self):
        tracked = Cell(1)
        ignored = Cell(10)
        log = []

        def fn():
            with untracked():
                extra = ignored.read()
            log.append(tracked.read() + extra)

        autorun(fn)
        ignored.write(20)
        assert log == [11]
        tracked.write(2)
        assert log == [11, 22]
