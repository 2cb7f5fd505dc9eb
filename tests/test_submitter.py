"""Tests for Submitter."""

import pytest

from reactform import UNSET, Cell, ReactFormError, Submitter, transaction


class TestSubmitter:
    def test_starts_unset(self):
        s = Submitter(Cell())
        assert s.is_ready() is False
        assert s.try_read("loading") == "loading"

    def test_buffers_without_publishing(self):
        source = Cell(1)
        s = Submitter(source)
        published = []
        s.subscribe(published.append)
        source.write(2)
        source.write(3)
        assert s.buffered == 3
        assert s.try_read() is None
        assert published == []

    def test_trigger_publishes_once(self):
        source = Cell(1)
        s = Submitter(source)
        published = []
        s.subscribe(published.append)
        source.write(2)
        source.write(3)
        s.trigger()
        assert s.read() == 3
        assert published == [3]
        assert s.version == 1

    def test_published_only_moves_on_trigger(self):
        source = Cell("a")
        s = Submitter(source)
        s.trigger()
        for value in "bcdef":
            source.write(value)
            assert s.read() == "a"
        s.trigger()
        assert s.read() == "f"

    def test_trigger_inside_transaction_sees_latest(self):
        source = Cell()
        status = Cell("Loading...")
        s = Submitter(source)
        published = []
        s.subscribe(published.append)
        with transaction():
            source.write({"code": 42})
            status.write(None)
            s.trigger()
            assert published == []
        assert published == [{"code": 42}]

    def test_view_is_read_only_projection(self):
        source = Cell(5)
        s = Submitter(source)
        doubled = s.view().map(lambda v: v * 2)
        s.trigger()
        assert doubled.read() == 10

    def test_trigger_unset_source(self):
        s = Submitter(Cell())
        published = []
        s.subscribe(published.append)
        s.trigger()
        assert published == [UNSET]
        assert s.is_ready() is False

    def test_over_view(self):
        source = Cell(2)
        s = Submitter(source.map(lambda v: v + 1))
        source.write(4)
        assert s.buffered == 5
        s.trigger()
        assert s.read() == 5

    def test_dispose_stops_buffering(self):
        source = Cell(1)
        s = Submitter(source)
        s.dispose()
        source.write(2)
        assert s.buffered == 1

    def test_dispose_releases_view(self):
        source = Cell(1)
        s = Submitter(source)
        s.trigger()
        seen = []
        s.subscribe(seen.append)
        s.dispose()
        s.dispose()
        source.write(2)
        assert seen == []
        assert s.version == 1
        with pytest.raises(ReactFormError):
            s.read()
