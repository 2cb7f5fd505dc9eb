"""Tests for Request and orchestrate."""

import asyncio
import logging

import pytest

from reactform import Err, NotFoundError, Ok, Request, RequestState, ValidationError, orchestrate


async def _value(v):
    return v


async def _fail(exc):
    raise exc


class TestRequest:
    def test_ok(self):
        r = Request(lambda: _value(5))
        assert r.state is RequestState.IDLE
        outcome = asyncio.run(r.run())
        assert outcome == Ok(5)
        assert outcome.ok
        assert r.state is RequestState.COMPLETED
        assert r.outcome == Ok(5)

    def test_request_error_becomes_err(self):
        r = Request(lambda: _fail(ValidationError("Firstname is empty.")))
        outcome = asyncio.run(r.run())
        assert outcome == Err("Firstname is empty.")
        assert not outcome.ok

    def test_returned_outcome_taken_as_is(self):
        outcome = asyncio.run(Request(lambda: _value(Err("nope"))).run())
        assert outcome == Err("nope")

    def test_pending_while_awaiting(self):
        async def scenario():
            gate = asyncio.Event()

            async def call():
                await gate.wait()
                return 1

            r = Request(call)
            task = asyncio.create_task(r.run())
            await asyncio.sleep(0)
            assert r.pending
            gate.set()
            await task
            return r

        r = asyncio.run(scenario())
        assert r.state is RequestState.COMPLETED

    def test_one_shot(self):
        r = Request(lambda: _value(1))
        asyncio.run(r.run())
        with pytest.raises(RuntimeError, match="already completed"):
            asyncio.run(r.run())

    def test_unexpected_error_propagates(self):
        r = Request(lambda: _fail(KeyError("bug")))
        with pytest.raises(KeyError):
            asyncio.run(r.run())
        assert r.state is RequestState.ABORTED
        assert r.outcome is None

    def test_logs_failure(self, caplog):
        with caplog.at_level(logging.INFO, logger="reactform.request"):
            asyncio.run(Request(lambda: _fail(NotFoundError("User not found!")), name="load").run())
        assert "Request load failed: User not found!" in caplog.text


class TestOrchestrate:
    def test_routes_ok(self):
        oks, errs = [], []
        outcome = asyncio.run(orchestrate(lambda: _value("x"), on_ok=oks.append, on_err=errs.append))
        assert outcome == Ok("x")
        assert oks == ["x"]
        assert errs == []

    def test_routes_err(self):
        oks, errs = [], []
        asyncio.run(
            orchestrate(lambda: _fail(NotFoundError("User not found!")), on_ok=oks.append, on_err=errs.append)
        )
        assert oks == []
        assert errs == ["User not found!"]

    def test_inactive_owner_discards(self, caplog):
        oks, errs = [], []
        with caplog.at_level(logging.DEBUG, logger="reactform.request"):
            outcome = asyncio.run(
                orchestrate(
                    lambda: _value(1),
                    on_ok=oks.append,
                    on_err=errs.append,
                    is_active=lambda: False,
                )
            )
        assert outcome == Ok(1)
        assert oks == [] and errs == []
        assert "Discarding outcome" in caplog.text

    def test_handler_called_once_per_invocation(self):
        calls = []

        async def scenario():
            await asyncio.gather(
                orchestrate(lambda: _value(1), on_ok=calls.append, on_err=calls.append),
                orchestrate(lambda: _value(2), on_ok=calls.append, on_err=calls.append),
            )

        asyncio.run(scenario())
        assert sorted(calls) == [1, 2]
