import asyncio
import logging
from types import SimpleNamespace

import pytest

from pricing_engine.services import scheduler_service


class StopLoop(Exception):
    pass


def test_reconciler_survives_a_failing_run(monkeypatch, caplog):
    runs = []
    sleeps = []

    def flaky_run():
        runs.append(len(runs))
        if len(runs) == 1:
            raise RuntimeError("reconcile blew up")
        return {"applied": 0, "removed": 0}

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 2:
            raise StopLoop()

    monkeypatch.setattr(scheduler_service, "run_sale_reconcile", flaky_run)
    monkeypatch.setattr(scheduler_service, "asyncio", SimpleNamespace(sleep=fake_sleep))

    with caplog.at_level(logging.ERROR, logger=scheduler_service.__name__):
        with pytest.raises(StopLoop):
            asyncio.run(scheduler_service.sale_reconcile_scheduler_loop(7))

    # the second run happened after the first one raised
    assert len(runs) == 2
    assert sleeps == [7, 7]
    assert "Sale reconcile run failed" in caplog.text


def test_run_closes_its_session(monkeypatch):
    session = SimpleNamespace(closed=False)
    session.close = lambda: setattr(session, "closed", True)

    def failing_reconcile(db):
        assert db is session
        raise RuntimeError("boom")

    monkeypatch.setattr(scheduler_service, "get_db_session", lambda: session)
    monkeypatch.setattr(scheduler_service, "reconcile_sales", failing_reconcile)

    with pytest.raises(RuntimeError):
        scheduler_service.run_sale_reconcile()
    assert session.closed is True


def test_startup_keeps_reconciler_handle(client):
    # disabled by default, so no task is started
    assert client.app.state.sale_reconciler is None
