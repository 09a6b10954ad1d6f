from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from conftest import USER_ID, FakeDB, FakeResult
from liaise.services.retention import (
    delete_old_summaries,
    delete_old_transcriptions,
    retention_cutoff,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _prefs(enabled=True, hours=72):
    return SimpleNamespace(auto_delete_enabled=enabled, retention_hours=hours)


def test_cutoff_is_now_minus_retention_hours():
    assert retention_cutoff(_prefs(hours=24), now=NOW) == NOW - timedelta(hours=24)


@pytest.mark.parametrize(
    "prefs",
    [None, _prefs(enabled=False), _prefs(hours=None), _prefs(hours=0)],
)
def test_no_cutoff_when_retention_is_off(prefs):
    assert retention_cutoff(prefs, now=NOW) is None


@pytest.mark.anyio
async def test_sweep_deletes_callers_old_rows_only():
    db = FakeDB(results=[FakeResult(rowcount=3)])

    deleted = await delete_old_summaries(db, USER_ID, _prefs(hours=72))

    assert deleted == 3
    statement = db.executed[0]
    compiled = str(statement.compile(compile_kwargs={"literal_binds": False}))
    assert compiled.startswith("DELETE FROM summaries")
    assert "summaries.user_id" in compiled
    assert "summaries.created_at <" in compiled


@pytest.mark.anyio
async def test_sweep_is_skipped_without_a_window():
    db = FakeDB()

    assert await delete_old_transcriptions(db, USER_ID, _prefs(enabled=False)) == 0
    assert db.executed == []
