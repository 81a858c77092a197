from datetime import datetime, timezone

import pytest
from conftest import make_alert

from compliance_monitor.services.database import SqliteStateStore
from compliance_monitor.services.state_store import (
    InMemoryStateStore,
    JsonFileStateStore,
    StateStoreError,
)


@pytest.fixture(params=["memory", "json", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStateStore()
    if request.param == "json":
        return JsonFileStateStore(str(tmp_path / "data"))
    return SqliteStateStore(str(tmp_path / "data" / "state.db"))


@pytest.mark.asyncio
async def test_empty_store_loads_empty_state(store):
    assert await store.load_processed_ids() == []
    assert await store.list_alerts() == []


@pytest.mark.asyncio
async def test_processed_ids_round_trip_in_order(store):
    await store.save_processed_ids(["CA-1-aaa", "CA-2-bbb"])
    await store.save_processed_ids(["CA-1-aaa", "CA-2-bbb", "CA-3-ccc"])

    assert await store.load_processed_ids() == ["CA-1-aaa", "CA-2-bbb", "CA-3-ccc"]


@pytest.mark.asyncio
async def test_alert_log_is_append_only(store):
    processed_at = datetime(2025, 3, 8, 9, 0, tzinfo=timezone.utc)
    first = make_alert(alert_id="CA-1-aaa").model_copy(update={"processed_at": processed_at})
    second = make_alert(alert_id="CA-2-bbb", title="Chip export ban")

    await store.append_alert(first)
    await store.append_alert(second)

    alerts = await store.list_alerts()
    assert [a.alert_id for a in alerts] == ["CA-1-aaa", "CA-2-bbb"]
    assert alerts[0].processed_at == processed_at
    assert alerts[0].from_countries == ["China", "Taiwan"]


@pytest.mark.asyncio
async def test_json_store_writes_camel_case_documents(tmp_path):
    store = JsonFileStateStore(str(tmp_path))
    await store.append_alert(make_alert())

    content = (tmp_path / "alerts-log.json").read_text(encoding="utf-8")
    assert '"alertId": "CA-1741422830186-abc123"' in content
    assert '"fromCountries"' in content


@pytest.mark.asyncio
async def test_json_store_corrupt_files_read_as_empty(tmp_path):
    (tmp_path / "processed-alerts.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "alerts-log.json").write_text('{"unexpected": "object"}', encoding="utf-8")
    store = JsonFileStateStore(str(tmp_path))

    assert await store.load_processed_ids() == []
    assert await store.list_alerts() == []


@pytest.mark.asyncio
async def test_json_store_skips_unreadable_alert_records(tmp_path):
    (tmp_path / "alerts-log.json").write_text(
        '[{"alertId": "bad"}, ' + make_alert().model_dump_json(by_alias=True) + ']',
        encoding="utf-8",
    )
    store = JsonFileStateStore(str(tmp_path))

    alerts = await store.list_alerts()
    assert [a.alert_id for a in alerts] == ["CA-1741422830186-abc123"]


@pytest.mark.asyncio
async def test_json_store_write_failure_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStateStore(str(blocker))

    with pytest.raises(StateStoreError):
        await store.save_processed_ids(["CA-1-aaa"])


@pytest.mark.asyncio
async def test_sqlite_store_corrupt_database_reads_as_empty(tmp_path):
    path = tmp_path / "state.db"
    path.write_bytes(b"this is definitely not a sqlite database" * 64)
    store = SqliteStateStore(str(path))

    assert await store.load_processed_ids() == []
    assert await store.list_alerts() == []


@pytest.mark.asyncio
async def test_sqlite_store_ignores_repeated_ids(tmp_path):
    store = SqliteStateStore(str(tmp_path / "state.db"))
    await store.save_processed_ids(["CA-1-aaa"])
    await store.save_processed_ids(["CA-1-aaa", "CA-1-aaa", "CA-2-bbb"])

    assert await store.load_processed_ids() == ["CA-1-aaa", "CA-2-bbb"]
