import asyncio
import gc
import json

import pytest

from tests.fixtures.fake_api import page_dict, todo_dict
from todosync.client import (
    MutationTransaction,
    NetworkError,
    NotFound,
    QueryCache,
    QueryKey,
    QueryObserver,
    ServerError,
)
from todosync.client.cache import retry_policy


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def counting_fetcher(result):
    calls = []

    async def fetch():
        calls.append(1)
        return result

    return fetch, calls


def remove_todo(todo_id):
    def update(page):
        page["data"] = [todo for todo in page["data"] if todo["id"] != todo_id]
        return page

    return update


def rename_todo(todo_id, title):
    def update(page):
        page["data"] = [
            dict(todo, title=title) if todo["id"] == todo_id else todo for todo in page["data"]
        ]
        return page

    return update


def test_query_key_is_canonical():
    a = QueryKey.of("todos", {"page": 1, "limit": 10, "search": ""})
    b = QueryKey.of("todos", {"limit": 10, "page": 1, "status": None})

    assert a == b
    assert hash(a) == hash(b)
    assert a != QueryKey.of("todos", {"page": 2, "limit": 10})


@pytest.mark.asyncio
async def test_fresh_data_served_from_memory():
    clock = FakeClock()
    cache = QueryCache(retry_delay=0, clock=clock)
    key = QueryKey.of("todos", {"page": 1})
    fetch, calls = counting_fetcher({"data": []})

    await cache.fetch_query(key, fetch, stale_time=300)
    clock.now += 299
    await cache.fetch_query(key, fetch, stale_time=300)
    assert len(calls) == 1

    clock.now += 2
    await cache.fetch_query(key, fetch, stale_time=300)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_invalidated_entry_refetches():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("categories")
    fetch, calls = counting_fetcher(["General"])

    await cache.fetch_query(key, fetch, stale_time=3600)
    cache.invalidate("categories")
    await cache.fetch_query(key, fetch, stale_time=3600)

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_disabled_query_is_skipped():
    cache = QueryCache(retry_delay=0)
    fetch, calls = counting_fetcher({"data": {}})

    assert await cache.fetch_query(QueryKey.of("todo", {"id": ""}), fetch, enabled=False) is None
    assert calls == []


@pytest.mark.asyncio
async def test_concurrent_reads_share_one_fetch():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("todos", {"page": 1})
    release = asyncio.Event()
    calls = []

    async def fetch():
        calls.append(1)
        await release.wait()
        return {"data": [1]}

    readers = [asyncio.create_task(cache.fetch_query(key, fetch)) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(*readers) == [{"data": [1]}] * 3
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_retry_policy_retries_server_errors():
    cache = QueryCache(retry_delay=0)
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ServerError("boom", status=500)
        return "ok"

    result = await cache.fetch_query(
        QueryKey.of("todos"), flaky, retry=retry_policy(3, never=(400, 404))
    )

    assert result == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_retry_policy_gives_up():
    cache = QueryCache(retry_delay=0)
    attempts = []

    async def broken():
        attempts.append(1)
        raise ServerError("boom", status=500)

    with pytest.raises(ServerError):
        await cache.fetch_query(QueryKey.of("categories"), broken, retry=retry_policy(2))

    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_not_found_is_not_retried():
    cache = QueryCache(retry_delay=0)
    attempts = []

    async def missing():
        attempts.append(1)
        raise NotFound("Resource not found.", status=404)

    with pytest.raises(NotFound):
        await cache.fetch_query(QueryKey.of("todo", {"id": "x"}), missing, retry=retry_policy(2, never=(404,)))

    assert len(attempts) == 1


def test_rollback_restores_identical_snapshot():
    cache = QueryCache()
    key = QueryKey.of("todos", {"page": 1})
    cache.set_query_data(key, page_dict([todo_dict("1"), todo_dict("2", title="Call mom")]))
    before = json.dumps(cache.get_query_data(key), sort_keys=True)

    token = cache.apply_overlay(key, remove_todo("1"))
    assert [t["id"] for t in cache.get_query_data(key)["data"]] == ["2"]

    cache.rollback(token)

    assert json.dumps(cache.get_query_data(key), sort_keys=True) == before
    assert cache.pending_overlays(key) == 0


def test_update_then_delete_update_fails_first():
    cache = QueryCache()
    key = QueryKey.of("todos", {"page": 1})
    cache.set_query_data(key, page_dict([todo_dict("1")]))

    update = cache.apply_overlay(key, rename_todo("1", "Renamed"))
    delete = cache.apply_overlay(key, remove_todo("1"))

    cache.rollback(update)
    assert cache.get_query_data(key)["data"] == []

    cache.commit(delete)
    assert cache.get_query_data(key)["data"] == []


def test_update_then_delete_delete_settles_first():
    cache = QueryCache()
    key = QueryKey.of("todos", {"page": 1})
    cache.set_query_data(key, page_dict([todo_dict("1")]))

    update = cache.apply_overlay(key, rename_todo("1", "Renamed"))
    delete = cache.apply_overlay(key, remove_todo("1"))

    cache.commit(delete)
    cache.rollback(update)

    assert cache.get_query_data(key)["data"] == []
    assert cache.pending_overlays(key) == 0


def test_rollback_of_both_overlays_restores_original():
    cache = QueryCache()
    key = QueryKey.of("todos", {"page": 1})
    original = page_dict([todo_dict("1")])
    cache.set_query_data(key, original)

    update = cache.apply_overlay(key, rename_todo("1", "Renamed"))
    delete = cache.apply_overlay(key, remove_todo("1"))

    cache.rollback(update)
    cache.rollback(delete)

    assert cache.get_query_data(key) == original


def test_transaction_only_touches_its_own_overlays():
    cache = QueryCache()
    first_page = QueryKey.of("todos", {"page": 1})
    filtered = QueryKey.of("todos", {"page": 1, "status": "pending"})
    cache.set_query_data(first_page, page_dict([todo_dict("1"), todo_dict("2")]))
    cache.set_query_data(filtered, page_dict([todo_dict("1")]))

    other = cache.apply_overlay(first_page, remove_todo("2"))
    transaction = MutationTransaction(cache)
    transaction.apply(first_page, rename_todo("1", "Renamed"))
    transaction.apply(filtered, rename_todo("1", "Renamed"))
    transaction.apply(QueryKey.of("todos", {"page": 9}), rename_todo("1", "Renamed"))

    transaction.rollback()

    assert cache.get_query_data(first_page)["data"] == [todo_dict("1")]
    assert cache.get_query_data(filtered)["data"] == [todo_dict("1")]
    assert cache.get_query_data(QueryKey.of("todos", {"page": 9})) is None
    assert cache.pending_overlays(first_page) == 1
    cache.commit(other)


@pytest.mark.asyncio
async def test_fetch_completing_during_overlay_is_discarded():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("todos", {"page": 1})
    cache.set_query_data(key, page_dict([todo_dict("1")]))
    cache.invalidate("todos")
    release = asyncio.Event()

    async def fetch():
        await release.wait()
        return page_dict([todo_dict("1"), todo_dict("server-only")])

    reader = asyncio.create_task(cache.fetch_query(key, fetch))
    await asyncio.sleep(0)
    token = cache.apply_overlay(key, remove_todo("1"))
    release.set()

    assert (await reader)["data"] == []
    assert cache.get_query_data(key)["data"] == []
    cache.commit(token)


@pytest.mark.asyncio
async def test_observer_keeps_latest_params():
    gates = {"a": asyncio.Event(), "b": asyncio.Event()}

    async def query(params):
        await gates[params].wait()
        return f"result-{params}"

    observer = QueryObserver(query)
    first = asyncio.create_task(observer.set_params("a"))
    await asyncio.sleep(0)
    second = asyncio.create_task(observer.set_params("b"))
    await asyncio.sleep(0)

    assert observer.data is None
    gates["a"].set()
    gates["b"].set()

    assert await second == "result-b"
    assert await first != "result-a"
    assert observer.data == "result-b"
    assert observer.params == "b"


@pytest.mark.asyncio
async def test_observer_shows_previous_data_while_loading():
    release = asyncio.Event()

    async def query(params):
        if params == 2:
            await release.wait()
        return f"page-{params}"

    observer = QueryObserver(query)
    await observer.set_params(1)

    pending = asyncio.create_task(observer.set_params(2))
    await asyncio.sleep(0)
    assert observer.is_fetching
    assert observer.data == "page-1"

    release.set()
    assert await pending == "page-2"


@pytest.mark.asyncio
async def test_evicting_a_key_does_not_cancel_its_readers():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("todo", {"id": "1"})
    release = asyncio.Event()

    async def fetch():
        await release.wait()
        return {"data": todo_dict("1")}

    reader = asyncio.create_task(cache.fetch_query(key, fetch))
    await asyncio.sleep(0)
    cache.remove(key)
    release.set()

    assert (await reader)["data"]["id"] == "1"
    assert cache.get_query_data(key) is None
    assert cache.keys("todo") == []


@pytest.mark.asyncio
async def test_clear_lets_in_flight_reads_finish_without_caching():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("todos", {"page": 1})
    release = asyncio.Event()

    async def fetch():
        await release.wait()
        return page_dict([todo_dict("1")])

    readers = [asyncio.create_task(cache.fetch_query(key, fetch)) for _ in range(2)]
    await asyncio.sleep(0)
    cache.clear()
    release.set()

    results = await asyncio.gather(*readers)
    assert [r["data"][0]["id"] for r in results] == ["1", "1"]
    assert cache.get_query_data(key) is None


@pytest.mark.asyncio
async def test_close_stops_fetches_with_network_error():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("todos", {"page": 1})
    never = asyncio.Event()

    async def fetch():
        await never.wait()

    reader = asyncio.create_task(cache.fetch_query(key, fetch))
    await asyncio.sleep(0)
    cache.close()

    with pytest.raises(NetworkError):
        await reader
    assert not reader.cancelled()


@pytest.mark.asyncio
async def test_reader_cancelled_by_its_caller_still_raises_cancelled():
    cache = QueryCache(retry_delay=0)
    key = QueryKey.of("todos", {"page": 1})
    release = asyncio.Event()

    async def fetch():
        await release.wait()
        return page_dict([])

    reader = asyncio.create_task(cache.fetch_query(key, fetch))
    await asyncio.sleep(0)
    reader.cancel()

    with pytest.raises(asyncio.CancelledError):
        await reader
    release.set()
    assert (await cache.fetch_query(key, fetch))["data"] == []


@pytest.mark.asyncio
async def test_failure_nobody_awaits_is_not_reported_as_unretrieved():
    loop = asyncio.get_running_loop()
    reported = []
    loop.set_exception_handler(lambda loop, context: reported.append(context))
    try:
        cache = QueryCache(retry_delay=0)
        key = QueryKey.of("todos", {"page": 1})
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            raise ServerError("boom", status=500)

        reader = asyncio.create_task(cache.fetch_query(key, fetch))
        await asyncio.sleep(0)
        reader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await reader
        cache.remove(key)
        release.set()
        for _ in range(3):
            await asyncio.sleep(0)

        del reader
        gc.collect()
    finally:
        loop.set_exception_handler(None)

    assert [c for c in reported if "never retrieved" in c.get("message", "")] == []
