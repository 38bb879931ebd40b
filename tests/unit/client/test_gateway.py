import asyncio

import httpx
import pytest

from tests.fixtures.fake_api import CSRF_TOKEN, json_response, request_json
from todosync.client import (
    Forbidden,
    HttpTransport,
    NetworkError,
    NotFound,
    ReauthenticationRequired,
    ServerError,
    SessionState,
    Unauthenticated,
    ValidationError,
    translate_params,
)


def test_translate_params_maps_caller_names():
    params = {
        "page": 2,
        "limit": 10,
        "search": "report",
        "status": "pending",
        "category": "Work",
        "sort_by": "due_date",
        "sort_direction": "desc",
        "start_date": "2030-01-01",
        "end_date": "2030-01-31",
    }

    assert translate_params(params) == {
        "page": "2",
        "per_page": "10",
        "filter[title]": "report",
        "filter[status]": "pending",
        "filter[category]": "Work",
        "sort": "-due_date",
        "filter[due_date_between]": "2030-01-01,2030-01-31",
    }


def test_translate_params_omits_empty_values():
    params = {"page": 1, "search": "", "status": None, "category": "", "sort_by": None}

    assert translate_params(params) == {"page": "1"}


def test_translate_params_ascending_sort_and_half_open_range():
    params = {"title": "milk", "sort_by": "title", "sort_direction": "asc", "start_date": "2030-01-01"}

    assert translate_params(params) == {"filter[title]": "milk", "sort": "title"}


@pytest.mark.asyncio
async def test_request_attaches_bearer_and_csrf(fake_api, gateway, logged_in):
    fake_api.on("GET", "/todos", json_response(200, {"data": [], "meta": {}}))

    await gateway.request("GET", "/todos", params={"page": 1, "limit": 5})

    request = fake_api.calls("GET", "/todos")[0]
    assert request.headers["Authorization"] == "Bearer access-1"
    assert request.headers["X-XSRF-TOKEN"] == CSRF_TOKEN
    assert request.url.params["per_page"] == "5"


@pytest.mark.asyncio
async def test_expired_token_is_refreshed_and_request_retried(fake_api, gateway, logged_in):
    def list_todos(request):
        if request.headers.get("Authorization") == "Bearer access-2":
            return json_response(200, {"data": ["ok"]})
        return json_response(401, {"message": "Unauthenticated."})

    fake_api.on("GET", "/todos", list_todos)
    fake_api.on(
        "POST",
        "/auth/refresh",
        json_response(
            200, {"access_token": "access-2", "refresh_token": "refresh-2", "token_type": "Bearer"}
        ),
    )

    body = await gateway.request("GET", "/todos")

    assert body == {"data": ["ok"]}
    assert len(fake_api.calls("POST", "/auth/refresh")) == 1
    assert request_json(fake_api.calls("POST", "/auth/refresh")[0]) == {
        "refresh_token": "refresh-1"
    }
    assert logged_in.access_token == "access-2"
    assert logged_in.refresh_token == "refresh-2"


@pytest.mark.asyncio
async def test_concurrent_401s_share_one_refresh(fake_api, gateway, logged_in):
    release = asyncio.Event()

    def list_todos(request):
        if request.headers.get("Authorization") == "Bearer access-2":
            return json_response(200, {"data": []})
        return json_response(401, {"message": "Unauthenticated."})

    async def refresh(request):
        await release.wait()
        return json_response(
            200, {"access_token": "access-2", "refresh_token": "refresh-2", "token_type": "Bearer"}
        )

    fake_api.on("GET", "/todos", list_todos)
    fake_api.on("POST", "/auth/refresh", refresh)

    calls = [asyncio.create_task(gateway.request("GET", "/todos")) for _ in range(5)]
    while len(fake_api.calls("GET", "/todos")) < 5:
        await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*calls)

    assert results == [{"data": []}] * 5
    assert len(fake_api.calls("POST", "/auth/refresh")) == 1


@pytest.mark.asyncio
async def test_401_from_already_replaced_token_does_not_refresh_again(
    fake_api, gateway, logged_in
):
    def list_todos(request):
        if request.headers.get("Authorization") == "Bearer access-2":
            return json_response(200, {"data": []})
        return json_response(401, {"message": "Unauthenticated."})

    fake_api.on("GET", "/todos", list_todos)
    fake_api.on(
        "POST",
        "/auth/refresh",
        json_response(200, {"access_token": "access-2", "refresh_token": "refresh-2"}),
    )

    await gateway.request("GET", "/todos")
    tokens = await logged_in.refresh(failed_access_token="access-1")

    assert tokens.access_token == "access-2"
    assert len(fake_api.calls("POST", "/auth/refresh")) == 1


@pytest.mark.asyncio
async def test_failed_refresh_requires_reauthentication(fake_api, gateway, logged_in):
    expired = []
    logged_in.on_session_expired(lambda: expired.append(True))
    fake_api.on("GET", "/todos", json_response(401, {"message": "Unauthenticated."}))
    fake_api.on("POST", "/auth/refresh", json_response(401, {"message": "Invalid refresh token"}))

    with pytest.raises(ReauthenticationRequired):
        await gateway.request("GET", "/todos")

    assert logged_in.tokens is None
    assert logged_in.state == SessionState.UNAUTHENTICATED
    assert expired == [True]


@pytest.mark.asyncio
async def test_second_401_after_retry_propagates(fake_api, gateway, logged_in):
    fake_api.on("GET", "/todos", json_response(401, {"message": "Unauthenticated."}))
    fake_api.on(
        "POST",
        "/auth/refresh",
        json_response(200, {"access_token": "access-2", "refresh_token": "refresh-2"}),
    )

    with pytest.raises(Unauthenticated) as exc_info:
        await gateway.request("GET", "/todos")

    assert not isinstance(exc_info.value, ReauthenticationRequired)
    assert len(fake_api.calls("GET", "/todos")) == 2
    assert len(fake_api.calls("POST", "/auth/refresh")) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code,error_class",
    [(403, Forbidden), (404, NotFound), (500, ServerError), (503, ServerError)],
)
async def test_errors_are_normalized(fake_api, gateway, logged_in, status_code, error_class):
    fake_api.on("GET", "/todos/1", json_response(status_code, {"message": "nope"}))

    with pytest.raises(error_class) as exc_info:
        await gateway.request("GET", "/todos/1")

    assert exc_info.value.status == status_code
    assert exc_info.value.message == "nope"


@pytest.mark.asyncio
async def test_validation_errors_carry_field_map(fake_api, gateway, logged_in):
    fake_api.on(
        "POST",
        "/todos",
        json_response(
            422,
            {
                "message": "The given data was invalid.",
                "errors": {"title": ["The title field is required."]},
            },
        ),
    )

    with pytest.raises(ValidationError) as exc_info:
        await gateway.request("POST", "/todos", body={"title": ""})

    assert exc_info.value.errors == {"title": ["The title field is required."]}


@pytest.mark.asyncio
async def test_network_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = HttpTransport("http://test/api", transport=httpx.MockTransport(refuse))
    try:
        with pytest.raises(NetworkError) as exc_info:
            await transport.send("GET", "/todos")
        assert exc_info.value.status is None
    finally:
        await transport.aclose()


@pytest.mark.asyncio
async def test_csrf_fetched_before_every_call_by_default(fake_api, gateway, logged_in):
    fake_api.on("GET", "/categories", json_response(200, {"data": []}))

    await gateway.request("GET", "/categories")
    await gateway.request("GET", "/categories")

    assert fake_api.csrf_requests == 2


@pytest.mark.asyncio
async def test_csrf_cached_per_session_until_reset(fake_api):
    fake_api.on("GET", "/categories", json_response(200, {"data": []}))
    transport = HttpTransport(
        "http://test/api", csrf_per_session=True, transport=httpx.MockTransport(fake_api)
    )
    try:
        await transport.send("GET", "/categories")
        await transport.send("GET", "/categories")
        assert fake_api.csrf_requests == 1

        transport.reset_csrf()
        await transport.send("GET", "/categories")
        assert fake_api.csrf_requests == 2
    finally:
        await transport.aclose()
