import httpx
import pytest

from poller import LOCATION_PATH, parse_args, poll_locations


def _client(responses):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return responses[len(calls) - 1]

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")
    return client, calls


@pytest.mark.asyncio
async def test_collects_snapshots() -> None:
    client, calls = _client([
        httpx.Response(200, json=[{"id": "A"}]),
        httpx.Response(200, json=[{"id": "B"}]),
        httpx.Response(200, json=[{"id": "A"}]),
    ])
    async with client:
        received = await poll_locations(interval=0, count=3, client=client)

    assert received == [[{"id": "A"}], [{"id": "B"}], [{"id": "A"}]]
    assert calls == [LOCATION_PATH] * 3


@pytest.mark.asyncio
async def test_skips_server_errors() -> None:
    client, calls = _client([
        httpx.Response(500, content=b"[]"),
        httpx.Response(200, json=[{"id": "B"}]),
    ])
    async with client:
        received = await poll_locations(interval=0, count=2, client=client)

    assert received == [[{"id": "B"}]]
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_transport_errors_do_not_stop_polling() -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=[])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock") as client:
        received = await poll_locations(interval=0, count=2, client=client)

    assert received == [[]]


@pytest.mark.asyncio
async def test_skips_bodies_that_are_not_vehicle_lists() -> None:
    client, calls = _client([
        httpx.Response(200, content=b"<html>oops</html>"),
        httpx.Response(200, json={"error": "nope"}),
        httpx.Response(200, json=[{"id": "B"}]),
    ])
    async with client:
        received = await poll_locations(interval=0, count=3, client=client)

    assert received == [[{"id": "B"}]]
    assert len(calls) == 3


def test_interval_accepts_durations() -> None:
    assert parse_args(["--interval", "500ms"]).interval == pytest.approx(0.5)
    assert parse_args(["--interval", "2"]).interval == 2.0
    assert parse_args([]).interval == 3.0


def test_interval_rejects_garbage() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--interval", "soon"])
