from __future__ import annotations

import asyncio

import httpx
import pytest

from tweaksync.http_client import HostClient
from tweaksync.page import MemoryPage
from tweaksync.poller import InvalidationPoller


def _host(handler) -> HostClient:
    return HostClient("http://127.0.0.1:9938", transport=httpx.MockTransport(handler))


def _page() -> MemoryPage:
    page = MemoryPage()
    page.add("status")
    return page


def test_refresh_body_invalidates_exactly_once() -> None:
    page = _page()
    calls: list[int] = []

    async def scenario() -> InvalidationPoller:
        host = _host(lambda request: httpx.Response(200, text="refresh"))
        poller = InvalidationPoller(host, page, lambda: calls.append(1))
        try:
            first = poller.tick()
            second = poller.tick()
            assert first is not None and second is not None
            await asyncio.gather(first, second)
            assert poller.tick() is None
        finally:
            await host.aclose()
        return poller

    poller = asyncio.run(scenario())

    assert calls == [1]
    assert poller.stopped is True
    assert poller.invalidated is True
    assert poller.state == "idle"


@pytest.mark.parametrize("body", ["ok", "", "Refresh", "refresh\n"])
def test_other_bodies_are_a_no_op(body: str) -> None:
    page = _page()
    calls: list[int] = []

    async def scenario() -> InvalidationPoller:
        host = _host(lambda request: httpx.Response(200, text=body))
        poller = InvalidationPoller(host, page, lambda: calls.append(1))
        try:
            task = poller.tick()
            assert task is not None
            await task
        finally:
            await host.aclose()
        return poller

    poller = asyncio.run(scenario())

    assert calls == []
    assert poller.stopped is False
    assert page.text_of("status") == ""


def test_poll_requests_should_refresh_endpoint() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(200, text="ok")

    async def scenario() -> None:
        host = _host(handler)
        poller = InvalidationPoller(host, _page(), lambda: None)
        try:
            task = poller.tick()
            assert task is not None
            await task
        finally:
            await host.aclose()

    asyncio.run(scenario())

    assert seen == [("GET", "/should_refresh")]


def test_transport_failure_reports_and_keeps_polling() -> None:
    page = _page()
    responses = iter(["fail", "refresh"])
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if next(responses) == "fail":
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, text="refresh")

    async def scenario() -> None:
        host = _host(handler)
        poller = InvalidationPoller(host, page, lambda: calls.append(1))
        try:
            task = poller.tick()
            assert task is not None
            await task
            assert page.text_of("status") == "HTTP Error: ReadTimeout: timed out"
            assert poller.stopped is False
            assert calls == []
            task = poller.tick()
            assert task is not None
            await task
        finally:
            await host.aclose()

    asyncio.run(scenario())

    assert calls == [1]


def test_state_is_checking_while_a_request_is_in_flight() -> None:
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return httpx.Response(200, text="ok")

    async def scenario() -> None:
        host = _host(handler)
        poller = InvalidationPoller(host, _page(), lambda: None)
        try:
            assert poller.state == "idle"
            task = poller.tick()
            assert task is not None
            await asyncio.sleep(0)
            assert poller.state == "checking"
            release.set()
            await task
            await asyncio.sleep(0)
            assert poller.state == "idle"
        finally:
            await host.aclose()

    asyncio.run(scenario())


def test_run_ticks_on_interval_until_invalidated() -> None:
    bodies = iter(["ok", "ok", "refresh"])
    calls: list[int] = []

    async def scenario() -> int:
        count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal count
            count += 1
            return httpx.Response(200, text=next(bodies, "refresh"))

        host = _host(handler)
        poller = InvalidationPoller(host, _page(), lambda: calls.append(1), interval_s=0.01)
        try:
            await asyncio.wait_for(poller.run(), timeout=2.0)
            while poller.pending:
                await asyncio.sleep(0.01)
        finally:
            await host.aclose()
        return count

    # run() only returns once a refresh has stopped the poller.
    count = asyncio.run(scenario())

    assert calls == [1]
    assert count >= 3


def test_stop_prevents_later_refresh_from_invalidating() -> None:
    release = asyncio.Event()
    calls: list[int] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return httpx.Response(200, text="refresh")

    async def scenario() -> None:
        host = _host(handler)
        poller = InvalidationPoller(host, _page(), lambda: calls.append(1))
        try:
            task = poller.tick()
            assert task is not None
            await asyncio.sleep(0)
            poller.stop()
            release.set()
            await task
        finally:
            await host.aclose()

    asyncio.run(scenario())

    assert calls == []


def test_undecodable_response_is_reported_to_status() -> None:
    page = _page()

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.DecodingError("Error -3 while decompressing data", request=request)

    async def scenario() -> InvalidationPoller:
        host = _host(handler)
        poller = InvalidationPoller(host, page, lambda: None)
        try:
            task = poller.tick()
            assert task is not None
            await task
        finally:
            await host.aclose()
        return poller

    poller = asyncio.run(scenario())

    assert page.text_of("status") == "HTTP Error: DecodingError: Error -3 while decompressing data"
    assert poller.stopped is False


def test_stopped_poller_does_not_report_late_failures() -> None:
    page = _page()
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        raise httpx.ConnectError("refused", request=request)

    async def scenario() -> None:
        host = _host(handler)
        poller = InvalidationPoller(host, page, lambda: None)
        try:
            task = poller.tick()
            assert task is not None
            await asyncio.sleep(0)
            poller.stop()
            release.set()
            await task
        finally:
            await host.aclose()

    asyncio.run(scenario())

    assert page.text_of("status") == ""
