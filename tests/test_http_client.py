"""Tests for the HTTP client service against a mocked transport."""

from collections.abc import Callable

import httpx
import pytest

from gamehub.services.http_client import HttpClientService


async def make_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: float) -> HttpClientService:
    client = HttpClientService(base_delay=0.0, **kwargs)  # type: ignore[arg-type]
    await client._client.aclose()
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


class TestExists:
    """Tests for lightweight existence checks."""

    @pytest.mark.asyncio
    async def test_uses_head_and_status_only(self) -> None:
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(200 if request.url.path == "/assets/pong.html" else 404)

        async with await make_client(handler) as client:
            assert await client.exists("https://example.com/assets/pong.html") is True
            assert await client.exists("https://example.com/assets/missing.html") is False

        assert methods == ["HEAD", "HEAD"]

    @pytest.mark.asyncio
    async def test_transport_failure_means_missing(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("refused", request=request)

        async with await make_client(handler, max_retries=3) as client:
            assert await client.exists("https://example.com/assets/pong.html") is False

        assert calls == 1


class TestGet:
    """Tests for GET retries."""

    @pytest.mark.asyncio
    async def test_retries_server_errors(self) -> None:
        statuses = iter([503, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses), text="ok")

        async with await make_client(handler, max_retries=1) as client:
            response = await client.get("https://example.com/assets/")

        assert response.text == "ok"

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(404)

        async with await make_client(handler, max_retries=3) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get("https://example.com/assets/")

        assert calls == 1

    @pytest.mark.asyncio
    async def test_rate_limit_honours_retry_after(self) -> None:
        statuses = iter([429, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses)
            headers = {"retry-after": "0"} if status == 429 else {}
            return httpx.Response(status, headers=headers, json={"tree": []})

        async with await make_client(handler, max_retries=1) as client:
            response = await client.get("https://api.github.com/repos/a/b/git/trees/main", params={"recursive": "1"})

        assert response.json() == {"tree": []}
        assert response.request.url.params["recursive"] == "1"

    @pytest.mark.asyncio
    async def test_gives_up_after_last_attempt(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        async with await make_client(handler, max_retries=2) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get("https://example.com/assets/")

        assert calls == 3


@pytest.mark.parametrize(
    ("status", "headers", "attempt", "expected"),
    [
        (503, {}, 0, 1.0),
        (503, {}, 1, 2.0),
        (503, {}, 3, None),
        (404, {}, 0, None),
        (429, {"retry-after": "7"}, 0, 7.0),
        (429, {"retry-after": "600"}, 0, 4.0),
        (429, {"retry-after": "soon"}, 1, 2.0),
    ],
)
def test_retry_policy(status: int, headers: dict[str, str], attempt: int, expected: float | None) -> None:
    client = HttpClientService(max_retries=3, base_delay=1.0, max_delay=4.0)
    request = httpx.Request("GET", "https://example.com/")
    error = httpx.HTTPStatusError("failed", request=request, response=httpx.Response(status, headers=headers, request=request))
    assert client._retry_delay(error, attempt) == expected
