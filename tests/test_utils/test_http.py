from __future__ import annotations

import httpx
import pytest
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock, patch

from pyelevate.utils.http import HTTPClient
from pyelevate.exceptions import NetworkError, PackageIndexError


def _response(
    status_code: int = 200,
    *,
    payload: Any = None,
    text: str = "",
    headers: Optional[dict] = None,
) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def no_sleep():
    """Skip real backoff delays."""
    with patch("pyelevate.utils.http.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization."""

    def test_default_values(self) -> None:
        client = HTTPClient()

        assert client.timeout == 10.0
        assert client.max_retries == 0
        assert client.rate_limit_delay == 0.0
        assert client.verify_ssl is True
        assert client.max_concurrency == 10
        assert "pyelevate" in client.user_agent
        assert client._max_429_retries == 3
        assert client._client is None

    def test_custom_values(self) -> None:
        client = HTTPClient(
            timeout=2,
            max_retries=4,
            rate_limit_delay=0.5,
            verify_ssl=False,
            user_agent="Custom/1.0",
            max_concurrency=3,
        )

        assert client.timeout == 2
        assert client.max_retries == 4
        assert client.rate_limit_delay == 0.5
        assert client.verify_ssl is False
        assert client.user_agent == "Custom/1.0"
        assert client._semaphore._value == 3

    def test_negative_retries_clamped(self) -> None:
        assert HTTPClient(max_retries=-2).max_retries == 0


@pytest.mark.unit
class TestHTTPClientLifecycle:
    """Tests for the async context manager protocol."""

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self) -> None:
        client = HTTPClient()

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_without_client(self) -> None:
        client = HTTPClient()

        await client.close()

        assert client._client is None


@pytest.mark.unit
class TestHTTPClientRequest:
    """Tests for request status handling and retries."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(200)

            async with client:
                response = await client.get("https://example.com")

        assert response.status_code == 200
        mock_request.assert_awaited_once_with("GET", "https://example.com")

    @pytest.mark.asyncio
    async def test_404_raises_package_index_error(self) -> None:
        client = HTTPClient(max_retries=3)

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(404)

            async with client:
                with pytest.raises(PackageIndexError) as exc_info:
                    await client.get("https://pypi.org/pypi/nope/json")

        assert exc_info.value.status_code == 404
        assert mock_request.await_count == 1

    @pytest.mark.asyncio
    async def test_4xx_raises_network_error(self) -> None:
        client = HTTPClient(max_retries=2)

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(403, text="forbidden")

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get("https://example.com")

        assert exc_info.value.status_code == 403
        assert exc_info.value.response_body == "forbidden"
        assert mock_request.await_count == 1

    @pytest.mark.asyncio
    async def test_5xx_without_retries_fails_once(self) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(503, text="unavailable")

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get("https://example.com")

        assert exc_info.value.status_code == 503
        assert mock_request.await_count == 1

    @pytest.mark.asyncio
    async def test_5xx_retried_when_configured(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=1)

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [_response(500), _response(200)]

            async with client:
                response = await client.get("https://example.com")

        assert response.status_code == 200
        assert mock_request.await_count == 2
        no_sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ReadTimeout("timed out")

            async with client:
                with pytest.raises(NetworkError, match="1 attempt"):
                    await client.get("https://example.com")

    @pytest.mark.asyncio
    async def test_transport_error_retried(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=2)

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("refused")

            async with client:
                with pytest.raises(NetworkError, match="3 attempt"):
                    await client.get("https://example.com")

        assert mock_request.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.TooManyRedirects("Exceeded maximum allowed redirects."),
            httpx.DecodingError("bad gzip"),
        ],
    )
    async def test_other_httpx_errors_become_network_error(
        self, error: httpx.HTTPError, no_sleep: AsyncMock
    ) -> None:
        client = HTTPClient(max_retries=2)

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = error

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get("https://example.com/loop")

        assert exc_info.value.url == "https://example.com/loop"
        assert exc_info.value.__cause__ is error
        assert mock_request.await_count == 1

    @pytest.mark.asyncio
    async def test_429_honours_retry_after(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                _response(429, headers={"Retry-After": "2"}),
                _response(200),
            ]

            async with client:
                response = await client.get("https://example.com")

        assert response.status_code == 200
        no_sleep.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_429_gives_up_after_limit(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(429, headers={"Retry-After": "0"})

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get("https://example.com")

        assert exc_info.value.status_code == 429
        assert mock_request.await_count == client._max_429_retries + 1


@pytest.mark.unit
class TestHTTPClientJson:
    """Tests for get_json and post_json decoding."""

    @pytest.mark.asyncio
    async def test_get_json_object(self) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload={"info": {"version": "1.0.0"}})

            async with client:
                data = await client.get_json("https://pypi.org/pypi/x/json")

        assert data == {"info": {"version": "1.0.0"}}

    @pytest.mark.asyncio
    async def test_get_json_non_object(self) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=[1, 2, 3])

            async with client:
                with pytest.raises(NetworkError, match="Expected JSON object"):
                    await client.get_json("https://example.com")

    @pytest.mark.asyncio
    async def test_get_json_invalid(self) -> None:
        client = HTTPClient()

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=ValueError("bad json"), text="<html>")

            async with client:
                with pytest.raises(NetworkError, match="Invalid JSON"):
                    await client.get_json("https://example.com")

    @pytest.mark.asyncio
    async def test_post_json_sends_payload(self) -> None:
        client = HTTPClient()
        payload = {"package": {"name": "flask", "ecosystem": "PyPI"}, "version": "2.0.0"}

        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload={"vulns": []})

            async with client:
                data = await client.post_json("https://api.osv.dev/v1/query", payload)

        assert data == {"vulns": []}
        mock_request.assert_awaited_once_with(
            "POST", "https://api.osv.dev/v1/query", json=payload
        )
