from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import respx

from edgemerge.models.errors import BodyCloseError, DecodeError, EmptyResponseError, RetrievalError
from edgemerge.upstream.client import UpstreamClient

from tests.factories import raw_data

RAW_URL = "http://a.example:8080/api/rawdata"


class SlowTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, json=raw_data(), request=request)


class RecordingStream(httpx.AsyncByteStream):
    def __init__(self, body: bytes, close_error: Exception | None = None) -> None:
        self.body = body
        self.close_error = close_error
        self.closed = 0

    async def __aiter__(self):
        yield self.body

    async def aclose(self) -> None:
        self.closed += 1
        if self.close_error is not None:
            raise self.close_error


def _stream_transport(stream: RecordingStream) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, stream=stream))


@pytest.mark.asyncio
@respx.mock
async def test_fetch_raw_returns_transformed_fragment(endpoint):
    route = respx.get(RAW_URL).mock(return_value=httpx.Response(200, json=raw_data()))

    async with httpx.AsyncClient() as http_client:
        client = UpstreamClient(http_client, endpoint, resolver="myresolver")
        fragment = await client.fetch_raw()

    assert route.called
    assert fragment.http is not None
    assert set(fragment.http.routers) == {"web-a.example", "web-a.example-secure"}
    assert set(fragment.http.middlewares) == {"http2https"}
    assert client.endpoint_name == "a.example"


@pytest.mark.asyncio
@respx.mock
async def test_fetch_configuration_decodes_http_section_only(endpoint):
    respx.get(RAW_URL).mock(return_value=httpx.Response(200, json=raw_data()))

    async with httpx.AsyncClient() as http_client:
        result = await UpstreamClient(http_client, endpoint).fetch_configuration()

    assert result.http is not None
    assert set(result.http.routers) == {"web@docker", "api@internal"}
    assert result.http.routers["web@docker"].entry_points == ["web"]
    assert len(result.http.services["web@docker"].load_balancer.servers) == 2
    assert "strip@docker" in result.http.middlewares


@pytest.mark.asyncio
@respx.mock
async def test_transport_failure_is_retrieval_error(endpoint):
    respx.get(RAW_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    async with httpx.AsyncClient() as http_client:
        with pytest.raises(RetrievalError) as exc_info:
            await UpstreamClient(http_client, endpoint).fetch_raw()

    assert exc_info.value.uri == RAW_URL
    assert RAW_URL in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
@respx.mock
async def test_malformed_body_is_decode_error_with_body(endpoint):
    respx.get(RAW_URL).mock(return_value=httpx.Response(502, text="<html>bad gateway</html>"))

    async with httpx.AsyncClient() as http_client:
        with pytest.raises(DecodeError) as exc_info:
            await UpstreamClient(http_client, endpoint).fetch_raw()

    assert exc_info.value.body == "<html>bad gateway</html>"
    assert exc_info.value.uri == RAW_URL
    assert "<html>bad gateway</html>" in str(exc_info.value)


@pytest.mark.asyncio
@respx.mock
async def test_non_object_body_is_decode_error(endpoint):
    respx.get(RAW_URL).mock(return_value=httpx.Response(200, json=["not", "a", "document"]))

    async with httpx.AsyncClient() as http_client:
        with pytest.raises(DecodeError):
            await UpstreamClient(http_client, endpoint).fetch_configuration()


@pytest.mark.asyncio
@respx.mock
async def test_internal_only_document_is_empty_response(endpoint):
    payload = {"routers": {"internal-api@internal": {"rule": "PathPrefix(`/api`)"}}}
    respx.get(RAW_URL).mock(return_value=httpx.Response(200, json=payload))

    async with httpx.AsyncClient() as http_client:
        with pytest.raises(EmptyResponseError) as exc_info:
            await UpstreamClient(http_client, endpoint).fetch_raw()

    assert exc_info.value.endpoint == "a.example"
    assert "a.example" in str(exc_info.value)


@pytest.mark.asyncio
@respx.mock
async def test_routers_without_services_is_empty_response(endpoint):
    payload = {"routers": {"web@docker": {"rule": "Host(`a`)"}}, "services": {}}
    respx.get(RAW_URL).mock(return_value=httpx.Response(200, json=payload))

    async with httpx.AsyncClient() as http_client:
        with pytest.raises(EmptyResponseError):
            await UpstreamClient(http_client, endpoint).fetch_raw()


@pytest.mark.asyncio
@respx.mock
async def test_dangling_router_yields_empty_fragment_not_error(endpoint):
    payload = {
        "routers": {"router@x": {"rule": "Host(`x`)"}},
        "services": {"other@x": {"loadBalancer": {"servers": [{"url": "http://10.0.0.1"}]}}},
    }
    respx.get(RAW_URL).mock(return_value=httpx.Response(200, json=payload))

    async with httpx.AsyncClient() as http_client:
        fragment = await UpstreamClient(http_client, endpoint).fetch_raw()

    assert fragment.is_empty()


@pytest.mark.asyncio
@respx.mock
async def test_tls_endpoint_uses_https(tls_endpoint):
    route = respx.get("https://b.example:9090/api/rawdata").mock(return_value=httpx.Response(200, json=raw_data()))

    async with httpx.AsyncClient() as http_client:
        fragment = await UpstreamClient(http_client, tls_endpoint).fetch_raw()

    assert route.called
    assert fragment.http is not None
    servers = fragment.http.services["web-b.example"].load_balancer.servers
    assert [server.url for server in servers] == ["https://b.example:9443/", "https://b.example:9443/"]


@pytest.mark.asyncio
async def test_deadline_expiry_is_retrieval_error(endpoint):
    async with httpx.AsyncClient(transport=SlowTransport()) as http_client:
        client = UpstreamClient(http_client, endpoint)
        deadline = asyncio.get_running_loop().time() + 0.05

        with pytest.raises(RetrievalError) as exc_info:
            await client.fetch_raw(deadline=deadline)

    assert isinstance(exc_info.value.__cause__, TimeoutError)


@pytest.mark.asyncio
async def test_body_close_failure_is_body_close_error(endpoint):
    stream = RecordingStream(json.dumps(raw_data()).encode(), close_error=httpx.ReadError("reset on close"))

    async with httpx.AsyncClient(transport=_stream_transport(stream)) as http_client:
        with pytest.raises(BodyCloseError) as exc_info:
            await UpstreamClient(http_client, endpoint).fetch_raw()

    assert exc_info.value.uri == RAW_URL
    assert isinstance(exc_info.value.__cause__, httpx.ReadError)
    assert stream.closed == 1


@pytest.mark.asyncio
async def test_body_is_closed_once_after_read(endpoint):
    stream = RecordingStream(json.dumps(raw_data()).encode())

    async with httpx.AsyncClient(transport=_stream_transport(stream)) as http_client:
        fragment = await UpstreamClient(http_client, endpoint).fetch_raw()

    assert stream.closed == 1
    assert fragment.http is not None
    assert "web-a.example" in fragment.http.routers
