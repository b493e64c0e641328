from __future__ import annotations

import asyncio
import logging

import httpx
from pydantic import ValidationError

from edgemerge.config import Endpoint
from edgemerge.models.dynamic import Configuration, HTTPConfiguration
from edgemerge.models.errors import BodyCloseError, DecodeError, EmptyResponseError, RetrievalError
from edgemerge.upstream.transform import prepare_fragment

logger = logging.getLogger(__name__)

RAW_DATA_PATH = "/api/rawdata"


class UpstreamClient:
    """Fetches and transforms the routing configuration of one endpoint."""

    def __init__(self, http_client: httpx.AsyncClient, endpoint: Endpoint, resolver: str | None = None) -> None:
        self.http_client = http_client
        self.endpoint = endpoint
        self.resolver = resolver

    @property
    def endpoint_name(self) -> str:
        return self.endpoint.host

    async def fetch_configuration(self, deadline: float | None = None) -> Configuration:
        uri = self.endpoint.build_uri(self.endpoint.api, RAW_DATA_PATH)
        request = self.http_client.build_request("GET", uri)

        try:
            async with asyncio.timeout_at(deadline):
                response = await self.http_client.send(request, stream=True)
                try:
                    # Iterate the raw stream; aread() would close it and hide close failures.
                    body = b"".join([chunk async for chunk in response.stream])
                except BaseException:
                    await response.aclose()
                    raise
        except (httpx.HTTPError, TimeoutError) as exc:
            raise RetrievalError(uri) from exc

        try:
            await response.aclose()
        except httpx.HTTPError as exc:
            raise BodyCloseError(uri) from exc

        logger.debug("fetched %s: status=%s bytes=%d", uri, response.status_code, len(body))

        try:
            http = HTTPConfiguration.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeError(uri, body.decode("utf-8", errors="replace")) from exc

        return Configuration(http=http)

    async def fetch_raw(self, deadline: float | None = None) -> Configuration:
        result = await self.fetch_configuration(deadline=deadline)
        if result.http is not None and result.http.routers and result.http.services:
            return prepare_fragment(result, self.endpoint, self.resolver)

        raise EmptyResponseError(self.endpoint.host)

    async def aclose(self) -> None:
        await self.http_client.aclose()
