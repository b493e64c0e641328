from __future__ import annotations

import asyncio
import logging

import httpx

from edgemerge.config import DEFAULT_PATH, AggregatorConfig, Endpoint
from edgemerge.models.errors import ConnectivityError
from edgemerge.upstream.client import UpstreamClient

logger = logging.getLogger(__name__)


def build_http_client(endpoint: Endpoint, timeout: float) -> httpx.AsyncClient:
    verify = not (endpoint.tls is not None and endpoint.tls.ignore_insecure)
    if not verify:
        logger.warning("tls verification disabled for endpoint %s", endpoint.host)
    return httpx.AsyncClient(verify=verify, timeout=timeout)


async def _probe(http_client: httpx.AsyncClient, uri: str) -> None:
    try:
        response = await http_client.get(uri)
    except httpx.HTTPError as exc:
        raise ConnectivityError(uri, message=f"could not call request({uri}): {exc}") from exc
    logger.debug("probe %s answered with %s", uri, response.status_code)


async def prepare_clients(config: AggregatorConfig) -> list[UpstreamClient]:
    """Build one client per endpoint and check both of its ports answer.

    All probes share one deadline of ``conn_timeout``. The first failure
    closes every client built so far and raises ``ConnectivityError``.
    """
    built: list[tuple[httpx.AsyncClient, Endpoint]] = []
    current_uri = ""

    try:
        async with asyncio.timeout(config.conn_timeout):
            for endpoint in config.endpoints:
                http_client = build_http_client(endpoint, config.conn_timeout)
                built.append((http_client, endpoint))
                for port in (endpoint.api, endpoint.web):
                    current_uri = endpoint.build_uri(port, DEFAULT_PATH)
                    await _probe(http_client, current_uri)
    except BaseException as exc:
        for http_client, _ in built:
            await http_client.aclose()
        if isinstance(exc, TimeoutError):
            raise ConnectivityError(current_uri, message=f"timed out calling request({current_uri})") from exc
        raise

    logger.info("all %d endpoints reachable", len(built))
    return [UpstreamClient(http_client, endpoint, config.tls_resolver) for http_client, endpoint in built]
