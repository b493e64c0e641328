from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from edgemerge.aggregator import ConfigStore
from edgemerge.config import AggregatorConfig, Endpoint
from edgemerge.main import create_app


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint(host="a.example", apiPort=8080, webPort=8081)


@pytest.fixture
def tls_endpoint() -> Endpoint:
    return Endpoint.model_validate({"host": "b.example", "apiPort": 9090, "webPort": 9443, "tls": {"ignoreInsecure": True}})


@pytest.fixture
def aggregator_config(endpoint: Endpoint, tls_endpoint: Endpoint) -> AggregatorConfig:
    return AggregatorConfig(conn_timeout=2, poll_interval=5, endpoints=[endpoint, tls_endpoint])


@pytest.fixture
def test_app() -> FastAPI:
    app = create_app()
    app.state.config_store = ConfigStore()
    return app


@pytest.fixture
async def client(test_app: FastAPI):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
