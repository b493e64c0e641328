from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from edgemerge.metrics import get_prometheus_registry

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def prometheus_exposition() -> Response:
    """Poll counters, fetch latency and router gauges in the Prometheus text format."""
    payload = generate_latest(get_prometheus_registry())
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
