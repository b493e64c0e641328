from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from edgemerge.aggregator.publisher import ConfigStore
from edgemerge.models.errors import ConfigNotReadyError

router = APIRouter(prefix="/api", tags=["configuration"])


def _store(request: Request) -> ConfigStore:
    store = getattr(request.app.state, "config_store", None)
    if store is None:
        raise ConfigNotReadyError()
    return store


@router.get("/config")
async def merged_config(request: Request) -> dict[str, Any]:
    """Merged dynamic configuration, in the Traefik HTTP provider format."""
    return _store(request).get_snapshot().to_dict()


@router.get("/endpoints")
async def endpoint_status(request: Request) -> dict[str, Any]:
    store = _store(request)
    items = [
        {
            "endpoint": result.endpoint,
            "outcome": result.outcome.value,
            "error": str(result.error) if result.error is not None else None,
            "routers": result.router_count,
            "latency_seconds": round(result.latency_seconds, 4),
            "finished_at": result.finished_at,
        }
        for result in sorted(store.get_results(), key=lambda item: item.endpoint)
    ]
    return {
        "updated_at": store.updated_at,
        "healthy_count": sum(1 for result in store.get_results() if result.ok),
        "total_count": len(items),
        "endpoints": items,
    }
