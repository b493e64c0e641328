from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    ready_payload = _readiness_payload(request)
    status = 200 if ready_payload["status"] == "ok" else 503
    payload = {"liveliness": "ok", "readiness": ready_payload}
    return JSONResponse(status_code=status, content=payload)


@router.get("/health/liveliness")
async def liveliness() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/readiness")
async def readiness(request: Request) -> JSONResponse:
    payload = _readiness_payload(request)
    status = 200 if payload["status"] == "ok" else 503
    return JSONResponse(status_code=status, content=payload)


def _readiness_payload(request: Request) -> dict[str, object]:
    store = getattr(request.app.state, "config_store", None)
    results = store.get_results() if store is not None else []
    checks = {
        "published": store is not None and store.ready,
        "endpoints": any(result.ok for result in results),
    }
    if all(checks.values()):
        status = "ok"
    elif checks["published"]:
        status = "degraded"
    else:
        status = "unavailable"
    return {"status": status, "checks": checks}
