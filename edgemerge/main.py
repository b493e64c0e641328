from __future__ import annotations

import asyncio
import contextlib
import logging
from asyncio import Task, create_task
from contextlib import asynccontextmanager

from fastapi import FastAPI

from edgemerge.aggregator import Aggregator, ConfigStore, FilePublisher, Publisher
from edgemerge.config import Settings, get_settings
from edgemerge.config_runtime import load_aggregator_config
from edgemerge.middleware.errors import register_exception_handlers
from edgemerge.routers import configuration_router, health_router, metrics_router
from edgemerge.upstream import prepare_clients

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_publishers(settings: Settings, store: ConfigStore) -> list[Publisher]:
    publishers: list[Publisher] = [store]
    if settings.output_path:
        publishers.append(FilePublisher(settings.output_path))
    return publishers


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    configure_logging(settings.log_level)
    cfg = load_aggregator_config(settings.config_path)
    app.state.settings = settings
    app.state.aggregator_config = cfg

    clients = await prepare_clients(cfg)

    store = ConfigStore()
    aggregator = Aggregator(clients, cfg, build_publishers(settings, store))
    app.state.config_store = store
    app.state.aggregator = aggregator

    poll_task: Task[None] = create_task(aggregator.start())

    logger.info(
        "application startup complete: %d endpoints, poll interval %.1fs",
        len(cfg.endpoints),
        cfg.poll_interval,
    )
    try:
        yield
    finally:
        aggregator.stop()
        poll_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await poll_task
        await aggregator.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="edgemerge", version="0.1.0", lifespan=lifespan)
    if settings is not None:
        app.state.settings = settings
    register_exception_handlers(app)

    app.include_router(configuration_router)
    app.include_router(health_router)
    app.include_router(metrics_router)
    return app


app = create_app()
