from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol

from edgemerge.config import AggregatorConfig
from edgemerge.metrics import (
    increment_poll,
    observe_fetch_latency,
    set_endpoint_routers,
    set_last_publish,
    set_merged_routers,
)
from edgemerge.models.dynamic import Configuration, HTTPConfiguration
from edgemerge.models.errors import DecodeError, EmptyResponseError
from edgemerge.upstream.client import UpstreamClient

logger = logging.getLogger(__name__)


class PollOutcome(str, Enum):
    EMITTED = "emitted"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"
    EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class PollResult:
    endpoint: str
    outcome: PollOutcome
    fragment: Configuration | None = None
    error: BaseException | None = None
    latency_seconds: float = 0.0
    finished_at: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome == PollOutcome.EMITTED

    @property
    def router_count(self) -> int:
        if self.fragment is None or self.fragment.http is None:
            return 0
        return len(self.fragment.http.routers)


class Publisher(Protocol):
    async def publish(self, config: Configuration, results: list[PollResult]) -> None: ...


def classify_error(error: BaseException) -> PollOutcome:
    if isinstance(error, DecodeError):
        return PollOutcome.DECODE_FAILED
    if isinstance(error, EmptyResponseError):
        return PollOutcome.EMPTY_RESPONSE
    return PollOutcome.FETCH_FAILED


def merge_fragments(fragments: Iterable[Configuration]) -> Configuration:
    """Merge per-endpoint fragments into fresh containers.

    Fragments are left untouched. A key seen twice keeps the later value,
    which only happens when two endpoints share a host.
    """
    merged = HTTPConfiguration()
    for fragment in fragments:
        if fragment.http is None:
            continue
        for name, router in fragment.http.routers.items():
            if name in merged.routers:
                logger.warning("router %s defined by more than one endpoint", name)
            merged.routers[name] = router.model_copy(deep=True)
        for name, service in fragment.http.services.items():
            merged.services[name] = service.model_copy(deep=True)
        for name, middleware in fragment.http.middlewares.items():
            if name not in merged.middlewares:
                merged.middlewares[name] = middleware.model_copy(deep=True)
    return Configuration(http=merged)


class Aggregator:
    def __init__(
        self,
        clients: list[UpstreamClient],
        config: AggregatorConfig,
        publishers: list[Publisher] | None = None,
    ):
        self.clients = clients
        self.config = config
        self.publishers = list(publishers or [])
        self.last_results: dict[str, PollResult] = {}
        self._running = False
        self._wakeup = asyncio.Event()

    async def start(self) -> None:
        self._running = True
        self._wakeup.clear()
        while self._running:
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("poll cycle failed")
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.config.poll_interval)
            except TimeoutError:
                pass

    def stop(self) -> None:
        self._running = False
        self._wakeup.set()

    async def aclose(self) -> None:
        self.stop()
        for client in self.clients:
            await client.aclose()

    async def run_cycle(self) -> Configuration:
        results = await self.poll_once()
        merged = merge_fragments(result.fragment for result in results if result.fragment is not None)

        succeeded = sum(1 for result in results if result.ok)
        logger.info(
            "poll cycle finished: %d/%d endpoints ok, %d routers",
            succeeded,
            len(results),
            len(merged.http.routers) if merged.http else 0,
        )

        for publisher in self.publishers:
            await publisher.publish(merged, results)

        set_merged_routers(len(merged.http.routers) if merged.http else 0)
        set_last_publish(time.time())
        return merged

    async def poll_once(self) -> list[PollResult]:
        if not self.clients:
            return []

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.conn_timeout

        tasks = [self._poll_endpoint(client, deadline) for client in self.clients]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[PollResult] = []
        for client, outcome in zip(self.clients, outcomes, strict=False):
            if isinstance(outcome, PollResult):
                result = outcome
            else:
                logger.error("unexpected failure polling %s: %r", client.endpoint_name, outcome)
                result = PollResult(
                    endpoint=client.endpoint_name,
                    outcome=PollOutcome.FETCH_FAILED,
                    error=outcome,
                    finished_at=time.time(),
                )
            self.last_results[result.endpoint] = result
            results.append(result)
        return results

    async def _poll_endpoint(self, client: UpstreamClient, deadline: float) -> PollResult:
        endpoint = client.endpoint_name
        started = time.perf_counter()
        try:
            fragment = await client.fetch_raw(deadline=deadline)
        except Exception as exc:
            latency = time.perf_counter() - started
            outcome = classify_error(exc)
            logger.warning("endpoint %s: %s: %s", endpoint, outcome.value, exc)
            increment_poll(endpoint=endpoint, outcome=outcome.value)
            observe_fetch_latency(endpoint=endpoint, latency_seconds=latency)
            set_endpoint_routers(endpoint=endpoint, count=0)
            return PollResult(
                endpoint=endpoint,
                outcome=outcome,
                error=exc,
                latency_seconds=latency,
                finished_at=time.time(),
            )

        latency = time.perf_counter() - started
        result = PollResult(
            endpoint=endpoint,
            outcome=PollOutcome.EMITTED,
            fragment=fragment,
            latency_seconds=latency,
            finished_at=time.time(),
        )
        increment_poll(endpoint=endpoint, outcome=result.outcome.value)
        observe_fetch_latency(endpoint=endpoint, latency_seconds=latency)
        set_endpoint_routers(endpoint=endpoint, count=result.router_count)
        logger.debug("endpoint %s: %d routers in %.3fs", endpoint, result.router_count, latency)
        return result
