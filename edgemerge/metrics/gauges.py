from __future__ import annotations

from prometheus_client import Gauge

from edgemerge.metrics.prometheus import get_prometheus_registry, metric_label

edgemerge_endpoint_routers_metric = Gauge(
    "edgemerge_endpoint_routers",
    "Routers contributed by an endpoint in the last poll cycle",
    ["endpoint"],
    registry=get_prometheus_registry(),
)

edgemerge_merged_routers_metric = Gauge(
    "edgemerge_merged_routers",
    "Routers in the last published configuration",
    registry=get_prometheus_registry(),
)

edgemerge_last_publish_metric = Gauge(
    "edgemerge_last_publish_timestamp",
    "Unix time of the last published configuration",
    registry=get_prometheus_registry(),
)


def set_endpoint_routers(*, endpoint: str, count: int) -> None:
    edgemerge_endpoint_routers_metric.labels(endpoint=metric_label(endpoint)).set(count)


def set_merged_routers(count: int) -> None:
    edgemerge_merged_routers_metric.set(count)


def set_last_publish(timestamp: float) -> None:
    edgemerge_last_publish_metric.set(timestamp)
