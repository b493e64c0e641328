from __future__ import annotations

from prometheus_client import Histogram

from edgemerge.metrics.prometheus import get_prometheus_registry, metric_label

LATENCY_BUCKETS = [0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0]

edgemerge_fetch_latency_metric = Histogram(
    "edgemerge_fetch_latency_seconds",
    "Latency of one fetch-and-transform call",
    ["endpoint"],
    buckets=LATENCY_BUCKETS,
    registry=get_prometheus_registry(),
)


def observe_fetch_latency(*, endpoint: str, latency_seconds: float) -> None:
    edgemerge_fetch_latency_metric.labels(endpoint=metric_label(endpoint)).observe(latency_seconds)
