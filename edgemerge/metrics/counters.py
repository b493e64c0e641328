from __future__ import annotations

from prometheus_client import Counter

from edgemerge.metrics.prometheus import get_prometheus_registry, metric_label

edgemerge_polls_metric = Counter(
    "edgemerge_polls_total",
    "Poll cycle outcomes per endpoint",
    ["endpoint", "outcome"],
    registry=get_prometheus_registry(),
)


def increment_poll(*, endpoint: str, outcome: str) -> None:
    edgemerge_polls_metric.labels(endpoint=metric_label(endpoint), outcome=metric_label(outcome)).inc()
