from __future__ import annotations

from prometheus_client import CollectorRegistry

PROMETHEUS_REGISTRY = CollectorRegistry()


def get_prometheus_registry() -> CollectorRegistry:
    return PROMETHEUS_REGISTRY


def metric_label(value: object) -> str:
    """Label value for an endpoint host or poll outcome; blank values become ``unknown``."""
    return " ".join(str(value).split()) or "unknown"
