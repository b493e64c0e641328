from edgemerge.metrics.counters import increment_poll
from edgemerge.metrics.gauges import set_endpoint_routers, set_last_publish, set_merged_routers
from edgemerge.metrics.histograms import observe_fetch_latency
from edgemerge.metrics.prometheus import get_prometheus_registry

__all__ = [
    "get_prometheus_registry",
    "increment_poll",
    "observe_fetch_latency",
    "set_endpoint_routers",
    "set_last_publish",
    "set_merged_routers",
]
