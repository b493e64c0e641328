from edgemerge.config_runtime.loader import build_aggregator_config, load_aggregator_config, load_config_dict

__all__ = [
    "build_aggregator_config",
    "load_aggregator_config",
    "load_config_dict",
]
