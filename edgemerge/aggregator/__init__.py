from edgemerge.aggregator.poller import (
    Aggregator,
    PollOutcome,
    PollResult,
    Publisher,
    classify_error,
    merge_fragments,
)
from edgemerge.aggregator.publisher import ConfigStore, FilePublisher, render_yaml

__all__ = [
    "Aggregator",
    "ConfigStore",
    "FilePublisher",
    "PollOutcome",
    "PollResult",
    "Publisher",
    "classify_error",
    "merge_fragments",
    "render_yaml",
]
