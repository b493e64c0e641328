from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Awaitable, Callable

import yaml

from edgemerge.aggregator.poller import PollResult
from edgemerge.models.dynamic import Configuration
from edgemerge.models.errors import ConfigNotReadyError

logger = logging.getLogger(__name__)

SnapshotSubscriber = Callable[[Configuration], Awaitable[None] | None]


class ConfigStore:
    """Holds the latest merged configuration and notifies subscribers on change."""

    def __init__(self) -> None:
        self._snapshot: Configuration | None = None
        self._results: list[PollResult] = []
        self._subscribers: list[SnapshotSubscriber] = []
        self.updated_at: float | None = None

    @property
    def ready(self) -> bool:
        return self._snapshot is not None

    def subscribe(self, callback: SnapshotSubscriber) -> None:
        self._subscribers.append(callback)

    def get_snapshot(self) -> Configuration:
        if self._snapshot is None:
            raise ConfigNotReadyError()
        return self._snapshot.model_copy(deep=True)

    def get_results(self) -> list[PollResult]:
        return list(self._results)

    async def publish(self, config: Configuration, results: list[PollResult]) -> None:
        changed = self._snapshot is None or self._snapshot.to_dict() != config.to_dict()
        self._snapshot = config
        self._results = list(results)
        self.updated_at = time.time()

        if not changed:
            return

        for callback in list(self._subscribers):
            try:
                result = callback(config.model_copy(deep=True))
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                logger.error("snapshot subscriber callback failed: %s", exc)


def render_yaml(config: Configuration) -> str:
    return yaml.safe_dump(config.to_dict(), sort_keys=True, default_flow_style=False)


class FilePublisher:
    """Writes the merged configuration as a Traefik file-provider YAML document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_content: str | None = None

    async def publish(self, config: Configuration, results: list[PollResult]) -> None:
        del results
        content = render_yaml(config)
        if content == self._last_content:
            return

        await asyncio.to_thread(self._write, content)
        self._last_content = content
        logger.info("configuration written to %s", self.path)

    def _write(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as handle:
                handle.write(content)
            os.replace(tmp_name, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

