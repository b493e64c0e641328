from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from edgemerge.config import AggregatorConfig
from edgemerge.models.errors import ConfigurationError


def load_config_dict(path: str | Path) -> dict[str, Any]:
    """Read a YAML, JSON or TOML file into a dictionary, chosen by extension."""
    cfg_path = Path(path)
    if not cfg_path.is_file():
        raise ConfigurationError(f"config file not found: {cfg_path}")

    text = cfg_path.read_text()
    suffix = cfg_path.suffix.lower()
    try:
        if suffix == ".toml":
            data = tomllib.loads(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"could not parse {cfg_path}: {exc}") from exc

    if data is None:
        raise ConfigurationError("empty config")
    if not isinstance(data, dict):
        raise ConfigurationError(f"config root must be a mapping, got {type(data).__name__}")
    return data


def _describe_error(error: dict[str, Any]) -> tuple[str, str | None, int | None]:
    loc = list(error.get("loc", ()))
    message = error.get("msg", "invalid value")

    if len(loc) >= 2 and loc[0] == "endpoints" and isinstance(loc[1], int):
        index = loc[1]
        field = ".".join(str(part) for part in loc[2:]) or None
        if field:
            return f"endpoint #{index} {field}: {message}", field, index
        return f"endpoint #{index}: {message}", None, index

    field = ".".join(str(part) for part in loc) or None
    if field:
        return f"{field}: {message}", field, None
    return message, None, None


def build_aggregator_config(data: dict[str, Any]) -> AggregatorConfig:
    try:
        return AggregatorConfig.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        message, field, index = _describe_error(first)
        raise ConfigurationError(message, field=field, index=index) from exc


def load_aggregator_config(path: str | Path) -> AggregatorConfig:
    return build_aggregator_config(load_config_dict(path))
