from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PATH = "/"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Any) -> Any:
    """Parse Go-style durations ("5s", "1m30s", "250ms") into seconds.

    Numbers are taken as seconds. Anything else is returned untouched so the
    field validation reports it.
    """
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        return value
    try:
        return float(text)
    except ValueError:
        pass

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            return value
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text) or position == 0:
        return value
    return sign * total


class ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class EndpointTLS(ConfigModel):
    ignore_insecure: bool = False


class Endpoint(ConfigModel):
    host: str = Field(min_length=1)
    api: int = Field(alias="apiPort", gt=0)
    web: int = Field(alias="webPort", gt=0)
    tls: EndpointTLS | None = None

    def build_uri(self, port: int, path: str) -> str:
        scheme = "https" if self.tls is not None else "http"
        return f"{scheme}://{self.host}:{port}{path}"


class AggregatorConfig(ConfigModel):
    conn_timeout: float = Field(gt=0)
    poll_interval: float = Field(gt=0)
    endpoints: list[Endpoint] = Field(min_length=1)
    tls_resolver: str | None = None

    @field_validator("conn_timeout", "poll_interval", mode="before")
    @classmethod
    def parse_durations(cls, value: Any) -> Any:
        return parse_duration(value)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EDGEMERGE_", extra="ignore")

    app_name: str = "edgemerge"
    log_level: str = "INFO"
    config_path: str = "config.yaml"
    output_path: str | None = None
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    return Settings()
