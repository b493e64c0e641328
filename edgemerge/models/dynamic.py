"""Traefik dynamic configuration, HTTP section only.

Field names follow the camelCase keys of the Traefik API and file provider.
Unknown keys in a decoded document are ignored, except on ``Middleware`` where
middleware variants this package does not model are kept verbatim.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DynamicModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RouterTLSConfig(DynamicModel):
    cert_resolver: str | None = None


class Router(DynamicModel):
    entry_points: list[str] | None = None
    middlewares: list[str] | None = None
    service: str | None = None
    rule: str = ""
    priority: int | None = None
    tls: RouterTLSConfig | None = None


class Server(DynamicModel):
    url: str


class ServersLoadBalancer(DynamicModel):
    servers: list[Server] = Field(default_factory=list)


class Service(DynamicModel):
    load_balancer: ServersLoadBalancer | None = None


class RedirectScheme(DynamicModel):
    scheme: str | None = None
    port: str | None = None
    permanent: bool = False


class Middleware(DynamicModel):
    model_config = ConfigDict(extra="allow")

    redirect_scheme: RedirectScheme | None = None


class HTTPConfiguration(DynamicModel):
    routers: dict[str, Router] = Field(default_factory=dict)
    services: dict[str, Service] = Field(default_factory=dict)
    middlewares: dict[str, Middleware] = Field(default_factory=dict)


class Configuration(DynamicModel):
    http: HTTPConfiguration | None = None

    def is_empty(self) -> bool:
        return self.http is None or not (self.http.routers or self.http.services or self.http.middlewares)
