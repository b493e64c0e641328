from __future__ import annotations

from edgemerge.config import DEFAULT_PATH, Endpoint
from edgemerge.models.dynamic import (
    Configuration,
    HTTPConfiguration,
    Middleware,
    RedirectScheme,
    Router,
    RouterTLSConfig,
    Server,
    ServersLoadBalancer,
    Service,
)

INTERNAL_SUFFIX = "@internal"
PROVIDER_DELIMITER = "@"
SECURE_SUFFIX = "-secure"
REDIRECT_MIDDLEWARE = "http2https"


def fragment_name(key: str, endpoint: Endpoint) -> str:
    # Only the first segment survives, even when "@" is part of the name.
    return f"{key.split(PROVIDER_DELIMITER)[0]}-{endpoint.host}"


def redirect_middleware() -> Middleware:
    return Middleware(redirect_scheme=RedirectScheme(scheme="https", permanent=True))


def prepare_fragment(doc: Configuration, endpoint: Endpoint, resolver: str | None = None) -> Configuration:
    """Rename and re-home the routers of one endpoint's document.

    Every surviving router gets a service of the same name whose servers all
    point back at the endpoint's web port. With a cert resolver, each router
    also gets a ``-secure`` twin and the shared HTTPS redirect middleware.
    """
    output = Configuration()
    if doc.http is None:
        return output

    for key, item in doc.http.routers.items():
        if key.endswith(INTERNAL_SUFFIX):
            continue

        name = fragment_name(key, endpoint)

        service = doc.http.services.get(key)
        if service is None:
            continue

        if output.http is None:
            output.http = HTTPConfiguration()

        router = Router(service=name, rule=item.rule)
        output.http.routers[name] = router

        source_servers = service.load_balancer.servers if service.load_balancer is not None else []
        servers = [Server(url=endpoint.build_uri(endpoint.web, DEFAULT_PATH)) for _ in source_servers]
        output.http.services[name] = Service(load_balancer=ServersLoadBalancer(servers=servers))

        if resolver is not None:
            router.middlewares = [*(router.middlewares or []), REDIRECT_MIDDLEWARE]
            output.http.routers[name + SECURE_SUFFIX] = Router(
                service=name,
                rule=item.rule,
                tls=RouterTLSConfig(cert_resolver=resolver),
            )
            output.http.middlewares.setdefault(REDIRECT_MIDDLEWARE, redirect_middleware())

    return output
