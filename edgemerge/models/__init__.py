from .dynamic import (
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
from .errors import (
    AggregatorError,
    BodyCloseError,
    ConfigNotReadyError,
    ConfigurationError,
    ConnectivityError,
    DecodeError,
    EmptyResponseError,
    RetrievalError,
)

__all__ = [
    "AggregatorError",
    "BodyCloseError",
    "ConfigNotReadyError",
    "ConfigurationError",
    "ConnectivityError",
    "DecodeError",
    "EmptyResponseError",
    "RetrievalError",
    "Configuration",
    "HTTPConfiguration",
    "Middleware",
    "RedirectScheme",
    "Router",
    "RouterTLSConfig",
    "Server",
    "ServersLoadBalancer",
    "Service",
]
