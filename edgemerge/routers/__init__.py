from .configuration import router as configuration_router
from .health import router as health_router
from .metrics import router as metrics_router

__all__ = [
    "configuration_router",
    "health_router",
    "metrics_router",
]
