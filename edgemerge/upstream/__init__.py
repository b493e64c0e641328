from edgemerge.upstream.client import RAW_DATA_PATH, UpstreamClient
from edgemerge.upstream.transform import (
    INTERNAL_SUFFIX,
    REDIRECT_MIDDLEWARE,
    SECURE_SUFFIX,
    fragment_name,
    prepare_fragment,
)
from edgemerge.upstream.transport import build_http_client, prepare_clients

__all__ = [
    "INTERNAL_SUFFIX",
    "RAW_DATA_PATH",
    "REDIRECT_MIDDLEWARE",
    "SECURE_SUFFIX",
    "UpstreamClient",
    "build_http_client",
    "fragment_name",
    "prepare_clients",
    "prepare_fragment",
]
