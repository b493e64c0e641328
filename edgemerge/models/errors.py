from __future__ import annotations


class AggregatorError(Exception):
    status_code: int = 500
    error_type: str = "server_error"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ConfigurationError(AggregatorError):
    error_type = "configuration_error"
    message = "Invalid configuration"

    def __init__(self, message: str | None = None, field: str | None = None, index: int | None = None):
        super().__init__(message=message)
        self.field = field
        self.index = index


class ConnectivityError(AggregatorError):
    status_code = 502
    error_type = "connectivity_error"
    message = "Endpoint is unreachable"

    def __init__(self, uri: str, message: str | None = None):
        super().__init__(message=message or f"could not call request({uri})")
        self.uri = uri


class RetrievalError(AggregatorError):
    status_code = 502
    error_type = "retrieval_error"
    message = "Could not retrieve configuration"

    def __init__(self, uri: str, message: str | None = None):
        super().__init__(message=message or f"could not make request for {uri}")
        self.uri = uri


class BodyCloseError(RetrievalError):
    error_type = "body_close_error"

    def __init__(self, uri: str):
        super().__init__(uri, message=f"could not close response body for {uri}")


class DecodeError(AggregatorError):
    status_code = 502
    error_type = "decode_error"
    message = "Could not decode configuration"

    def __init__(self, uri: str, body: str):
        super().__init__(message=f"could not decode response for {uri}: {body}")
        self.uri = uri
        self.body = body


class EmptyResponseError(AggregatorError):
    status_code = 502
    error_type = "empty_response"
    message = "received empty response"

    def __init__(self, endpoint: str):
        super().__init__(message=f"received empty response (client:{endpoint!r})")
        self.endpoint = endpoint


class ConfigNotReadyError(AggregatorError):
    status_code = 503
    error_type = "not_ready"
    message = "No configuration has been published yet"
