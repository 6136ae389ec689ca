"""Custom exceptions for the HTTP client."""


class ClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *args, url: str | None = None, **kwargs):
        self.message = message
        self.url = url
        super().__init__(message, *args, **kwargs)


class ConnectionError(ClientError):
    """Raised when a request fails at the transport level (connect, timeout, read)."""

    pass


class APIError(ClientError):
    """Raised when the server returns a non-2xx response."""

    def __init__(self, message: str, status_code: int, *args, **kwargs):
        self.status_code = status_code
        super().__init__(message, *args, **kwargs)


class NotFoundError(APIError):
    """Raised when the server returns a 404 not found response."""

    def __init__(self, message: str = "Resource not found", url: str | None = None):
        super().__init__(message, status_code=404, url=url)
