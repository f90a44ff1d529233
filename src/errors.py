"""
Error taxonomy for the cinema admin client.
Every failure an intent can hit is a ClientError and is reported to the user.
"""


class ClientError(Exception):
    """Base class for failures reported to the user."""

    title = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClientError):
    """Local failure detected before contacting the server, or a malformed reply."""

    title = "Invalid data"


class PermissionDeniedError(ClientError):
    """The current session may not perform the requested operation."""

    title = "Permission denied"


class HttpError(ClientError):
    """The server answered with a non-2xx status."""

    title = "Server error"

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        return f"{self.status}: {self.message}"


class TransportError(ClientError):
    """The request never got an HTTP answer (DNS, refused connection, timeout)."""

    title = "Connection error"


__all__ = [
    "ClientError",
    "ValidationError",
    "PermissionDeniedError",
    "HttpError",
    "TransportError",
]
