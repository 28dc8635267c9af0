"""Closed error taxonomy shared by the session layer and the HTTP API."""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    NOT_CONNECTED = "not_connected"
    UPSTREAM = "upstream_error"
    TIMEOUT = "timeout"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_CONNECTED: 503,
    ErrorKind.UPSTREAM: 500,
    ErrorKind.TIMEOUT: 504,
}


class ServiceError(Exception):
    """Failure surfaced to API callers as ``{"success": false, "error", "kind"}``."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_body(self) -> dict:
        return {"success": False, "error": self.message, "kind": self.kind.value}
