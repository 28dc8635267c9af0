"""Correlation ID management for request tracing."""

import uuid
from contextvars import ContextVar, Token

# Shared by the HTTP middleware, the logger and outbound bridge calls
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4 string)."""
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Get current correlation ID from context (empty string outside a request)."""
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    """Bind ``cid`` to the current context. Keep the token for reset."""
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    """Restore the correlation ID that was active before ``set_correlation_id``."""
    correlation_id_var.reset(token)
