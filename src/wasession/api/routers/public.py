"""Health endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "WhatsApp session service is running"


@router.get("/health")
def health() -> dict:
    """Container health check."""
    return {"status": "ok"}
