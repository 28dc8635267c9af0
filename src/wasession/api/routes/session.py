"""Session status, pairing QR and logout endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from wasession.api.deps import get_gateway, get_tracker
from wasession.domain.status import ConnectionStatus, StatusTracker
from wasession.observability.logging import get_logger
from wasession.session.gateway import SessionGateway

router = APIRouter(prefix="/api", tags=["session"])

logger = get_logger(__name__)


@router.get("/status")
def get_status(tracker: StatusTracker = Depends(get_tracker)) -> dict:
    snap = tracker.snapshot()
    return {"status": snap.status.value, "client": snap.client_dict()}


@router.get("/qr")
def get_qr(tracker: StatusTracker = Depends(get_tracker)) -> dict:
    """Current pairing QR.

    Once connected the QR is always null, whatever payload is still held.
    """
    snap = tracker.snapshot()
    if snap.status is ConnectionStatus.CONNECTED:
        return {"status": snap.status.value, "qr": None, "client": snap.client_dict()}
    return {"status": snap.status.value, "qr": snap.qr}


@router.post("/disconnect")
async def disconnect(
    tracker: StatusTracker = Depends(get_tracker),
    gateway: SessionGateway = Depends(get_gateway),
) -> dict:
    """Log out of the session and reset the tracker.

    The tracker is only reset after a successful logout; a failed logout
    leaves the reported state untouched.
    """
    await gateway.logout()
    tracker.mark_disconnected()
    logger.info("session logged out by request")
    return {"success": True, "message": "Disconnected successfully"}
