"""Request-scoped accessors for the components owned by the app."""

from fastapi import Request

from wasession.domain.status import StatusTracker
from wasession.session.gateway import SessionGateway
from wasession.session.reactor import EventReactor
from wasession.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tracker(request: Request) -> StatusTracker:
    return request.app.state.tracker


def get_gateway(request: Request) -> SessionGateway:
    return request.app.state.gateway


def get_reactor(request: Request) -> EventReactor:
    return request.app.state.reactor
