"""FastAPI dependencies shared by the chat routes."""

from fastapi import Header, Request

from ..auth.base import AuthGate
from ..auth.models import Identity
from ..chat.session import ChatSession


def get_session(request: Request) -> ChatSession:
    return request.app.state.session


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def require_identity(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Identity:
    """Resolve the bearer credential before any handler logic runs.

    Raises 'Unauthenticated', which the app maps to a 401 response.
    """
    identity = get_auth_gate(request).authenticate(authorization)
    request.state.identity = identity
    return identity
