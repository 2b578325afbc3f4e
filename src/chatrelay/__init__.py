"""
Chatrelay: per-user chat history in front of pluggable AI completion providers.

Each subpackage hides one design decision: how callers are authenticated,
which completion backend answers, where turns are stored, and how a client
keeps its rendered conversation in step with the server.
"""

__version__ = "0.1.0"

from .errors import (
    ChatRelayError,
    InvalidRequest,
    PersistenceError,
    Unauthenticated,
    UnsupportedProvider,
    UpstreamError,
)

__all__ = [
    "ChatRelayError",
    "InvalidRequest",
    "PersistenceError",
    "Unauthenticated",
    "UnsupportedProvider",
    "UpstreamError",
]
