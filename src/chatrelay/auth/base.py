"""
Authentication gate abstraction.

An 'AuthGate' turns the raw 'Authorization' header of a request into an
'Identity'. The HTTP layer calls it before any handler runs, so handlers only
ever see authenticated callers. Issuing credentials (login, registration) is
somebody else's job.
"""

from abc import ABC, abstractmethod

from ..errors import Unauthenticated
from .models import Identity

BEARER_PREFIX = "bearer"


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token of a 'Bearer <token>' header value.

    Raise 'Unauthenticated' if the header is missing or not a bearer credential.
    """
    if not authorization:
        raise Unauthenticated("Missing Authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_PREFIX or not token:
        raise Unauthenticated("Authorization header is not a bearer credential")
    return token


class AuthGate(ABC):
    """
    Abstract base class for credential verification backends.

    Implementors verify signature and expiry of a bearer token and resolve it
    to an 'Identity'. They have no side effects beyond that resolution.
    """

    @abstractmethod
    def verify_token(self, token: str) -> Identity:
        """Return the identity encoded in 'token'.

        Raise 'Unauthenticated' if the token is malformed, forged or expired.
        """
        pass

    def authenticate(self, authorization: str | None) -> Identity:
        """Resolve a raw 'Authorization' header value to an identity."""
        return self.verify_token(extract_bearer_token(authorization))
