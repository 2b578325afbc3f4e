"""Exception taxonomy shared by every layer.

Upstream failures are absorbed by the chat session and never reach the HTTP
layer; the other errors are surfaced to the caller.
"""


class ChatRelayError(Exception):
    """Base class for all chatrelay errors."""


class Unauthenticated(ChatRelayError):
    """Bearer credential missing, malformed, expired or forged."""


class InvalidRequest(ChatRelayError):
    """Request rejected before any provider call (e.g. empty prompt)."""


class UnsupportedProvider(ChatRelayError):
    """No completion provider is registered under the requested name."""


class UpstreamError(ChatRelayError):
    """A completion provider call failed."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class ProviderUnavailable(UpstreamError):
    """Provider could not be reached or answered with a server error."""


class RateLimited(UpstreamError):
    """Provider refused the call because of rate or quota limits."""


class InvalidUpstreamResponse(UpstreamError):
    """Provider answered, but without usable completion text."""


class UpstreamTimeout(UpstreamError):
    """Provider did not answer within the configured timeout."""


class PersistenceError(ChatRelayError):
    """Message store read or write failed."""
