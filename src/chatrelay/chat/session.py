"""Message-exchange orchestration.

``ChatSession.handle`` runs one exchange through
received -> validating -> dispatching -> persisting -> responding.
The session keeps no per-user state between calls; every request carries
what it needs and all history lives in the message store.
"""

import asyncio
from uuid import uuid4

from loguru import logger

from ..auth.models import Identity
from ..config import DEFAULT_FALLBACK_REPLY
from ..errors import (
    InvalidRequest,
    PersistenceError,
    ProviderUnavailable,
    UnsupportedProvider,
    UpstreamError,
    UpstreamTimeout,
)
from ..llm.models import ProviderResponse
from ..llm.registry import ProviderRegistry
from ..store.base import MessageStore
from ..store.models import Message, Role
from .models import ChatReply, MessageRequest, SessionStage


class ChatSession:
    """Server-side orchestrator: prompt -> provider -> persistence -> reply.

    Provider failures never escape ``handle``: they are logged and turned
    into a normal reply carrying ``fallback_reply``. Persistence failures are
    logged and do not change the reply already computed.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        store: MessageStore,
        timeout: float = 30.0,
        fallback_reply: str = DEFAULT_FALLBACK_REPLY,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._registry = registry
        self._store = store
        self._timeout = timeout
        self._fallback_reply = fallback_reply

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    async def handle(self, request: MessageRequest, identity: Identity | None = None) -> ChatReply:
        """Run one message exchange.

        Args:
            request: Prompt, optional provider name and prior context
            identity: Authenticated caller; turns are only persisted when present

        Returns:
            ChatReply, with the fallback text if the provider failed

        Raises:
            InvalidRequest: Prompt is empty after trimming
        """
        exchange_id = uuid4().hex[:8]
        self._enter(SessionStage.RECEIVED, exchange_id)

        self._enter(SessionStage.VALIDATING, exchange_id)
        if not request.prompt or not request.prompt.strip():
            raise InvalidRequest("Prompt is required")
        provider_name = request.provider or self._registry.default.value

        self._enter(SessionStage.DISPATCHING, exchange_id)
        response = await self._dispatch(request, provider_name)

        if response is None:
            self._enter(SessionStage.RESPONDING, exchange_id)
            return ChatReply(
                success=False,
                provider=provider_name,
                tokens=0,
                reply=self._fallback_reply,
            )

        if identity is not None:
            self._enter(SessionStage.PERSISTING, exchange_id)
            # Shielded so a dropped client connection cannot cancel a half-written turn
            await asyncio.shield(self._persist_turn(identity.user_id, request.prompt, response.text))

        self._enter(SessionStage.RESPONDING, exchange_id)
        return ChatReply(
            success=True,
            provider=response.provider_name,
            tokens=response.token_count,
            reply=response.text,
        )

    async def _dispatch(self, request: MessageRequest, provider_name: str) -> ProviderResponse | None:
        """Call the provider; return None on any failure to get a reply."""
        try:
            provider = self._registry.resolve(request.provider)
            return await asyncio.wait_for(
                provider.complete(request.prompt, request.context),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error: Exception = UpstreamTimeout(
                f"{provider_name} did not answer within {self._timeout}s", provider=provider_name
            )
        except (UpstreamError, UnsupportedProvider) as e:
            error = e
        except Exception as e:
            # SDK failures the adapter did not map; CancelledError still propagates
            logger.exception("Unexpected error from provider {}", provider_name)
            error = ProviderUnavailable(f"{provider_name} request failed: {e}", provider=provider_name)

        logger.warning(
            "Provider {} failed ({}): {}", provider_name, type(error).__name__, error
        )
        return None

    async def _persist_turn(self, user_id: str, prompt: str, reply: str) -> None:
        try:
            await self._store.append(user_id, Role.USER, prompt)
            await self._store.append(user_id, Role.ASSISTANT, reply)
        except PersistenceError as e:
            logger.error("Failed to persist turn for user {}: {}", user_id, e)

    async def history(self, identity: Identity) -> list[Message]:
        return await self._store.list(identity.user_id)

    async def clear(self, identity: Identity) -> int:
        deleted = await self._store.delete_all(identity.user_id)
        logger.info("Cleared {} messages for user {}", deleted, identity.user_id)
        return deleted

    async def export(self, identity: Identity) -> bytes:
        return await self._store.export(identity.user_id)

    @staticmethod
    def _enter(stage: SessionStage, exchange_id: str) -> None:
        logger.debug("exchange {} -> {}", exchange_id, stage.value)
