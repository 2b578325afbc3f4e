"""HTTP surface of the message-exchange pipeline.

Routes are served at the root and under ``/api/chat`` (the path the
web client calls). Every chat route requires a bearer token.
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from ..auth.base import AuthGate
from ..auth.jwt_gate import JWTAuthGate
from ..auth.models import Identity
from ..chat.models import ChatReply, MessageRequest
from ..chat.session import ChatSession
from ..config import Settings, get_settings
from ..errors import InvalidRequest, PersistenceError, Unauthenticated
from ..llm.registry import ProviderRegistry
from ..logging_config import setup_logging
from ..store.factory import create_message_store
from .dependencies import get_session, require_identity
from .schemas import HistoryItem, StatusMessage

EXPORT_FILENAME = "chat_export.json"

router = APIRouter()


@router.post("/message", response_model=ChatReply)
async def send_message(
    body: MessageRequest,
    identity: Identity = Depends(require_identity),
    session: ChatSession = Depends(get_session),
) -> ChatReply:
    return await session.handle(body, identity)


@router.get("/history", response_model=list[HistoryItem])
async def get_history(
    identity: Identity = Depends(require_identity),
    session: ChatSession = Depends(get_session),
):
    try:
        messages = await session.history(identity)
    except PersistenceError as e:
        logger.error("Error fetching history for user {}: {}", identity.user_id, e)
        return JSONResponse(status_code=500, content={"message": "Error fetching chat history"})
    return [HistoryItem.from_message(message) for message in messages]


@router.delete("/clear", response_model=StatusMessage)
async def clear_history(
    identity: Identity = Depends(require_identity),
    session: ChatSession = Depends(get_session),
):
    try:
        await session.clear(identity)
    except PersistenceError as e:
        logger.error("Error clearing history for user {}: {}", identity.user_id, e)
        return JSONResponse(status_code=500, content={"message": "Error clearing chat"})
    return StatusMessage(message="Chat cleared successfully")


@router.get("/export")
async def export_history(
    identity: Identity = Depends(require_identity),
    session: ChatSession = Depends(get_session),
):
    try:
        document = await session.export(identity)
    except PersistenceError as e:
        logger.error("Error exporting history for user {}: {}", identity.user_id, e)
        return JSONResponse(status_code=500, content={"message": "Error exporting chat"})
    return Response(
        content=document,
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


def build_session(settings: Settings) -> ChatSession:
    """Wire registry and store from settings."""
    store_kwargs = {"path": settings.db_path} if settings.store_backend == "sqlite" else {}
    return ChatSession(
        registry=ProviderRegistry.from_settings(settings),
        store=create_message_store(settings.store_backend, **store_kwargs),
        timeout=settings.provider_timeout,
        fallback_reply=settings.fallback_reply,
    )


def create_app(
    settings: Settings | None = None,
    *,
    session: ChatSession | None = None,
    auth_gate: AuthGate | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    ``session`` and ``auth_gate`` default to ones built from ``settings``;
    tests pass their own.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    if auth_gate is None:
        if not settings.jwt_secret:
            raise ValueError("CHATRELAY_JWT_SECRET must be set to serve the API")
        auth_gate = JWTAuthGate(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            token_ttl_seconds=settings.token_ttl_seconds,
        )
    session = session or build_session(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await session.store.connect()
        logger.info("Message store ready ({})", session.store.backend_type)
        try:
            yield
        finally:
            await session.store.disconnect()
            await session.registry.close()

    app = FastAPI(title="Chatrelay", version="0.1.0", lifespan=lifespan)
    app.state.session = session
    app.state.auth_gate = auth_gate

    if settings.app_env.lower() in {"dev", "development", "local"}:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(Unauthenticated)
    async def unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"message": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def malformed_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": "Malformed request body"})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    app.include_router(router, prefix="/api/chat")
    return app
