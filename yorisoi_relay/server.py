"""
FastAPI server for the Yorisoi Relay service.

This module implements the HTTP API: the chat endpoint that relays a message
through scoring, the safety check, the completion service and speech
synthesis, plus read-only access to the sentiment score history as JSON and as
a Server-Sent Events stream.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel, Field

from .config import Settings
from .gateways import CompletionGateway, SpeechGateway, create_http_client
from .lexicon import Lexicon, load_lexicon
from .models import ChatReply, ScorePoint
from .orchestrator import ChatOrchestrator
from .store import SentimentStore

logger = logging.getLogger(__name__)


# API Request/Response Schemas
class ChatRequest(BaseModel):
    """Payload for chat requests."""

    message: str = Field("", description="The user's message")


class ErrorResponse(BaseModel):
    """Body returned for failed requests."""

    error: str = Field(..., description="Error code")


async def _read_body(request: Request, max_bytes: int) -> bytes | None:
    """Read the request body in chunks, returning None once it exceeds max_bytes."""
    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > max_bytes:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def _parse_chat_request(body: bytes) -> ChatRequest:
    """Read the message from a request body, treating anything unusable as empty."""
    try:
        data = json.loads(body) if body else {}
    except (ValueError, UnicodeDecodeError):
        data = {}
    message = data.get("message") if isinstance(data, dict) else None
    return ChatRequest(message=message if isinstance(message, str) else "")


def build_orchestrator(
    settings: Settings,
    lexicon: Lexicon,
    store: SentimentStore,
    client: httpx.AsyncClient,
) -> ChatOrchestrator:
    """Wire the gateways for the configured provider into an orchestrator."""
    completion = CompletionGateway(
        client,
        settings.openai_api_key,
        model=settings.chat_model,
        max_tokens=settings.max_output_tokens,
    )
    speech = SpeechGateway(
        client,
        settings.openai_api_key,
        model=settings.tts_model,
        voice=settings.tts_voice,
    )
    return ChatOrchestrator(lexicon, store, completion, speech)


def create_app(
    settings: Settings | None = None,
    store: SentimentStore | None = None,
    orchestrator: ChatOrchestrator | None = None,
) -> FastAPI:
    """
    Create a FastAPI application.

    The ICF tag resource is loaded here, so a missing or malformed file raises
    ``LexiconError`` and the application is never created.

    Args:
        settings: Configuration, read from the environment when omitted
        store: The SentimentStore to use, created from settings when omitted
        orchestrator: Message handler, wired to the real gateways when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()
    http_client: httpx.AsyncClient | None = None

    if orchestrator is None:
        lexicon = load_lexicon(settings.icf_tags_path)
        if store is None:
            store = SentimentStore(
                lexicon,
                initial_score=settings.initial_score,
                history_limit=settings.history_limit,
            )
        http_client = create_http_client(settings)
        orchestrator = build_orchestrator(settings, lexicon, store, http_client)
    else:
        store = orchestrator.store

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        yield
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(
        title="Yorisoi Relay",
        description="An empathetic voice chat relay",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > settings.max_body_bytes:
                return JSONResponse(status_code=413, content={"error": "payload_too_large"})
        return await call_next(request)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Liveness endpoint."""
        return "yorisoi-voice-ai server is running."

    @app.post(
        "/api/chat",
        response_model=ChatReply,
        responses={500: {"model": ErrorResponse}},
    )
    async def chat(request: Request) -> ChatReply | JSONResponse:
        """
        Reply to a user message with text, speech audio and analysis metadata.

        A missing or unreadable body is handled as an empty message. Any
        failure, including upstream service errors, yields a generic 500.
        """
        try:
            body = await _read_body(request, settings.max_body_bytes)
            if body is None:
                return JSONResponse(status_code=413, content={"error": "payload_too_large"})
            chat_request = _parse_chat_request(body)
            return await orchestrator.handle(chat_request.message)
        except Exception:
            logger.exception("Failed to handle chat message")
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error="server_error").model_dump(),
            )

    @app.get("/api/emotion-history")
    async def emotion_history() -> list[ScorePoint]:
        """
        Get the recorded sentiment score history.

        Returns:
            Score points, oldest first
        """
        return await store.history()

    @app.get("/api/emotion-history/stream")
    async def stream_emotion() -> StreamingResponse:
        """
        Stream sentiment score updates via Server-Sent Events.

        The current score is sent immediately upon connection, followed by
        one event per scored message.

        Returns:
            StreamingResponse with text/event-stream content type
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for score updates."""
            try:
                async with store.stream() as score_stream:
                    async for point in score_stream:
                        yield f"data: {point.model_dump_json()}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception:
                logger.exception("Score stream failed")
                error_data = json.dumps({"error": "server_error"})
                yield f"event: error\ndata: {error_data}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    return app


# Default app instance used by uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "yorisoi_relay.server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
