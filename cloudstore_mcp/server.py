"""FastAPI HTTP transport for the content store MCP server.

The app is built by ``create_app`` around an already constructed
dispatcher; nothing here creates backends or reads global state.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from . import __version__
from .api.deps import get_dispatcher, require_bearer_token, sanitize_error_message
from .config import Settings
from .mcp import INVALID_REQUEST, JsonRpcError, McpDispatcher, jsonrpc_error
from .mcp.jsonrpc import parse_message
from .middleware import SecurityHeadersMiddleware
from .models import HealthResponse
from .models.store import utcnow

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


# ============ SSE HEARTBEAT ============


def sse_event(event: str, data: dict[str, Any]) -> str:
    """Format one Server-Sent Event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def heartbeat_events(
    interval: float,
    *,
    limit: int | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> AsyncGenerator[str, None]:
    """
    Yield keep-alive events every ``interval`` seconds.

    The stream carries no tool traffic. It opens with a ``ready`` event
    and then emits ``heartbeat`` events until the client disconnects or
    ``limit`` heartbeats have been sent.
    """
    yield sse_event("ready", {"type": "ready", "server": "cloudstore-mcp"})
    sent = 0
    while limit is None or sent < limit:
        await sleep(interval)
        sent += 1
        yield sse_event(
            "heartbeat",
            {"type": "heartbeat", "seq": sent, "timestamp": utcnow().isoformat()},
        )


# ============ APPLICATION FACTORY ============


def create_app(dispatcher: McpDispatcher, settings: Settings) -> FastAPI:
    """Build the HTTP application around ``dispatcher``.

    Args:
        dispatcher: Shared dispatcher (owns the backends via its context)
        settings: Transport settings (auth token, CORS, limits, heartbeat)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        logger.info(f"Starting cloudstore MCP server v{__version__} (http)")

        if not settings.debug and settings.cors_allowed_origins == "*":
            logger.warning(
                "SECURITY WARNING: CORS is configured to allow all origins ('*'). "
                "Set CORS_ALLOWED_ORIGINS to specific domains in production."
            )
        if not settings.auth_token:
            logger.warning("AUTH_TOKEN is not set; POST endpoints accept any caller")

        yield
        await dispatcher.ctx.store.aclose()
        await dispatcher.ctx.analyzer.aclose()

    app = FastAPI(
        title="Cloudstore MCP Server",
        description="JSON-RPC MCP endpoint over a hierarchical content store",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher
    app.state.settings = settings

    app.add_middleware(SecurityHeadersMiddleware, hsts=not settings.debug)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # ============ EXCEPTION HANDLERS ============

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with consistent response format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with sanitized error messages."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": sanitize_error_message(exc)},
        )

    # ============ HEALTH ENDPOINTS ============

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint (lightweight liveness check)."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=utcnow(),
            backend="remote" if settings.use_remote_backend else "memory",
            tools=len(dispatcher.registry),
        )

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Cloudstore MCP Server",
            "version": __version__,
            "rpc": "/rpc",
            "events": "/events",
            "health": "/health",
        }

    # ============ JSON-RPC ENDPOINTS ============

    async def rpc_endpoint(
        request: Request,
        active: McpDispatcher = Depends(get_dispatcher),
    ) -> Response:
        """
        Handle one JSON-RPC message (single request or batch array).

        Notifications produce 202 with no body. Malformed JSON yields 400
        with a JSON-RPC parse error body.
        """
        body = await request.body()
        if len(body) > settings.max_json_payload_size:
            return JSONResponse(
                status_code=413,
                content=jsonrpc_error(
                    None,
                    INVALID_REQUEST,
                    f"Payload too large. Maximum size: {settings.max_json_payload_size} bytes",
                ),
            )

        try:
            payload = parse_message(body)
        except JsonRpcError as e:
            logger.info(f"Rejected malformed JSON-RPC body: {e.message}")
            return JSONResponse(status_code=400, content=jsonrpc_error(None, e.code, e.message))

        response = await active.handle_payload(payload)
        if response is None:
            return Response(status_code=202)
        return JSONResponse(content=jsonable_encoder(response))

    for rpc_path in ("/rpc", "/mcp", "/"):
        app.add_api_route(
            rpc_path,
            rpc_endpoint,
            methods=["POST"],
            dependencies=[Depends(require_bearer_token)],
            tags=["MCP"],
        )

    # ============ SSE ENDPOINTS ============

    async def events_endpoint() -> StreamingResponse:
        """Keep-alive event stream; carries no tool traffic."""
        return StreamingResponse(
            heartbeat_events(settings.heartbeat_interval_seconds),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    for events_path in ("/events", "/sse"):
        app.add_api_route(events_path, events_endpoint, methods=["GET"], tags=["SSE"])

    return app


# ============ MAIN ============


def run_http(dispatcher: McpDispatcher, settings: Settings) -> None:
    """Serve ``dispatcher`` over HTTP with uvicorn until interrupted."""
    import uvicorn

    app = create_app(dispatcher, settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
