"""
HTML to PDF Service - FastAPI application for PDF generation.

Provides an endpoint that renders submitted HTML in headless Chromium
(via Playwright) and streams back the printed PDF, plus health and
liveness endpoints for container orchestration.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from io import BytesIO
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from . import __version__
from .config import get_settings, validate_config_on_startup
from .keepalive import KeepAlive
from .logger import get_logger, setup_logging
from .models import (
    HealthResponse,
    IndexResponse,
    MemoryUsage,
    PingResponse,
    RenderPDFRequest,
)
from .pdf_helpers import sanitize_filename
from .process_stats import memory_usage, uptime_seconds
from .renderer import RenderError, RenderTimeoutError, render_pdf, validate_browser

settings = get_settings()

setup_logging(settings.log_level, settings.log_format)
logger = get_logger(__name__)

# Semaphore for rate limiting
_pdf_semaphore = asyncio.Semaphore(settings.max_concurrent_pdfs)

# Browser readiness state (None until the startup probe has run)
_browser_ready: Optional[bool] = None
_browser_error: Optional[str] = None

_keepalive = KeepAlive(settings.keepalive_interval_seconds)


# ============================================================================
# Lifespan - Validate config and browser, run keep-alive
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: validate configuration, probe Chromium, start the heartbeat.
    Shutdown (SIGTERM/SIGINT via uvicorn): stop the heartbeat and log the close.
    """
    global _browser_ready, _browser_error

    validate_config_on_startup()

    if settings.validate_browser_on_startup:
        logger.info("PDF Service starting - validating Playwright installation...")
        try:
            probe_size = await validate_browser(settings)
            _browser_ready = True
            _browser_error = None
            logger.info(f"✅ Playwright validation successful - generated {probe_size} byte test PDF")
        except Exception as e:
            _browser_ready = False
            _browser_error = str(e)
            logger.error(f"❌ Playwright validation failed: {_browser_error}")
            logger.error("PDF generation will not work until this is resolved.")

    _keepalive.start()
    logger.info(f"✅ PDF Service listening on {settings.host}:{settings.port}")

    yield

    logger.info("🛑 Shutdown requested, closing server...")
    await _keepalive.stop()
    logger.info("🛑 Server closed cleanly")


app = FastAPI(
    title="HTML to PDF Service",
    version=__version__,
    description="Render HTML documents to PDF using Playwright/Chromium",
    lifespan=lifespan,
)


# ============================================================================
# Middleware
# ============================================================================

class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than max_body_bytes with 413.

    A declared Content-Length over the limit is refused before the app runs.
    Bodies without one (chunked transfer) are counted as they stream in and
    the request fails as soon as the running total passes the limit.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    def _too_large_detail(self) -> str:
        return f"Request body too large (limit {self.max_body_bytes} bytes)"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            logger.warning(
                f"Rejected {scope['method']} {path}: body of {content_length} bytes "
                f"exceeds limit of {self.max_body_bytes}"
            )
            response = JSONResponse(status_code=413, content={"detail": self._too_large_detail()})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning(
                        f"Rejected {scope['method']} {path}: streamed body exceeds "
                        f"limit of {self.max_body_bytes}"
                    )
                    # Surfaces from the route's body read and is rendered by FastAPI as a 413
                    raise HTTPException(status_code=413, detail=self._too_large_detail())
            return message

        await self.app(scope, limited_receive, send)


# Registered before the logging middleware so it sits closer to the routes
app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its client address."""
    client_ip = request.client.host if request.client else "unknown"
    logger.info(f"🌐 {request.method} {request.url.path} from {client_ip}")
    if settings.log_request_headers:
        logger.debug(f"🌐 Headers: {dict(request.headers)}")
    return await call_next(request)


# ============================================================================
# Info & Health Endpoints
# ============================================================================

def _active_renders() -> int:
    return settings.max_concurrent_pdfs - _pdf_semaphore._value


@app.get("/", response_model=IndexResponse)
async def index() -> IndexResponse:
    """Describe the service and list its endpoints."""
    return IndexResponse(
        message="HTML to PDF service running",
        version=__version__,
        endpoints={
            "health": "/health",
            "test": "/test",
            "generate_pdf": "/generate-pdf",
        },
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns uptime, memory, capacity information and browser readiness.
    Returns HTTP 503 if the startup browser probe failed.
    """
    memory = memory_usage()
    uptime = uptime_seconds()
    logger.debug(f"Health check: uptime={uptime}s rss={memory['rss']}")

    if _browser_ready is False:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "uptime": uptime,
                "memory": memory,
                "active_renders": _active_renders(),
                "max_concurrent": settings.max_concurrent_pdfs,
                "browser_ready": False,
                "browser_error": _browser_error,
                "message": "PDF service is unhealthy - Playwright/Chromium not available",
            },
        )

    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        uptime=uptime,
        memory=MemoryUsage(**memory),
        active_renders=_active_renders(),
        max_concurrent=settings.max_concurrent_pdfs,
        browser_ready=_browser_ready,
        browser_error=None,
    )


@app.get("/test", response_model=PingResponse)
async def test_endpoint() -> PingResponse:
    """Lightweight liveness check that never touches the browser."""
    return PingResponse(
        timestamp=datetime.now(timezone.utc),
        uptime=uptime_seconds(),
    )


# ============================================================================
# PDF Generation Endpoint
# ============================================================================

@app.post("/generate-pdf")
@app.post("/render-pdf")
async def generate_pdf(request: RenderPDFRequest):
    """
    HTML to PDF endpoint.

    Renders the HTML in a fresh Chromium instance. Without an explicit
    height (or paper format) the page is sized to the rendered body.

    Args:
        request: HTML content, CSS, and page settings

    Returns:
        StreamingResponse with PDF binary data

    Raises:
        HTTPException: 400 for invalid input, 500 for rendering failures, 503 for overload
    """
    if not request.html or not request.html.strip():
        raise HTTPException(status_code=400, detail="HTML content is required")

    request_id = uuid.uuid4().hex
    req_logger = get_logger(__name__, request_id=request_id)

    # Check capacity
    if _pdf_semaphore._value <= 0:
        req_logger.warning("PDF service overloaded, rejecting request")
        raise HTTPException(
            status_code=503,
            detail="Service overloaded. Too many concurrent PDF operations."
        )

    async with _pdf_semaphore:
        req_logger.info(f"Starting PDF render ({len(request.html)} chars of HTML)")
        try:
            result = await render_pdf(request, settings, req_logger)
        except RenderTimeoutError as e:
            req_logger.error(f"PDF rendering timed out: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        except RenderError as e:
            req_logger.error(f"PDF rendering failed: {e}")
            raise HTTPException(status_code=500, detail=f"Rendering failed: {e}")

    filename = sanitize_filename(request.filename) if request.filename else "document.pdf"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Request-ID": request_id,
    }
    if result.paper_format:
        headers["X-Paper-Format"] = result.paper_format
    if result.page_width:
        headers["X-Page-Width"] = result.page_width
    if result.page_height:
        headers["X-Page-Height"] = result.page_height

    req_logger.info(f"PDF render completed: {filename}")

    return StreamingResponse(
        BytesIO(result.pdf),
        media_type="application/pdf",
        headers=headers,
    )
