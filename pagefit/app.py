"""
Application factory - builds the FastAPI app with middleware and routes.

The shared browser, access gate, rate limiter and artifact store are created
here and hung off ``app.state``; routes reach them through dependencies.
"""

import math
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from pagefit import __version__
from pagefit.config import Settings, get_settings
from pagefit.infra.auth import ApiKeyStore, extract_api_key, mask_key
from pagefit.infra.rate_limit import RateLimiter
from pagefit.infra.storage import ArtifactStore
from pagefit.modules.health import router as health_router
from pagefit.modules.render import BrowserEngine, FitEngine
from pagefit.modules.render import router as render_router
from pagefit.modules.render.browser import Launcher
from pagefit.shared.errors import (
    PagefitError,
    PayloadTooLargeError,
    RateLimitedError,
    UnauthorizedError,
)
from pagefit.shared.ids import generate_request_id
from pagefit.shared.logging import (
    clear_request_context,
    get_logger,
    get_request_context,
    set_request_context,
    setup_logging,
)
from pagefit.shared.types import RequestContext

logger = get_logger(__name__)

AUTH_REALM = 'Bearer realm="pagefit"'
BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "DELETE"})


def error_response(exc: PagefitError, headers: dict[str, str] | None = None) -> JSONResponse:
    ctx = get_request_context()
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": exc.to_dict(),
            "request_id": ctx.request_id if ctx else None,
        },
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings: Settings = app.state.settings

    setup_logging(settings.log_level)
    logger.info("Starting pagefit...")

    app.state.artifact_store.ensure_root()
    logger.info(f"Output root: {settings.output_dir}")

    api_keys: ApiKeyStore = app.state.api_keys
    await api_keys.refresh()
    if not api_keys.auth_enabled:
        logger.warning(
            "No API key configured - authentication is DISABLED. "
            "Set API_KEY or provide API_KEYS_FILE."
        )
    elif api_keys.file_in_use:
        logger.info(f"API keys file in use: {settings.api_keys_file}")

    await app.state.browser.start()
    logger.info("pagefit started")

    yield

    logger.info("Shutting down pagefit...")
    await app.state.browser.close()
    logger.info("pagefit stopped")


def build_app(settings: Settings | None = None, launcher: Launcher | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)
        launcher: Optional browser launcher override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="pagefit",
        description="Render HTML to PDF or PNG, fitted to paper",
        version=__version__,
        lifespan=lifespan,
    )

    browser = BrowserEngine(
        launch_args=settings.browser_args,
        load_timeout_ms=settings.load_timeout_ms,
        settle_delay_ms=settings.settle_delay_ms,
        launcher=launcher,
    )
    app.state.settings = settings
    app.state.browser = browser
    app.state.fit_engine = FitEngine(browser)
    app.state.artifact_store = ArtifactStore(settings.output_dir)
    app.state.api_keys = ApiKeyStore(
        keys_file=settings.api_keys_file,
        env_key=settings.api_key,
        reload_interval_ms=settings.api_keys_reload_ms,
    )
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max,
        window_ms=settings.rate_limit_window_ms,
    )

    # Access gate and admission control
    @app.middleware("http")
    async def access_middleware(request: Request, call_next: Any) -> Response:
        """Reject oversized bodies, unknown keys and callers over their rate."""
        limit = settings.max_body_bytes
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            # The server holds the body to its declared length.
            size = int(content_length)
            if size > limit:
                return error_response(PayloadTooLargeError(size, limit))
        elif request.method not in BODYLESS_METHODS:
            # Chunked: count what actually arrives. The cached body is
            # replayed to the route.
            size = len(await request.body())
            if size > limit:
                return error_response(PayloadTooLargeError(size, limit))

        await app.state.api_keys.refresh()
        decision = app.state.api_keys.validate(extract_api_key(request.headers))
        if not decision.valid:
            return error_response(
                UnauthorizedError(), headers={"WWW-Authenticate": AUTH_REALM}
            )

        caller_id = decision.provided or (request.client.host if request.client else None) or "unknown"
        ctx = get_request_context()
        if ctx is not None and decision.provided:
            set_request_context(replace(ctx, auth_id=mask_key(decision.provided)))

        rate = app.state.rate_limiter.hit(caller_id)
        reset_seconds = math.ceil(rate.reset_ms / 1000)
        rate_headers = {
            "X-RateLimit-Limit": str(settings.rate_limit_max),
            "X-RateLimit-Remaining": str(rate.remaining),
            "X-RateLimit-Reset": str(reset_seconds),
        }
        if rate.limited:
            return error_response(
                RateLimitedError(reset_seconds),
                headers={**rate_headers, "Retry-After": str(reset_seconds)},
            )

        response = await call_next(request)
        response.headers.update(rate_headers)
        return response

    # Request context middleware (outermost)
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging and tracing."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID", generate_request_id()),
        )
        set_request_context(ctx)

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                # Built here so the error body still carries the request id.
                logger.exception(f"Error in {request.method} {request.url.path}")
                response = error_response(PagefitError(str(e) or e.__class__.__name__))
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        finally:
            clear_request_context()

    @app.exception_handler(PagefitError)
    async def pagefit_error_handler(request: Request, exc: PagefitError) -> JSONResponse:
        """Handle PagefitError with consistent JSON response."""
        if exc.http_status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return error_response(exc)

    # Register routers
    app.include_router(health_router, tags=["health"])
    app.include_router(render_router)

    # Root endpoint
    @app.get("/")
    async def root() -> dict[str, str]:
        return {"service": "pagefit", "version": __version__}

    return app
