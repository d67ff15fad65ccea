"""
FastAPI application factory and lifecycle wiring.

Keeps app assembly separate from route/business modules for easier maintenance.
"""

# Standard library
import logging
import os
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

# Third-party
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from core.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from core.providers import configure_providers
from translation.cache import (
    DEFAULT_EVICTION_BATCH,
    DEFAULT_MAX_ENTRIES,
    DEFAULT_SWEEP_INTERVAL_SECONDS,
    TranslationCache,
)

logger = logging.getLogger(__name__)

_DEFAULT_ORIGINS = [
    "http://localhost:5173",  # Vite dev server
    "http://127.0.0.1:5173",
    "http://localhost:3000",  # Next.js / React dev server
    "http://127.0.0.1:3000",
]
_ALLOWED_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
_EXPOSE_HEADERS = ["Content-Disposition", "X-Request-Id"]


def _is_true(name: str, default: str = "false") -> bool:
    """Parse boolean-like env vars."""
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _should_use_fake_providers() -> bool:
    """
    Decide whether the provider registry should use fake providers.

    Rules:
    - TEST_MODE=true -> always fake (test safety)
    - USE_FAKE_PROVIDERS=true -> fake
    """
    return _is_true("TEST_MODE") or _is_true("USE_FAKE_PROVIDERS")


def _load_environment() -> None:
    """Load environment variables from config.env."""
    project_root = os.path.dirname(os.path.dirname(__file__))
    dotenv_path = os.path.join(project_root, "config.env")
    load_dotenv(dotenv_path=dotenv_path)


def _configure_logging() -> None:
    """Configure application logging and key environment visibility."""
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(
        "GOOGLE_TRANSLATE_API_KEY: %s",
        "Loaded" if os.getenv("GOOGLE_TRANSLATE_API_KEY") else "Not Found",
    )
    logger.info("GOOGLE_API_KEY: %s", "Loaded" if os.getenv("GOOGLE_API_KEY") else "Not Found")
    logger.info("TRANSLATION_PROVIDER: %s", os.getenv("TRANSLATION_PROVIDER", "google"))
    logger.info("TEST_MODE: %s", _is_true("TEST_MODE"))
    logger.info("USE_FAKE_PROVIDERS: %s", _should_use_fake_providers())


def _get_cors_origins() -> list[str]:
    """Return CORS origins from env or secure defaults."""
    raw_origins = os.getenv("CORS_ORIGINS", "")
    if raw_origins:
        origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        if origins:
            logger.info("CORS: Using env origins: %s", origins)
            return origins
        logger.warning("CORS_ORIGINS is set but empty after parsing; using defaults")

    logger.info("CORS: Using development origins (set CORS_ORIGINS for production)")
    return list(_DEFAULT_ORIGINS)


def _configure_cors(app: FastAPI) -> None:
    """Attach CORS middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_cors_origins(),
        allow_credentials=True,
        allow_methods=list(_ALLOWED_METHODS),
        allow_headers=["*"],
        expose_headers=list(_EXPOSE_HEADERS),  # For file downloads
    )


def _register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def _register_middlewares(app: FastAPI) -> None:
    """Register middleware components."""

    @app.middleware("http")
    async def request_id_middleware(
        request: Request, call_next
    ) -> Response:
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response


def _register_routers(app: FastAPI) -> None:
    """Register all API routers."""
    from documents.router import router as documents_router

    app.include_router(
        documents_router, prefix="/api/documents", tags=["Document Translation"]
    )


def _build_translation_cache() -> TranslationCache:
    """Create the process-wide translation cache from env settings."""
    cache = TranslationCache(
        max_entries=int(os.getenv("TRANSLATION_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES)),
        eviction_batch=int(os.getenv("TRANSLATION_CACHE_EVICTION_BATCH", DEFAULT_EVICTION_BATCH)),
        sweep_interval=float(
            os.getenv("TRANSLATION_CACHE_SWEEP_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS)
        ),
    )
    logger.info("Translation cache ready (max %s entries)", cache.max_entries)
    return cache


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan hook: provider registry and the shared cache sweeper."""
    logger.info("=== Application Startup ===")
    configure_providers(use_fake=_should_use_fake_providers())
    cache: TranslationCache = app.state.translation_cache
    cache.start_sweeper()
    logger.info("=== All components ready ===")
    try:
        yield
    finally:
        await cache.stop_sweeper()
        logger.info("=== Application Shutdown ===")


async def read_root() -> dict[str, str]:
    """Health check endpoint."""
    return {"message": "Welcome to the Chunked Document Translation API."}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    _load_environment()
    _configure_logging()

    app = FastAPI(
        title="Document Translation API",
        description="Chunked, cached, rate-limit aware document translation",
        version="1.0.0",
        lifespan=app_lifespan,
    )
    app.state.translation_cache = _build_translation_cache()
    _configure_cors(app)
    _register_middlewares(app)
    _register_error_handlers(app)
    _register_routers(app)
    app.add_api_route("/", read_root, methods=["GET"])
    return app
