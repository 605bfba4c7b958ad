"""
Keyword Strategy Service - FastAPI Application
==============================================
Main entry point for the API server.
Handles logging, middleware setup, error mapping and router registration.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel

from keyword_strategy.app.core.config import get_settings
from keyword_strategy.app.api.v1 import api_router
from keyword_strategy.services.llm_service import (
    LLMError,
    MissingCredentialError,
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderError,
    EmptyResponseError,
    ResponseFormatError,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str
    environment: str
    llm_configured: bool


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    code: str | None = None
    detail: str | None = None
    path: str | None = None
    timestamp: str


# Most specific first: subclasses must precede ProviderError
ERROR_MESSAGES: list[tuple[type[LLMError], str, str]] = [
    (MissingCredentialError, "missing_credential", "کلید API تنظیم نشده است. لطفا کلید API خود را بررسی کنید."),
    (ProviderAuthError, "provider_auth", "کلید API معتبر نیست یا دسترسی ندارد. لطفا کلید API خود را بررسی کنید."),
    (ProviderRateLimitError, "provider_rate_limit", "سهمیه سرویس هوش مصنوعی تمام شده است. لطفا کمی بعد دوباره تلاش کنید."),
    (ProviderError, "provider_error", "ارتباط با سرویس هوش مصنوعی برقرار نشد. لطفا دوباره تلاش کنید."),
    (EmptyResponseError, "empty_response", "پاسخی از سرویس هوش مصنوعی دریافت نشد. لطفا دوباره تلاش کنید."),
    (ResponseFormatError, "response_format", "پاسخ دریافتی از هوش مصنوعی قابل پردازش نبود. لطفا دوباره تلاش کنید."),
]

FALLBACK_MESSAGE = "مشکلی پیش آمد. لطفا کلید API خود را بررسی کنید."


def describe_llm_error(exc: LLMError) -> tuple[str, str]:
    """Return (error code, localized user message) for a generation error."""
    for error_type, code, message in ERROR_MESSAGES:
        if isinstance(exc, error_type):
            return code, message
    return "generation_error", FALLBACK_MESSAGE


def configure_logging(level: str) -> None:
    """Configure the root logger once with a timestamped console handler."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


# =============================================================================
# LIFESPAN MANAGER
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    settings = get_settings()

    # === STARTUP ===
    logger.info(f"[START] Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"[ENV] Environment: {settings.environment}, debug={settings.debug}")
    if settings.llm_configured:
        logger.info(f"[OK] Gemini configured, model={settings.strategy_model}")
    else:
        logger.warning("[WARN] GOOGLE_API_KEY not set; generation requests will fail")

    yield

    # === SHUTDOWN ===
    logger.info("[STOP] Shutting down application")


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_application() -> FastAPI:
    """
    Application factory function.
    Creates and configures the FastAPI application.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Keyword research and content strategy generation backed by Gemini. "
            "Returns validated keyword analyses plus table and tree views."
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # =========================================================================
    # CORS MIDDLEWARE
    # =========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time"],
    )

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(LLMError)
    async def llm_exception_handler(request: Request, exc: LLMError) -> JSONResponse:
        """Map generation errors to localized responses."""
        code, message = describe_llm_error(exc)
        logger.warning(f"Strategy generation failed [{code}]: {exc.message}")

        # Provider text is safe to show only in debug; parser internals never are
        detail = exc.message if settings.debug else None

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=message,
                code=code,
                detail=detail,
                path=str(request.url.path),
                timestamp=datetime.now(timezone.utc).isoformat(),
            ).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                error="Validation Error",
                code="validation_error",
                detail=str(exc.errors()),
                path=str(request.url.path),
                timestamp=datetime.now(timezone.utc).isoformat(),
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle all unhandled exceptions."""
        logger.exception(f"Unhandled exception: {exc}")

        # Don't expose internal errors in production
        detail = str(exc) if settings.debug else "Internal server error"

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal Server Error",
                detail=detail,
                path=str(request.url.path),
                timestamp=datetime.now(timezone.utc).isoformat(),
            ).model_dump(),
        )

    # =========================================================================
    # MIDDLEWARE - Request Timing
    # =========================================================================

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time to response headers."""
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get(
        "/",
        tags=["Root"],
        summary="API Root",
        response_model=dict[str, Any]
    )
    async def root() -> dict[str, Any]:
        """
        API root endpoint.
        Returns basic API information and available endpoints.
        """
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs" if settings.debug else None,
            "health": "/health",
            "api": f"{settings.api_v1_prefix}",
        }

    @app.get(
        "/health",
        tags=["Health"],
        summary="Health Check",
        response_model=HealthResponse
    )
    async def health_check() -> HealthResponse:
        """
        Health check endpoint.
        Does not call the provider.
        """
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=settings.app_version,
            environment=settings.environment,
            llm_configured=settings.llm_configured,
        )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(
        api_router,
        prefix=settings.api_v1_prefix,
    )

    return app


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = create_application()


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "keyword_strategy.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
