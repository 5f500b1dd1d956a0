"""
AI Music Studio - FastAPI Application

Main entry point for the backend API.
Provides endpoints for plans and subscriptions, payments, songs, practice
sessions, AI lyrics and plan-based usage quotas.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from music_studio.config.settings import settings
from music_studio.infrastructure.exceptions import (
    MusicStudioError,
    ValidationError,
    NotFoundError,
    InvalidTransitionError,
    PaymentServiceError,
    InvalidSignatureError,
    AIServiceError,
    RateLimitError,
    ConfigurationError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"AI Music Studio backend starting in {settings.environment} mode...")

    if settings.database_url:
        from music_studio.infrastructure.db.database import init_db
        await init_db()
        logger.info("Database connection pool initialized")
    else:
        logger.warning("DATABASE_URL not set, database-backed endpoints will fail")

    if not settings.razorpay_configured:
        logger.warning("Razorpay keys not set, paid plan checkout is disabled")

    yield

    if settings.database_url:
        from music_studio.infrastructure.db.database import close_db
        await close_db()
        logger.info("Database connection pool closed")

    logger.info("AI Music Studio backend shutting down...")


app = FastAPI(
    title="AI Music Studio",
    description="Songs, singing practice and AI lyrics with plan-based quotas",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

def _error_response(status_code: int, exc: MusicStudioError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error_response(404, exc)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _error_response(409, exc)


@app.exception_handler(InvalidSignatureError)
async def invalid_signature_handler(request: Request, exc: InvalidSignatureError):
    return _error_response(400, exc)


@app.exception_handler(PaymentServiceError)
async def payment_error_handler(request: Request, exc: PaymentServiceError):
    """Gateway failures surface as a bad gateway."""
    return _error_response(502, exc)


@app.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
    return JSONResponse(status_code=429, content=exc.to_dict(), headers=headers)


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    return _error_response(502, exc)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc.message}")
    return _error_response(503, exc)


@app.exception_handler(MusicStudioError)
async def general_error_handler(request: Request, exc: MusicStudioError):
    """Handle all other application errors."""
    return _error_response(500, exc)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ai-music-studio"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "AI Music Studio API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from music_studio.api.routes import (  # noqa: E402
    users,
    entitlements,
    subscriptions,
    payments,
    songs,
    practice,
    lyrics,
    music,
)

app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(entitlements.router, prefix="/api", tags=["Entitlements"])
app.include_router(subscriptions.router, prefix="/api", tags=["Subscriptions"])
app.include_router(payments.router, prefix="/api", tags=["Payments"])
app.include_router(songs.router, prefix="/api", tags=["Songs"])
app.include_router(practice.router, prefix="/api", tags=["Practice"])
app.include_router(lyrics.router, prefix="/api", tags=["Lyrics"])
app.include_router(music.router, prefix="/api", tags=["Music"])
