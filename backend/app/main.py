from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.database import close_db, init_db, ping_db
from app.core.exceptions import HostelError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.core.types import utcnow
from app.api.v1.router import api_router
from app.modules.auth.roles import STAFF_ROLES, STUDENT_ROLES
from app.services.registration_sweeper import registration_sweeper


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.SECRET_KEY or settings.SECRET_KEY == "CHANGE_ME":
        errors.append("SECRET_KEY is not set or using default value")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if settings.is_production and settings.DATABASE_URL.startswith("sqlite"):
        warnings.append("SQLite database in production - use PostgreSQL")

    if settings.is_production and not settings.RATE_LIMIT_ENABLED:
        warnings.append("Rate limiting disabled in production")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    await validate_critical_config()

    await init_db()
    logger.info("[Startup] Database tables ready")

    if settings.REGISTRATION_SWEEP_ENABLED:
        await registration_sweeper.start()
        logger.info(
            f"Started registration sweeper - "
            f"Interval: {settings.REGISTRATION_SWEEP_INTERVAL_MINUTES}min, "
            f"TTL: {settings.REGISTRATION_TTL_HOURS}h"
        )
    else:
        logger.info("Registration sweeper disabled")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")

    if registration_sweeper.running:
        await registration_sweeper.stop()

    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Hostel administration backend: registration, payment, invoices and staff access control",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # Prevent 307 redirects that break CORS
)

# Add rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=10 * 1024 * 1024)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


# Exception handlers
@app.exception_handler(HostelError)
async def hostel_error_handler(request: Request, exc: HostelError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.code}] {exc.message}", extra={"http_path": request.url.path})
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc, include_detail=not settings.is_production),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    content = {"success": False, "message": "Internal server error"}
    if not settings.is_production:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    try:
        database = "connected" if await ping_db() else "disconnected"
    except Exception as e:
        logger.warning(f"[Health] Database ping failed: {e}")
        database = "disconnected"

    return {
        "status": "OK" if database == "connected" else "DEGRADED",
        "timestamp": utcnow().isoformat() + "Z",
        "database": database,
        "environment": settings.ENVIRONMENT,
    }


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Service banner"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "roles": {
            "staff": sorted(r.value for r in STAFF_ROLES),
            "students": sorted(r.value for r in STUDENT_ROLES),
        },
        "docs": "/docs",
        "health": "/health",
    }


# Include API router
app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
