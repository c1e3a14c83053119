"""FastAPI application entry point."""
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from certverify.config import get_settings, get_version
from certverify.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from certverify.api.routes import auth, admin, certificates, views


# Configure logging - force INFO level even if uvicorn configured it already
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Explicitly set root logger level to ensure INFO logs are visible
logging.getLogger().setLevel(logging.INFO)

# Silence SQLAlchemy query logging (too verbose)
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)

# Silence passlib bcrypt version warning (known compatibility issue with bcrypt 4.x)
logging.getLogger('passlib.handlers.bcrypt').setLevel(logging.ERROR)

settings = get_settings()
logger = logging.getLogger(__name__)

START_TIME = time.monotonic()


async def bootstrap_admin() -> None:
    """
    Create the initial super admin from ADMIN_* settings.

    Only runs if NO admin accounts exist (prevents accidental password resets).
    """
    from certverify.database import AsyncSessionLocal
    from certverify.models.admin import AdminRole
    from certverify.services.auth_service import AuthService

    async with AsyncSessionLocal() as session:
        auth_service = AuthService(session)
        if await auth_service.any_admin_exists():
            logger.info("  Admin bootstrap: Skipped (admin accounts already exist)")
            return

        logger.info("  Admin bootstrap: No admins found, creating initial super admin...")
        await auth_service.create_admin(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL or f"{settings.ADMIN_USERNAME}@localhost.localdomain",
            password=settings.ADMIN_PASSWORD,
            full_name=settings.ADMIN_FULL_NAME,
            role=AdminRole.SUPER_ADMIN,
            created_by="bootstrap"
        )
        logger.info("  Admin bootstrap: Created super admin %s", settings.ADMIN_USERNAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Certificate Verification API %s starting...", get_version())
    logger.info("  Environment: %s", settings.ENVIRONMENT.upper())
    logger.info("  Database: %s", settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured')
    logger.info("  Access token expiry: %d minutes", settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    logger.info("  Rate limiting: %s", "enabled" if settings.RATE_LIMIT_ENABLED else "disabled")

    if settings.SECRET_KEY == "change-me" and settings.ENVIRONMENT == "production":
        logger.warning("  SECRET_KEY is set to the default value; set a real secret in production")

    if settings.is_sqlite:
        # Local development database; PostgreSQL schemas are managed by Alembic
        from certverify.database import engine, Base
        import certverify.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("  Database schema: Ensured (SQLite)")

    if settings.ADMIN_USERNAME and settings.ADMIN_PASSWORD:
        try:
            await bootstrap_admin()
        except Exception as e:
            logger.error("  Admin bootstrap: Failed - %s", e)
            # Don't fail startup if admin creation fails
    else:
        logger.info("  Admin bootstrap: Skipped (ADMIN_USERNAME not configured)")

    yield  # Application runs

    # Shutdown
    logger.info("Certificate Verification API shutting down...")


# Create FastAPI application
app = FastAPI(
    title="Certificate Verification API",
    description="Public certificate verification and admin certificate management",
    version=get_version().lstrip("v"),
    docs_url="/api/docs" if settings.DEBUG else None,  # Disable docs in production
    redoc_url="/api/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],  # Restrict methods
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of each request."""
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000
    )
    return response


# Mount static files
static_path = Path(__file__).parent.parent.parent / "frontend" / "static"
if static_path.exists():
    app.mount("/static", StaticFiles(directory=str(static_path)), name="static")


# Include API routers
app.include_router(certificates.router)
app.include_router(auth.router)
app.include_router(admin.router)

# Include view routes (HTML pages)
app.include_router(views.router)


# Health check endpoint
@app.get("/health")
@limiter.exempt
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - START_TIME, 3),
        "version": get_version(),
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reshape request validation errors into a 400 with per-field messages."""
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(location) or None,
            "message": error.get("msg", "Invalid value").removeprefix("Value error, "),
        })
    return JSONResponse(
        status_code=400,
        content={"error": "Validation Failed", "details": details}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.DEBUG:
        # In debug mode, show the error details
        import traceback
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "traceback": traceback.format_exc()
            }
        )
    else:
        # In production, return a generic error
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )
