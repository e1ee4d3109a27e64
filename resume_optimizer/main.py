"""FastAPI application bootstrap."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from resume_optimizer import __version__
from resume_optimizer.config import settings
from resume_optimizer.api.routes import legacy_router, router
from resume_optimizer.database.connection import init_db, close_db
from resume_optimizer.services.http_transport import TransportProvider
from resume_optimizer.utils.errors import AppError, BackendExhaustedError, ConfigurationError
from resume_optimizer.utils.logging import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Initialize Sentry if DSN provided
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=settings.environment,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting ATS Resume Optimizer application")

    try:
        await init_db()

        # Transport is bound lazily on the first outbound request
        app.state.transport_provider = TransportProvider(settings.http_transport)

        if not settings.ai_configured:
            logger.warning("GEMINI_API_KEY not set, resume optimization is disabled")

        logger.info("Application startup complete")

    except Exception as e:
        logger.error(f"Failed to start application: {e}", extra={"error": str(e)})
        raise

    yield

    logger.info("Shutting down ATS Resume Optimizer application")
    await app.state.transport_provider.aclose()
    await close_db()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="ATS Resume Optimizer API",
    description="Profiles, templates and AI-tailored resumes",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": False, "error": message, "code": code, **extra}),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Operational errors raised by controllers."""
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"code": exc.code, "path": request.url.path})
    return _error_response(exc.status_code, exc.message, exc.code or "APP_ERROR")


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"AI service not configured: {exc}", extra={"path": request.url.path})
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "AI service is not configured",
        "AI_API_KEY_MISSING",
    )


@app.exception_handler(BackendExhaustedError)
async def backend_exhausted_handler(request: Request, exc: BackendExhaustedError):
    logger.error(
        str(exc),
        extra={"attempts": exc.attempts, "error": str(exc.last_error), "path": request.url.path},
    )
    return _error_response(
        status.HTTP_502_BAD_GATEWAY,
        f"Failed to optimize resume: {exc}",
        "AI_API_FAILED",
        attempts=exc.attempts,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "VALIDATION_ERROR",
        details=exc.errors(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "error": str(exc),
            "path": request.url.path,
            "method": request.method
        },
        exc_info=True
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "INTERNAL_ERROR",
        message="An unexpected error occurred",
    )


app.include_router(router, prefix="/api/v1")
app.include_router(legacy_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "ATS Resume Optimizer",
        "version": __version__,
        "status": "running"
    }
