"""
Event Listing API - Main Application Entry Point

An event-listing and booking service:
- Events are normalized before every write (slug, date, time, lists)
- Bookings are checked against their referenced Event before commit
- Slug uniqueness is enforced by the database and reported as 409
- Structured logging with request correlation, Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.logging import setup_logging, get_logger
from app.core.metrics import metrics_endpoint
from app.api.router import api_router
from app.api.middleware import RequestLoggingMiddleware
from app.db.session import DatabaseProvider
from app.services.cache_service import EventListCache

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: build, connect and dispose the shared handles."""
    setup_logging(settings)
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    app.state.db = DatabaseProvider.from_settings(settings)
    await app.state.db.initialize()

    app.state.cache = EventListCache.from_settings(settings)
    if await app.state.cache.connect():
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await app.state.cache.close()
    await app.state.db.shutdown()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event listings and bookings with write-time normalization",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


_REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def _request_error_to_domain(exc: RequestValidationError) -> ValidationError:
    """Report the first schema error in the same shape as a pre-commit rejection."""
    error = exc.errors()[0]
    # ["body", "tags", 0] -> "tags"
    names = [p for p in error.get("loc", ()) if p not in _REQUEST_LOCATIONS and not isinstance(p, int)]
    message = error.get("msg", "Validation failed").removeprefix("Value error, ")
    return ValidationError(message, field=str(names[0]) if names else None)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    error = _request_error_to_domain(exc)
    get_logger(__name__).info("request_rejected", field=error.field, reason=error.message)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=error.to_dict())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=exc.to_dict())


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=exc.to_dict())


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=exc.to_dict())


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": await request.app.state.cache.stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
