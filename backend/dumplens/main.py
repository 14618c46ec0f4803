"""Main FastAPI application

Copyright (c) 2026 Godfrey Samuel
Licensed under the MIT License - see LICENSE file for details
"""
import logging
import os
import time
from contextlib import asynccontextmanager

import sentry_sdk
from dumplens.api.error_handlers import add_exception_handlers
from dumplens.api.v1.sessions import router as sessions_router
from dumplens.core.config import settings
from dumplens.core.metrics import PrometheusMiddleware, get_metrics_response
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    """Initialize Sentry error tracking if DSN is configured."""
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            # 100% in debug, 10% in production
            traces_sample_rate=1.0 if settings.DEBUG else 0.1,
            send_default_pii=False,
            environment="development" if settings.DEBUG else "production",
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=logging.INFO,  # Capture info and above as breadcrumbs
                    event_level=logging.ERROR  # Send errors and above as events
                ),
            ],
        )
        logger.info("✓ Sentry error tracking initialized")
    else:
        logger.info("Sentry DSN not configured - error tracking disabled")


# Initialize Sentry as early as possible (before FastAPI app creation)
init_sentry()


def validate_environment() -> None:
    """Validate storage settings on startup

    Raises:
        RuntimeError: If the data directory cannot be created or written
    """
    data_path = settings.data_path
    try:
        data_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(f"Cannot create DATA_DIR {data_path}: {e}") from e

    if not os.access(data_path, os.W_OK):
        raise RuntimeError(f"DATA_DIR {data_path} is not writable")

    if settings.STATEMENT_PREVIEW_CHARS < 1:
        raise RuntimeError("STATEMENT_PREVIEW_CHARS must be at least 1")

    logger.info("✓ Environment validation passed (data dir: %s)", data_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager"""
    validate_environment()
    logger.info("✓ dumplens API ready")
    yield
    # Session stores are opened per request, nothing is held open here
    logger.info("✓ Shutdown complete")


app = FastAPI(
    title="dumplens API",
    description="""
## Query any SQL dump

**dumplens turns a raw SQL dump (MySQL export, SQLite dump, or bare INSERT
statements) into an inferred relational schema and a queryable SQLite
database, without requiring well-formed DDL.**

### Workflow

1. `POST /api/v1/sessions/{session}/dump` with `{"file_name": "shop.sql", "sql": "..."}`
2. `GET /api/v1/sessions/{session}/schema` for tables, columns and relationships
3. `POST /api/v1/sessions/{session}/query` with `{"sql": "SELECT ..."}`

Statements SQLite cannot execute are skipped and reported, never fatal.
    """,
    version="1.0.0",
    lifespan=lifespan,
    swagger_ui_parameters={
        "defaultModelsExpandDepth": -1,  # Hide schemas section by default
        "displayRequestDuration": True,
        "tryItOutEnabled": True,
    },
)

# Add custom exception handlers
add_exception_handlers(app)

# Add Prometheus metrics middleware
app.add_middleware(PrometheusMiddleware)

# Request logging middleware (before CORS)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log request method, path, and response status/duration."""
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            "%s %s %s (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            "%s %s ERROR after %.3fs: %s",
            request.method,
            request.url.path,
            process_time,
            e,
            exc_info=True,
        )
        raise

# CORS Configuration
# Supports multiple origins (comma-separated in ALLOWED_ORIGINS env var)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS", "HEAD"],
    allow_headers=["*"] if settings.DEBUG else ["Content-Type", "Accept", "Origin"],
    max_age=3600,  # Cache preflight requests for 1 hour
)


@app.get("/")
async def root():
    return {"name": "dumplens API", "version": "1.0.0"}


@app.get("/health")
async def shallow_health_check():
    """
    Shallow health check to confirm the API is running.
    Returns a 200 OK response without opening any session store.
    """
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.
    Returns metrics in Prometheus text format.
    """
    return get_metrics_response()


app.include_router(sessions_router, prefix="/api/v1", tags=["sessions"])


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
