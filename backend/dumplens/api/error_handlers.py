"""Global exception handlers for the FastAPI application."""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from dumplens.core.exceptions import (
    DumpLensError,
    InvalidSessionError,
    QueryError,
    SchemaNotFoundError,
    StoreUnavailableError,
)


async def dumplens_error_handler(request: Request, exc: DumpLensError):
    """Base handler for application-specific errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def schema_not_found_error_handler(request: Request, exc: SchemaNotFoundError):
    """Handler for sessions that have not uploaded a dump yet."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


async def store_unavailable_error_handler(
    request: Request, exc: StoreUnavailableError
):
    """Handler for stores that cannot be opened or released."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Store unavailable: {exc}"},
    )


async def query_error_handler(request: Request, exc: QueryError):
    """Handler for statements rejected by the store."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Invalid Query: {exc.message}"},
    )


async def invalid_session_error_handler(request: Request, exc: InvalidSessionError):
    """Handler for malformed session identifiers."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Invalid Session: {exc}"},
    )


def add_exception_handlers(app):
    """Add all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(DumpLensError, dumplens_error_handler)
    app.add_exception_handler(SchemaNotFoundError, schema_not_found_error_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_error_handler)
    app.add_exception_handler(QueryError, query_error_handler)
    app.add_exception_handler(InvalidSessionError, invalid_session_error_handler)
