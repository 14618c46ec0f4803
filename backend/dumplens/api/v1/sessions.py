"""Session API endpoints: dump upload, schema retrieval and store queries"""

import logging
from typing import Any, Dict, List

from dumplens.api.deps import get_ingest_service
from dumplens.models.execution import (DumpUploadRequest, IngestResult,
                                       QueryRequest, QueryResponse)
from dumplens.services.ingest_service import IngestService
from fastapi import APIRouter, Depends, status

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


@router.post(
    "/{session}/dump",
    response_model=IngestResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload SQL Dump",
    description="""
Infer a schema from a raw SQL dump and populate the session's SQLite store.

**Accepted input:**
- MySQL / phpMyAdmin exports (`CREATE TABLE` + `INSERT`)
- SQLite dumps
- Bare `INSERT INTO table (cols) VALUES (...)` statements without any DDL

Statements that SQLite rejects are skipped and reported in `execution.failures`;
they never abort the upload. A new upload replaces the session's previous
schema and database.
    """,
    responses={
        400: {"description": "Invalid session identifier"},
        503: {"description": "Session store could not be opened"},
    },
)
async def upload_dump(
    session: str,
    request: DumpUploadRequest,
    service: IngestService = Depends(get_ingest_service),
):
    """Ingest one dump into a session"""
    logger.info("Dump upload for session %s: %s (%d chars)", session, request.file_name, len(request.sql))
    return await service.ingest(session, request.sql, request.file_name)


@router.get(
    "/{session}/schema",
    summary="Get Session Schema",
    description="""
Return the schema extracted from the session's last upload: tables with
typed columns, primary and foreign keys, index names, foreign-key
relationships and extraction metadata.
    """,
    responses={
        200: {"description": "Schema retrieved successfully"},
        404: {
            "description": "Session not initialized",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Session 'abc123' is not initialized: no schema found"
                    }
                }
            },
        },
    },
)
async def get_schema(
    session: str,
    service: IngestService = Depends(get_ingest_service),
):
    """Get the schema artifact for a session"""
    schema = await service.get_schema(session)
    return schema.model_dump(mode="json", by_alias=True)


@router.post(
    "/{session}/query",
    response_model=QueryResponse,
    summary="Execute SQL",
    description="""
Run one SQL statement against the session's store.

Statements starting with `SELECT`, `WITH` or `PRAGMA` return their rows.
Anything else returns a single row with `changes`, `last_insert_id` and
`message`.
    """,
    responses={
        400: {"description": "SQLite rejected the statement"},
        404: {"description": "Session not initialized"},
    },
)
async def run_query(
    session: str,
    request: QueryRequest,
    service: IngestService = Depends(get_ingest_service),
):
    """Execute a statement against a session's store"""
    return await service.query(session, request.sql)


@router.get("/{session}/tables", summary="List Tables")
async def list_tables(
    session: str,
    service: IngestService = Depends(get_ingest_service),
) -> Dict[str, List[str]]:
    """User tables of the session's store, alphabetically"""
    return {"tables": await service.list_tables(session)}


@router.get("/{session}/tables/{name}", summary="Describe Table")
async def describe_table(
    session: str,
    name: str,
    service: IngestService = Depends(get_ingest_service),
) -> Dict[str, Any]:
    """Column descriptors (`PRAGMA table_info`) for one table"""
    return {"table": name, "columns": await service.describe_table(session, name)}
