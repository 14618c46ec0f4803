"""Ingest orchestration: upload a dump, then query the session's store."""

import logging
import time
from typing import Any, Dict, List, Optional

from dumplens.adapters.sqlite import SQLiteAdapter
from dumplens.core.exceptions import SchemaNotFoundError
from dumplens.core.metrics import query_duration_seconds, query_requests_total
from dumplens.core.schema_store import SchemaStore, schema_store
from dumplens.models.execution import IngestResult, QueryResponse
from dumplens.models.schema import DatabaseSchema
from dumplens.parsing.base import classify_query
from dumplens.services.execution_driver import ExecutionDriver
from dumplens.services.schema_extractor import extract_schema

logger = logging.getLogger(__name__)


class IngestService:
    """Session-level operations over the schema store and the SQLite adapter"""

    def __init__(self, store: Optional[SchemaStore] = None):
        self.store = store or schema_store

    def adapter_for(self, session: str) -> SQLiteAdapter:
        return SQLiteAdapter(self.store.database_path(session))

    async def ingest(self, session: str, sql_text: str, file_name: str) -> IngestResult:
        """
        Extract the schema of a dump and populate a fresh store from it.

        A new upload replaces the session's previous schema and database
        wholesale. The schema is written last, so a session only reports a
        schema once its store has been populated.
        """
        self.store.session_dir(session)
        schema = extract_schema(sql_text, file_name)

        self.store.reset_session(session)
        driver = ExecutionDriver(self.adapter_for(session))
        tables = schema.tables if schema.metadata.strategy == "inserts" else None
        report = await driver.run(sql_text, tables=tables)

        await self.store.save_async(session, schema)
        logger.info(
            "Session %s initialized from %s: %d table(s), %d statement(s) failed",
            session,
            file_name,
            schema.metadata.total_tables,
            report.failed,
        )
        return IngestResult(
            session=session,
            file_name=file_name,
            schema_metadata=schema.metadata,
            execution=report,
        )

    async def get_schema(self, session: str) -> DatabaseSchema:
        return await self.store.load_async(session)

    def _require_store(self, session: str) -> SQLiteAdapter:
        if not self.store.has_schema(session):
            raise SchemaNotFoundError(session)
        return self.adapter_for(session)

    async def query(self, session: str, sql: str) -> QueryResponse:
        """Run one statement against an initialized session's store."""
        kind = classify_query(sql)
        start_time = time.time()
        status = "error"
        try:
            async with self._require_store(session) as adapter:
                rows = await adapter.execute(sql)
            status = "success"
        finally:
            query_requests_total.labels(kind=kind, status=status).inc()
            query_duration_seconds.labels(kind=kind).observe(time.time() - start_time)

        return QueryResponse(kind=kind, rows=rows, row_count=len(rows))

    async def list_tables(self, session: str) -> List[str]:
        async with self._require_store(session) as adapter:
            return await adapter.list_tables()

    async def describe_table(self, session: str, name: str) -> List[Dict[str, Any]]:
        async with self._require_store(session) as adapter:
            return await adapter.describe_table(name)


ingest_service = IngestService()
