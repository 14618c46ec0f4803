"""
Execution driver: populates a store from a dump, one statement at a time.

Statements run strictly in source order and each one succeeds or fails on
its own. There is no transaction around the batch, so a malformed statement
in the middle of a dump costs that statement only; everything before and
after it still lands in the store.
"""

import logging
import time
from typing import Iterable, List, Optional, Sequence

from dumplens.adapters.base import StoreAdapter
from dumplens.adapters.sqlite import quote_identifier
from dumplens.core.config import settings
from dumplens.core.error_utils import (safe_log_warning, statement_preview,
                                       truncate_error_message)
from dumplens.core.exceptions import (QueryError, StatementExecutionFailure,
                                       StoreUnavailableError)
from dumplens.core.metrics import ingest_duration_seconds, statements_total
from dumplens.models.execution import ExecutionReport, StatementOutcome
from dumplens.models.schema import TableSchema
from dumplens.parsing.ddl import DDLStatementParser
from dumplens.parsing.inserts import InsertStatementParser
from dumplens.parsing.normalizer import normalize_statement
from dumplens.parsing.splitter import split_statements

logger = logging.getLogger(__name__)


def synthesize_create_statement(table: TableSchema) -> str:
    """
    Build ``CREATE TABLE IF NOT EXISTS`` for an inferred table.

    Inferred INTEGER and REAL columns keep their type, everything else is
    TEXT. No constraints are declared; the inferred primary key lives in the
    schema artifact only.
    """
    columns = []
    for column in table.columns:
        affinity = column.affinity if column.affinity in ("INTEGER", "REAL") else "TEXT"
        columns.append(f"{quote_identifier(column.name)} {affinity}")
    return (
        f"CREATE TABLE IF NOT EXISTS {quote_identifier(table.name)} "
        f"({', '.join(columns)})"
    )


def synthesize_create_statements(tables: Iterable[TableSchema]) -> List[str]:
    return [synthesize_create_statement(table) for table in tables if table.columns]


class ExecutionDriver:
    """Feeds normalized statements to a store adapter."""

    def __init__(self, adapter: StoreAdapter, preview_chars: Optional[int] = None):
        self.adapter = adapter
        self.preview_chars = (
            settings.STATEMENT_PREVIEW_CHARS if preview_chars is None else preview_chars
        )

    async def run(
        self, sql_text: str, tables: Optional[Sequence[TableSchema]] = None
    ) -> ExecutionReport:
        """
        Execute every statement of a dump against the adapter's store.

        Args:
            sql_text: Raw dump contents
            tables: Tables already inferred from INSERTs, reused for the
                synthesized DDL of a dump without CREATE TABLE statements

        Returns:
            Counts of executed, failed and skipped statements, plus the failures

        Raises:
            StoreUnavailableError: If the store cannot be opened or released
        """
        start_time = time.time()
        report = ExecutionReport()

        has_ddl = DDLStatementParser().matches(sql_text)
        prelude: List[str] = []
        if has_ddl:
            report.strategy = "ddl"
        else:
            inserts = InsertStatementParser()
            if tables is None and inserts.matches(sql_text):
                tables = inserts.extract_tables(sql_text)
            prelude = synthesize_create_statements(tables or [])
            if prelude:
                report.strategy = "inserts"

        await self.adapter.connect()
        try:
            index = 0
            for statement in prelude:
                index += 1
                await self._execute_one(index, statement, report)

            for raw in split_statements(sql_text):
                index += 1
                statement = normalize_statement(raw)
                if not statement:
                    report.skipped += 1
                    statements_total.labels(outcome="skipped").inc()
                    continue
                await self._execute_one(index, statement, report)
        except BaseException:
            try:
                await self.adapter.disconnect()
            except StoreUnavailableError as close_error:
                logger.error("Failed to release store after aborted run: %s", close_error)
            raise
        else:
            await self.adapter.disconnect()
        finally:
            ingest_duration_seconds.observe(time.time() - start_time)

        logger.info(
            "Execution finished: %d executed, %d failed, %d skipped (%s strategy)",
            report.executed,
            report.failed,
            report.skipped,
            report.strategy,
        )
        return report

    async def _execute_one(
        self, index: int, statement: str, report: ExecutionReport
    ) -> None:
        try:
            await self.adapter.execute(statement)
        except QueryError as e:
            failure = StatementExecutionFailure(
                index, statement, truncate_error_message(e)
            )
            preview = statement_preview(statement, self.preview_chars)
            safe_log_warning(
                logger,
                f"Failed to execute statement #{index}: {preview} ({failure.message})",
            )
            report.failed += 1
            report.failures.append(
                StatementOutcome(
                    index=index, preview=preview, ok=False, error=failure.message
                )
            )
            statements_total.labels(outcome="failed").inc()
            return

        report.executed += 1
        statements_total.labels(outcome="executed").inc()
