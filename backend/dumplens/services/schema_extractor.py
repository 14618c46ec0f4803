"""Schema extraction: picks a parser for the dump and assembles the schema."""

import logging
from typing import List, Optional, Sequence

from dumplens.core.metrics import schemas_extracted_total
from dumplens.models.schema import DatabaseSchema, SchemaMetadata
from dumplens.parsing.base import GenericStatementParser, StatementParser
from dumplens.parsing.ddl import DDLStatementParser
from dumplens.parsing.inserts import InsertStatementParser
from dumplens.parsing.relationships import resolve_relationships

logger = logging.getLogger(__name__)

# Order matters: DDL wins whenever any CREATE TABLE is present
DEFAULT_PARSERS: List[StatementParser] = [
    DDLStatementParser(),
    InsertStatementParser(),
    GenericStatementParser(),
]


def select_parser(
    sql_text: str, parsers: Optional[Sequence[StatementParser]] = None
) -> StatementParser:
    """First parser whose ``matches`` accepts the dump."""
    for parser in parsers or DEFAULT_PARSERS:
        if parser.matches(sql_text):
            return parser
    return GenericStatementParser()


def extract_schema(sql_text: str, file_name: str) -> DatabaseSchema:
    """
    Infer a DatabaseSchema from raw dump text.

    Never raises on malformed input: unreadable statements are skipped by
    the parsers and an unrecognisable dump yields an empty schema.

    Args:
        sql_text: Raw dump contents
        file_name: Display name recorded in the schema metadata

    Returns:
        Schema with tables in source order and one edge per foreign key
    """
    parser = select_parser(sql_text)
    tables = parser.extract_tables(sql_text)
    relationships = resolve_relationships(tables)

    schemas_extracted_total.labels(strategy=parser.strategy).inc()
    logger.info(
        "Extracted %d table(s), %d relationship(s) from %s using %s strategy",
        len(tables),
        len(relationships),
        file_name,
        parser.strategy,
    )

    return DatabaseSchema(
        tables=tables,
        relationships=relationships,
        metadata=SchemaMetadata(
            file_name=file_name,
            total_tables=len(tables),
            strategy=parser.strategy,
        ),
    )
