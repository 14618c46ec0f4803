"""
Schema inference from INSERT statements, for dumps without any DDL.

The first ``INSERT INTO table (cols) VALUES (...)`` seen for a table decides
its columns and their types; later INSERTs for the same table are ignored.
Type inference therefore depends entirely on the shape of that first row.
"""

import logging
import re
from typing import List, Optional, Tuple

from dumplens.core.exceptions import ParseAmbiguity
from dumplens.models.schema import Affinity, ColumnSchema, TableSchema
from dumplens.parsing.base import (StatementKind, StatementParser,
                                   has_statement, statements_of_kind)
from dumplens.parsing.ddl import QUALIFIED_IDENT
from dumplens.parsing.splitter import (find_closing_paren, split_top_level,
                                       unquote_identifier)

logger = logging.getLogger(__name__)

_INSERT_HEAD_RE = re.compile(
    rf"\bINSERT\s+(?:IGNORE\s+)?INTO\s+(?P<table>{QUALIFIED_IDENT})\s*\(",
    re.IGNORECASE,
)
_VALUES_RE = re.compile(r"\s*VALUES\s*\(", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def _unquote_value(raw: str) -> Tuple[str, bool]:
    """Return (value, was_quoted) for one SQL literal."""
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        quote = raw[0]
        return raw[1:-1].replace(quote * 2, quote), True
    return raw, False


def infer_column(name: str, position: int, sample: Optional[str]) -> ColumnSchema:
    """
    Infer one column from its name, position and sampled literal.

    Args:
        name: Column name from the INSERT column list
        position: Zero-based position in the column list
        sample: Raw literal from the first VALUES row, None when missing

    Returns:
        Nullable ColumnSchema; the first identifier-like column is the primary key
    """
    lowered = name.lower()
    affinity: Affinity = "TEXT"
    primary_key = False

    if "id" in lowered:
        affinity = "INTEGER"
        primary_key = position == 0
    elif sample is not None:
        value, quoted = _unquote_value(sample.strip())
        if not quoted and _NUMBER_RE.match(value):
            affinity = "REAL" if "." in value else "INTEGER"
        elif value in ("0", "1"):
            # boolean-like flag stored as a quoted string
            affinity = "INTEGER"

    return ColumnSchema(
        name=name,
        type=affinity,
        affinity=affinity,
        nullable=True,
        primary_key=primary_key,
    )


def parse_insert(sql_text: str, match: "re.Match[str]") -> TableSchema:
    """
    Build a table from the INSERT whose head ``match`` found.

    Raises:
        ParseAmbiguity: If the column list or first VALUES row cannot be delimited
    """
    table = unquote_identifier(match.group("table"))

    cols_open = match.end() - 1
    cols_close = find_closing_paren(sql_text, cols_open)
    if cols_close is None:
        raise ParseAmbiguity(f"Unterminated column list in INSERT INTO {table}")
    names = [unquote_identifier(col) for col in split_top_level(sql_text[cols_open + 1:cols_close])]
    if not names:
        raise ParseAmbiguity(f"Empty column list in INSERT INTO {table}")

    values = _VALUES_RE.match(sql_text, cols_close + 1)
    if not values:
        raise ParseAmbiguity(f"INSERT INTO {table} has no VALUES row")
    row_open = values.end() - 1
    row_close = find_closing_paren(sql_text, row_open)
    if row_close is None:
        raise ParseAmbiguity(f"Unterminated VALUES row in INSERT INTO {table}")
    samples = split_top_level(sql_text[row_open + 1:row_close])

    columns: List[ColumnSchema] = []
    seen = set()
    for position, name in enumerate(names):
        if name.lower() in seen:
            continue
        seen.add(name.lower())
        sample = samples[position] if position < len(samples) else None
        columns.append(infer_column(name, position, sample))

    return TableSchema(name=table, columns=columns, indexes=[])


class InsertStatementParser(StatementParser):
    """Infers tables from column-listed INSERT statements."""

    strategy = "inserts"

    def matches(self, sql_text: str) -> bool:
        return not has_statement(
            sql_text, StatementKind.CREATE_TABLE
        ) and has_statement(sql_text, StatementKind.INSERT)

    def extract_tables(self, sql_text: str) -> List[TableSchema]:
        tables: List[TableSchema] = []
        processed = set()

        for statement in statements_of_kind(sql_text, StatementKind.INSERT):
            match = _INSERT_HEAD_RE.match(statement)
            if match is None:
                # no column list
                continue
            name = unquote_identifier(match.group("table"))
            if name.lower() in processed:
                continue
            try:
                table = parse_insert(statement, match)
            except ParseAmbiguity as e:
                logger.debug("Skipping INSERT: %s", e)
                continue
            processed.add(name.lower())
            tables.append(table)

        logger.debug("Inferred %d table(s) from INSERT statements", len(tables))
        return tables
