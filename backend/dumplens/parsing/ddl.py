"""
DDL extraction: CREATE TABLE / CREATE INDEX text to structured tables.

Each ``CREATE TABLE [IF NOT EXISTS] name ( body )`` yields one table. The
body is located with a quote- and depth-aware scan and split on top-level
commas only, so sized types such as ``DECIMAL(10,2)`` stay in one piece.
Index names are collected from ``CREATE [UNIQUE] INDEX ... ON table``
statements anywhere in the dump, plus inline ``KEY name (...)`` definitions.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from dumplens.core.exceptions import ParseAmbiguity
from dumplens.models.schema import ColumnSchema, ForeignKeyRef, TableSchema
from dumplens.parsing.base import (StatementKind, StatementParser,
                                   affinity_for, has_statement,
                                   statements_of_kind)
from dumplens.parsing.splitter import (find_closing_paren, split_top_level,
                                       unquote_identifier)

logger = logging.getLogger(__name__)

IDENT = r"(?:`[^`]+`|\"[^\"]+\"|\[[^\]]+\]|\w+)"
QUALIFIED_IDENT = rf"(?:{IDENT}\s*\.\s*)?{IDENT}"

_CREATE_TABLE_HEAD_RE = re.compile(
    rf"\bCREATE\s+(?:TEMPORARY\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<name>{QUALIFIED_IDENT})\s*\(",
    re.IGNORECASE,
)

_CREATE_INDEX_RE = re.compile(
    rf"\bCREATE\s+(?:UNIQUE\s+)?INDEX\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<index>{QUALIFIED_IDENT})"
    rf"\s+ON\s+(?P<table>{QUALIFIED_IDENT})",
    re.IGNORECASE,
)

_STRUCTURAL_RE = re.compile(
    r"^(?:PRIMARY\s+KEY|FOREIGN\s+KEY|UNIQUE|INDEX|KEY|CONSTRAINT|FULLTEXT|SPATIAL|CHECK)\b",
    re.IGNORECASE,
)

_COLUMN_RE = re.compile(
    rf"^(?P<name>{IDENT})"
    r"(?:\s+(?P<type>[A-Za-z_]\w*(?:\s+(?:PRECISION|VARYING))?(?:\s*\([^)]*\))?))?"
    r"\s*(?P<rest>.*)$",
    re.IGNORECASE | re.DOTALL,
)

# Words that open the constraint part of a column when no type is declared
_CONSTRAINT_WORDS = {
    "PRIMARY", "NOT", "NULL", "DEFAULT", "REFERENCES", "UNIQUE", "CHECK",
    "COLLATE", "CONSTRAINT", "GENERATED", "AUTO_INCREMENT", "AUTOINCREMENT",
}

_NOT_NULL_RE = re.compile(r"\bNOT\s+NULL\b", re.IGNORECASE)
_PRIMARY_KEY_RE = re.compile(r"\bPRIMARY\s+KEY\b", re.IGNORECASE)

_REFERENCES_RE = re.compile(
    rf"\bREFERENCES\s+(?P<table>{QUALIFIED_IDENT})\s*\(\s*(?P<column>{IDENT})",
    re.IGNORECASE,
)

_TABLE_PRIMARY_KEY_RE = re.compile(
    rf"^(?:CONSTRAINT\s+{IDENT}\s+)?PRIMARY\s+KEY\s*(?:{IDENT}\s*)?\((?P<cols>.*)\)",
    re.IGNORECASE | re.DOTALL,
)

_TABLE_FOREIGN_KEY_RE = re.compile(
    rf"^(?:CONSTRAINT\s+{IDENT}\s+)?FOREIGN\s+KEY\s*(?:{IDENT}\s*)?\((?P<cols>[^)]*)\)\s*"
    rf"REFERENCES\s+(?P<table>{QUALIFIED_IDENT})\s*\((?P<ref_cols>[^)]*)\)",
    re.IGNORECASE | re.DOTALL,
)

_INLINE_INDEX_RE = re.compile(
    rf"^(?:UNIQUE\s+|FULLTEXT\s+|SPATIAL\s+)?(?:KEY|INDEX)\s+(?P<name>{IDENT})\s*\(",
    re.IGNORECASE,
)

_KEY_PART_SUFFIX_RE = re.compile(r"\s*\(\s*\d+\s*\)|\s+(?:ASC|DESC)\b", re.IGNORECASE)


def _key_columns(cols: str) -> List[str]:
    return [
        unquote_identifier(_KEY_PART_SUFFIX_RE.sub("", part))
        for part in split_top_level(cols)
    ]


def parse_column(definition: str) -> Dict[str, Any]:
    """
    Parse one column declaration into ColumnSchema keyword arguments.

    Raises:
        ParseAmbiguity: If the text is not shaped like ``<name> [type] ...``
    """
    match = _COLUMN_RE.match(definition.strip())
    if not match:
        raise ParseAmbiguity(f"Unrecognised column definition: {definition[:60]}")

    declared_type = (match.group("type") or "").strip()
    rest = match.group("rest") or ""
    if declared_type and declared_type.split()[0].split("(")[0].upper() in _CONSTRAINT_WORDS:
        rest = f"{declared_type} {rest}"
        declared_type = ""

    foreign_key = None
    reference = _REFERENCES_RE.search(rest)
    if reference:
        foreign_key = ForeignKeyRef(
            table=unquote_identifier(reference.group("table")),
            column=unquote_identifier(reference.group("column")),
        )

    return {
        "name": unquote_identifier(match.group("name")),
        "type": declared_type,
        "affinity": affinity_for(declared_type),
        "nullable": not _NOT_NULL_RE.search(rest),
        "primary_key": bool(_PRIMARY_KEY_RE.search(rest)),
        "foreign_key": foreign_key,
    }


def parse_table_body(body: str) -> Dict[str, Any]:
    """Split a CREATE TABLE body into columns and inline index names."""
    columns: Dict[str, Dict[str, Any]] = {}
    indexes: List[str] = []
    table_primary_key: List[str] = []
    table_foreign_keys: List[tuple] = []

    for part in split_top_level(body):
        if _STRUCTURAL_RE.match(part):
            pk = _TABLE_PRIMARY_KEY_RE.match(part)
            if pk:
                table_primary_key.extend(_key_columns(pk.group("cols")))
                continue
            fk = _TABLE_FOREIGN_KEY_RE.match(part)
            if fk:
                table_foreign_keys.append(
                    (
                        _key_columns(fk.group("cols")),
                        unquote_identifier(fk.group("table")),
                        _key_columns(fk.group("ref_cols")),
                    )
                )
                continue
            inline_index = _INLINE_INDEX_RE.match(part)
            if inline_index:
                indexes.append(unquote_identifier(inline_index.group("name")))
            continue

        try:
            column = parse_column(part)
        except ParseAmbiguity as e:
            logger.debug("Skipping column: %s", e)
            continue
        key = column["name"].lower()
        if key in columns:
            logger.debug("Duplicate column %s ignored", column["name"])
            continue
        columns[key] = column

    for name in table_primary_key:
        if name.lower() in columns:
            columns[name.lower()]["primary_key"] = True

    for local_cols, ref_table, ref_cols in table_foreign_keys:
        for local, remote in zip(local_cols, ref_cols):
            column = columns.get(local.lower())
            if column is not None and column["foreign_key"] is None:
                column["foreign_key"] = ForeignKeyRef(table=ref_table, column=remote)

    return {
        "columns": [ColumnSchema(**column) for column in columns.values()],
        "indexes": indexes,
    }


def extract_index_names(sql_text: str) -> Dict[str, List[str]]:
    """Map lower-cased table name to the CREATE INDEX names targeting it."""
    by_table: Dict[str, List[str]] = {}
    for match in _CREATE_INDEX_RE.finditer(sql_text):
        table = unquote_identifier(match.group("table")).lower()
        by_table.setdefault(table, []).append(unquote_identifier(match.group("index")))
    return by_table


def _find_table_body(sql_text: str, match: "re.Match[str]") -> Optional[str]:
    open_index = match.end() - 1
    close_index = find_closing_paren(sql_text, open_index)
    if close_index is None:
        return None
    return sql_text[open_index + 1:close_index]


class DDLStatementParser(StatementParser):
    """Extracts tables from CREATE TABLE statements."""

    strategy = "ddl"

    def matches(self, sql_text: str) -> bool:
        return has_statement(sql_text, StatementKind.CREATE_TABLE)

    def extract_tables(self, sql_text: str) -> List[TableSchema]:
        index_names = extract_index_names(
            "\n".join(statements_of_kind(sql_text, StatementKind.CREATE_INDEX))
        )

        tables: List[TableSchema] = []
        seen = set()
        for statement in statements_of_kind(sql_text, StatementKind.CREATE_TABLE):
            match = _CREATE_TABLE_HEAD_RE.match(statement)
            if match is None:
                logger.debug("Skipping CREATE TABLE without a column list: %.60s", statement)
                continue
            name = unquote_identifier(match.group("name"))
            body = _find_table_body(statement, match)
            if body is None:
                logger.debug("Skipping CREATE TABLE %s: unbalanced parentheses", name)
                continue
            if name.lower() in seen:
                logger.debug("Skipping repeated CREATE TABLE %s", name)
                continue
            seen.add(name.lower())

            parsed = parse_table_body(body)
            indexes = list(parsed["indexes"])
            for index in index_names.get(name.lower(), []):
                if index not in indexes:
                    indexes.append(index)

            tables.append(
                TableSchema(name=name, columns=parsed["columns"], indexes=indexes)
            )

        logger.debug("Extracted %d table(s) from DDL", len(tables))
        return tables
