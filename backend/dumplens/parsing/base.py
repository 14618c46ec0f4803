"""Base statement parser interface"""

import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, List

from dumplens.models.schema import Affinity, ExtractionStrategy, TableSchema
from dumplens.parsing.splitter import is_comment_line, split_statements

logger = logging.getLogger(__name__)

_READ_PREFIXES = ("SELECT", "WITH", "PRAGMA")


class StatementKind(str, Enum):
    """Coarse classification of a single statement"""

    CREATE_TABLE = "create_table"
    CREATE_INDEX = "create_index"
    INSERT = "insert"
    READ = "read"
    OTHER = "other"


def classify_query(sql: str) -> str:
    """Route a statement to the store's read or write path."""
    if sql.strip().upper().startswith(_READ_PREFIXES):
        return "read"
    return "write"


def classify_statement(sql: str) -> StatementKind:
    """Classify one statement by its leading keywords."""
    head = " ".join(sql.strip().split()[:4]).upper()
    if re.match(r"CREATE\s+(?:TEMPORARY\s+)?TABLE\b", head):
        return StatementKind.CREATE_TABLE
    if re.match(r"CREATE\s+(?:UNIQUE\s+)?INDEX\b", head):
        return StatementKind.CREATE_INDEX
    if re.match(r"INSERT\s+(?:IGNORE\s+)?INTO\b", head):
        return StatementKind.INSERT
    if classify_query(head) == "read":
        return StatementKind.READ
    return StatementKind.OTHER


def statements_of_kind(sql_text: str, kind: StatementKind) -> Iterator[str]:
    """Yield the dump's statements of one kind, without their comment lines.

    Keywords inside string literals of other statements never count, so an
    INSERT whose value reads ``'CREATE TABLE ...'`` stays an INSERT.
    """
    for statement in split_statements(sql_text):
        code = "\n".join(
            line for line in statement.splitlines() if not is_comment_line(line)
        ).strip()
        if code and classify_statement(code) is kind:
            yield code


def has_statement(sql_text: str, kind: StatementKind) -> bool:
    return any(True for _ in statements_of_kind(sql_text, kind))


def affinity_for(type_name: str) -> Affinity:
    """Reduce a declared column type to the INTEGER/REAL/TEXT tag set.

    Follows SQLite's affinity rules: any "INT" is INTEGER, floating and
    fixed-point names are REAL, everything else is TEXT.
    """
    upper = type_name.upper()
    if "INT" in upper or upper.startswith(("BOOL", "BIT")):
        return "INTEGER"
    if any(token in upper for token in ("REAL", "FLOA", "DOUB", "DEC", "NUMERIC")):
        return "REAL"
    return "TEXT"


class StatementParser(ABC):
    """Abstract base class for schema-producing statement parsers.

    Each variant recognises one family of statements in a dump and turns it
    into tables. Callers only go through `matches` and `extract_tables`, so a
    stricter grammar-based parser can replace a regex one without touching
    them.
    """

    strategy: ExtractionStrategy

    @abstractmethod
    def matches(self, sql_text: str) -> bool:
        """Whether this parser should handle the given dump"""
        pass

    @abstractmethod
    def extract_tables(self, sql_text: str) -> List[TableSchema]:
        """Extract tables in source order"""
        pass


class GenericStatementParser(StatementParser):
    """Fallback for dumps holding neither DDL nor column-listed INSERTs."""

    strategy: ExtractionStrategy = "empty"

    def matches(self, sql_text: str) -> bool:
        return True

    def extract_tables(self, sql_text: str) -> List[TableSchema]:
        logger.debug("No CREATE TABLE or INSERT INTO statements recognised")
        return []
