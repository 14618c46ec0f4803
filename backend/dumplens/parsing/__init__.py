from dumplens.parsing.base import (GenericStatementParser, StatementKind,
                                   StatementParser, classify_query,
                                   classify_statement)
from dumplens.parsing.ddl import DDLStatementParser
from dumplens.parsing.inserts import InsertStatementParser
from dumplens.parsing.normalizer import normalize_statement, normalize_statements
from dumplens.parsing.relationships import resolve_relationships
from dumplens.parsing.splitter import StatementSequence, split_statements

__all__ = [
    "StatementParser",
    "DDLStatementParser",
    "InsertStatementParser",
    "GenericStatementParser",
    "StatementKind",
    "StatementSequence",
    "classify_query",
    "classify_statement",
    "normalize_statement",
    "normalize_statements",
    "resolve_relationships",
    "split_statements",
]
