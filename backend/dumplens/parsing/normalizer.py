"""
MySQL to SQLite dialect normalization.

Rewrites are regex-level and run in a fixed order, because later steps rely
on the spelling produced by earlier ones (the AUTO_INCREMENT collapse
expects the type to already read ``INTEGER``). Normalization never raises:
text that still cannot be executed is left to fail on its own in the
execution driver. Applying it twice gives the same text as applying it once.
"""

import re
from typing import Iterable, Iterator, List, Pattern, Tuple

from dumplens.parsing.base import StatementKind, classify_statement

_IDENT = r"(?:`[^`]+`|\"[^\"]+\"|\[[^\]]+\]|\w+)"
_PARENS = r"\((?:[^()]|\([^()]*\))*\)"
# Keeps type rewrites away from quoted identifiers such as `date` or "text"
_NQ = r"(?<![`\"\[\w])"
_NQ_END = r"(?![`\"\]])"

_FLAGS = re.IGNORECASE

# MySQL session/transaction control with no SQLite counterpart
_SESSION_PREFIXES = (
    "SET ",
    "SET@",
    "LOCK TABLES",
    "UNLOCK TABLES",
    "START TRANSACTION",
    "BEGIN",
    "COMMIT",
    "ROLLBACK",
    "USE ",
    "DELIMITER",
    "CREATE DATABASE",
    "CREATE SCHEMA",
    "DROP DATABASE",
    "DROP SCHEMA",
)

Rewrite = Tuple[Pattern[str], str]

# 1. engine/storage pragmas, charset and auto-increment seed clauses
_STRIP_PRAGMAS: List[Rewrite] = [
    (re.compile(r"\s*\bENGINE\s*=\s*\w+", _FLAGS), ""),
    (re.compile(r"\s*\bAUTO_INCREMENT\s*=\s*\d+", _FLAGS), ""),
    (re.compile(r"\s*\b(?:DEFAULT\s+)?(?:CHARSET|CHARACTER\s+SET)\s*=?\s*\w+", _FLAGS), ""),
    (re.compile(r"\s*\b(?:DEFAULT\s+)?COLLATE\s*=?\s*(?!(?:NOCASE|BINARY|RTRIM)\b)\w+", _FLAGS), ""),
    (re.compile(
        r"\s*\b(?:ROW_FORMAT|PACK_KEYS|CHECKSUM|DELAY_KEY_WRITE|KEY_BLOCK_SIZE|"
        r"STATS_PERSISTENT|STATS_AUTO_RECALC|MAX_ROWS|MIN_ROWS|AVG_ROW_LENGTH)\s*=\s*\w+",
        _FLAGS,
    ), ""),
    (re.compile(r"\s*\bCOMMENT\s*=?\s*'(?:[^'\\]|\\.|'')*'", _FLAGS), ""),
    (re.compile(r"\s+\b(?:UNSIGNED|ZEROFILL)\b", _FLAGS), ""),
    (re.compile(r"\s+\bUSING\s+(?:BTREE|HASH)\b", _FLAGS), ""),
    (re.compile(r"\s+\bON\s+UPDATE\s+CURRENT_TIMESTAMP(?:\s*\(\s*\d*\s*\))?", _FLAGS), ""),
    # inline secondary indexes are not allowed inside a SQLite CREATE TABLE
    (re.compile(rf",\s*(?:FULLTEXT\s+|SPATIAL\s+)?(?:KEY|INDEX)\s+{_IDENT}\s*{_PARENS}", _FLAGS), ""),
    (re.compile(rf"\bUNIQUE\s+(?:KEY|INDEX)(?:\s+{_IDENT})?\s*\(", _FLAGS), "UNIQUE ("),
]

# 2. fixed-width and dialect types to INTEGER / TEXT / REAL
_MAP_TYPES: List[Rewrite] = [
    (re.compile(rf"{_NQ}\b(?:TINY|SMALL|MEDIUM|BIG)?INT(?:EGER)?\s*\(\s*\d+\s*\)", _FLAGS), "INTEGER"),
    (re.compile(rf"{_NQ}\b(?:TINY|SMALL|MEDIUM|BIG)INT\b{_NQ_END}", _FLAGS), "INTEGER"),
    (re.compile(rf"{_NQ}\bINT\b{_NQ_END}", _FLAGS), "INTEGER"),
    (re.compile(rf"{_NQ}\b(?:BOOL|BOOLEAN)\b{_NQ_END}", _FLAGS), "INTEGER"),
    (re.compile(rf"{_NQ}\bN?(?:VAR)?CHAR(?:ACTER)?(?:\s+VARYING)?\s*\(\s*\d+\s*\)", _FLAGS), "TEXT"),
    (re.compile(rf"{_NQ}\b(?:TINY|MEDIUM|LONG)?TEXT\b{_NQ_END}", _FLAGS), "TEXT"),
    (re.compile(rf"{_NQ}\b(?:DATETIME|TIMESTAMP)(?:\s*\(\s*\d+\s*\))?{_NQ_END}", _FLAGS), "TEXT"),
    (re.compile(rf"{_NQ}\b(?:ENUM|SET)\s*{_PARENS}", _FLAGS), "TEXT"),
    (re.compile(rf"{_NQ}\b(?:DECIMAL|NUMERIC)\s*\(\s*\d+\s*(?:,\s*\d+\s*)?\)", _FLAGS), "REAL"),
    (re.compile(rf"{_NQ}\bDECIMAL\b{_NQ_END}", _FLAGS), "REAL"),
    (re.compile(rf"{_NQ}\bDOUBLE(?:\s+PRECISION)?(?:\s*\(\s*\d+\s*,\s*\d+\s*\))?{_NQ_END}", _FLAGS), "REAL"),
    (re.compile(rf"{_NQ}\bFLOAT(?:\s*\(\s*\d+\s*(?:,\s*\d+\s*)?\))?{_NQ_END}", _FLAGS), "REAL"),
]

# 3. NOT NULL AUTO_INCREMENT integer column -> inline autoincrement primary key
_AUTO_INCREMENT_COLUMN_RE = re.compile(
    rf"(?P<col>{_IDENT})\s+INTEGER\s+(?:NOT\s+NULL\s+)?AUTO_INCREMENT"
    r"(?:\s+NOT\s+NULL)?(?:\s+PRIMARY\s+KEY)?\b",
    _FLAGS,
)

# 4. table-level primary key made redundant by step 3
_PRIMARY_KEY_CONSTRAINT_RE = re.compile(
    rf",\s*(?:CONSTRAINT\s+{_IDENT}\s+)?PRIMARY\s+KEY\s*{_PARENS}",
    _FLAGS,
)

# 5. any remaining MySQL spelling
_AUTO_INCREMENT_RE = re.compile(r"\bAUTO_INCREMENT\b", _FLAGS)

# 6. separators and whitespace left behind by removals
_TIDY: List[Rewrite] = [
    (re.compile(r",\s*,"), ","),
    (re.compile(r",(\s*)\)"), r"\1)"),
    (re.compile(r"\(\s*,"), "("),
    (re.compile(r"[ \t]+(?=,|\n|\)|$)"), ""),
    (re.compile(r"[ \t]+\n"), "\n"),
]


def _apply(rewrites: Iterable[Rewrite], text: str) -> str:
    for pattern, replacement in rewrites:
        text = pattern.sub(replacement, text)
    return text


def is_session_statement(statement: str) -> bool:
    """Session/transaction control that SQLite either rejects or must not see."""
    head = " ".join(statement.split()[:2]).upper()
    return head.startswith(_SESSION_PREFIXES)


def normalize_create_table(statement: str) -> str:
    """Run the six rewrite steps over a CREATE TABLE statement."""
    text = _apply(_STRIP_PRAGMAS, statement)
    text = _apply(_MAP_TYPES, text)

    text, collapsed = _AUTO_INCREMENT_COLUMN_RE.subn(
        r"\g<col> INTEGER PRIMARY KEY AUTOINCREMENT", text
    )
    if collapsed:
        text = _PRIMARY_KEY_CONSTRAINT_RE.sub("", text)

    text = _AUTO_INCREMENT_RE.sub("AUTOINCREMENT", text)
    return _apply(_TIDY, text).strip()


def normalize_statement(statement: str) -> str:
    """
    Normalize one statement for SQLite.

    Returns the empty string for statements that should not be sent at all
    (MySQL session control). Non-DDL statements pass through trimmed.
    """
    text = statement.strip().rstrip(";").strip()
    if not text:
        return ""
    if is_session_statement(text):
        return ""
    if classify_statement(text) is StatementKind.CREATE_TABLE:
        return normalize_create_table(text)
    return text


def normalize_statements(statements: Iterable[str]) -> Iterator[str]:
    """Normalize a statement stream, dropping statements that normalize to nothing."""
    for statement in statements:
        normalized = normalize_statement(statement)
        if normalized:
            yield normalized
