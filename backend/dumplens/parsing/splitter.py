"""
Lexical helpers shared by every statement parser.

`split_statements` is a textual split on ``;``. It does not understand string
literals, so a ``;`` inside a quoted value ends the statement early. This is
a known limitation of the regex-level approach; the execution driver absorbs
the resulting broken statements as ordinary per-statement failures.

The helpers below it (`split_top_level`, `find_closing_paren`) are quote- and
parenthesis-aware and are used inside a single statement, where nesting such
as ``DECIMAL(10,2)`` must survive.
"""

import re
from typing import Iterator, List, Optional

_KEYWORD_RE = re.compile(r"\b(?:CREATE|INSERT)\b", re.IGNORECASE)
_IDENTIFIER_QUOTES = {"`": "`", '"': '"', "[": "]"}


def is_comment_line(line: str) -> bool:
    """True for a line holding only a ``--``, ``#`` or single-line ``/* */`` comment."""
    stripped = line.strip()
    if not stripped:
        return False
    if stripped.startswith(("--", "#")):
        return True
    return stripped.startswith("/*") and stripped.endswith("*/")


def _keeps_comment(line: str) -> bool:
    # SQLite understands "--" comments, so these are harmless to forward
    return line.strip().startswith("--") and bool(_KEYWORD_RE.search(line))


def clean_statement(raw: str) -> Optional[str]:
    """
    Strip comment noise from one raw statement.

    Returns None when nothing executable is left.
    """
    text = raw.strip()
    if not text:
        return None

    lines = text.splitlines()
    code_lines = [line for line in lines if line.strip() and not is_comment_line(line)]
    if not code_lines:
        # Pure comment block, optionally mentioning CREATE/INSERT: nothing to run
        return None

    kept = [
        line
        for line in lines
        if line.strip() and (not is_comment_line(line) or _keeps_comment(line))
    ]
    return "\n".join(kept).strip()


class StatementSequence:
    """Lazy, restartable sequence of cleaned statements from one dump.

    Every iteration re-scans the source text, so the sequence can be walked
    any number of times and always yields the same statements.
    """

    def __init__(self, sql_text: str):
        self.sql_text = sql_text

    def __iter__(self) -> Iterator[str]:
        for raw in self.sql_text.split(";"):
            statement = clean_statement(raw)
            if statement:
                yield statement

    def __repr__(self) -> str:
        return f"StatementSequence({len(self.sql_text)} chars)"


def split_statements(sql_text: str) -> StatementSequence:
    """Split raw dump text into cleaned statements."""
    return StatementSequence(sql_text)


def find_closing_paren(text: str, open_index: int) -> Optional[int]:
    """
    Index of the parenthesis closing the one at ``open_index``.

    Quotes are honoured. Returns None when the text ends, or a ``;`` appears
    outside quotes, before the parenthesis balances.
    """
    depth = 0
    quote: Optional[str] = None
    i = open_index
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\" and quote != "`":
                i += 2
                continue
            if ch == quote:
                # Doubled quote is an escaped quote
                if i + 1 < len(text) and text[i + 1] == quote:
                    i += 2
                    continue
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        elif ch == ";":
            return None
        i += 1
    return None


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` only at parenthesis depth 0 and outside quotes."""
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    quote: Optional[str] = None
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            current.append(ch)
            if ch == "\\" and quote != "`" and i + 1 < len(text):
                current.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                if i + 1 < len(text) and text[i + 1] == quote:
                    current.append(text[i + 1])
                    i += 2
                    continue
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
            current.append(ch)
        elif ch == "(":
            depth += 1
            current.append(ch)
        elif ch == ")":
            depth -= 1
            current.append(ch)
        elif ch == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def unquote_identifier(name: str) -> str:
    """Drop backtick, double-quote or bracket quoting and any schema qualifier."""
    name = name.strip()
    if "." in name:
        name = name.rsplit(".", 1)[-1].strip()
    if len(name) >= 2 and name[0] in _IDENTIFIER_QUOTES and name[-1] == _IDENTIFIER_QUOTES[name[0]]:
        return name[1:-1]
    return name
