"""Tests for statement splitting and the quote/depth-aware helpers"""
from dumplens.parsing.splitter import (clean_statement, find_closing_paren,
                                       is_comment_line, split_statements,
                                       split_top_level, unquote_identifier)


def test_split_drops_empty_and_comment_only_statements():
    text = """
    -- header comment
    /*!40101 SET NAMES utf8 */;
    ;
    # hash comment
    CREATE TABLE t (id INTEGER);
    INSERT INTO t (id) VALUES (1);
    """
    assert list(split_statements(text)) == [
        "CREATE TABLE t (id INTEGER)",
        "INSERT INTO t (id) VALUES (1)",
    ]


def test_statement_sequence_is_restartable():
    statements = split_statements("SELECT 1; SELECT 2;")
    assert list(statements) == ["SELECT 1", "SELECT 2"]
    assert list(statements) == list(statements)


def test_comment_block_mentioning_create_is_dropped():
    assert clean_statement("-- CREATE TABLE old (id INT)\n-- INSERT INTO old") is None


def test_keyword_comment_kept_inside_statement():
    raw = "-- Dumping data for INSERT below\n# mysql only\nINSERT INTO t (id) VALUES (1)"
    assert clean_statement(raw) == "-- Dumping data for INSERT below\nINSERT INTO t (id) VALUES (1)"


def test_semicolon_inside_literal_splits_early():
    # Known limitation of the textual split
    statements = list(split_statements("INSERT INTO t (s) VALUES ('a;b');"))
    assert statements == ["INSERT INTO t (s) VALUES ('a", "b')"]


def test_is_comment_line():
    assert is_comment_line("  -- x")
    assert is_comment_line("# x")
    assert is_comment_line("/*!40014 SET UNIQUE_CHECKS=0 */")
    assert not is_comment_line("SELECT 1 -- trailing")
    assert not is_comment_line("")


def test_split_top_level_keeps_sized_types_together():
    body = "id INT, price DECIMAL(10,2) NOT NULL, label VARCHAR(20) DEFAULT 'a,b'"
    assert split_top_level(body) == [
        "id INT",
        "price DECIMAL(10,2) NOT NULL",
        "label VARCHAR(20) DEFAULT 'a,b'",
    ]


def test_split_top_level_handles_escaped_quotes():
    assert split_top_level("'it''s', 'a\\'b', 3") == ["'it''s'", "'a\\'b'", "3"]


def test_find_closing_paren():
    text = "t (a INT, b DECIMAL(5,2), c TEXT DEFAULT ')') tail"
    close = find_closing_paren(text, 2)
    assert text[close + 1:] == " tail"


def test_find_closing_paren_stops_at_statement_end():
    assert find_closing_paren("t (a INT, b TEXT; INSERT INTO x (y) VALUES (1)", 2) is None
    assert find_closing_paren("t (a INT", 2) is None


def test_unquote_identifier():
    assert unquote_identifier("`orders`") == "orders"
    assert unquote_identifier('"Order Items"') == "Order Items"
    assert unquote_identifier("[dbo].[users]") == "users"
    assert unquote_identifier("shop.`products`") == "products"
    assert unquote_identifier("plain") == "plain"
