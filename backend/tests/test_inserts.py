"""Tests for schema inference from INSERT statements"""
import pytest
from dumplens.parsing.inserts import InsertStatementParser, infer_column


@pytest.fixture
def parser():
    return InsertStatementParser()


def test_orders_type_inference(parser):
    sql = "INSERT INTO orders (id, total, note, paid) VALUES (1, 9.99, 'x', '1');"
    (orders,) = parser.extract_tables(sql)

    assert orders.name == "orders"
    by_name = {column.name: column for column in orders.columns}
    assert by_name["id"].type == "INTEGER"
    assert by_name["id"].primary_key is True
    assert by_name["total"].type == "REAL"
    assert by_name["note"].type == "TEXT"
    assert by_name["paid"].type == "INTEGER"
    assert all(column.nullable for column in orders.columns)
    assert sum(column.primary_key for column in orders.columns) == 1


def test_orders_with_active_flag(parser):
    sql = "INSERT INTO orders (order_id, total, active) VALUES (1, 19.99, 1);"
    (orders,) = parser.extract_tables(sql)

    assert [(column.name, column.type) for column in orders.columns] == [
        ("order_id", "INTEGER"),
        ("total", "REAL"),
        ("active", "INTEGER"),
    ]
    assert orders.column("order_id").primary_key is True
    assert orders.column("total").primary_key is False
    assert orders.column("active").primary_key is False


def test_one_table_per_distinct_name_first_insert_wins(parser):
    sql = """
    INSERT INTO users (user_id, name) VALUES (1, 'Ada');
    INSERT INTO users (user_id, name, email) VALUES (2, 'Tunde', 't@example.com');
    INSERT INTO `logs` (`ts`, `level`) VALUES ('2024-01-01', 'info');
    """
    users, logs = parser.extract_tables(sql)
    assert users.name == "users"
    assert [column.name for column in users.columns] == ["user_id", "name"]
    assert logs.name == "logs"
    assert len(logs.columns) == 2


def test_id_column_not_first_is_integer_without_key(parser):
    sql = "INSERT INTO notes (body, author_id) VALUES ('hi', '7');"
    (notes,) = parser.extract_tables(sql)
    author = notes.column("author_id")
    assert author.type == "INTEGER"
    assert author.primary_key is False
    assert notes.column("body").primary_key is False


def test_quoted_commas_and_parens_in_first_row(parser):
    sql = "INSERT INTO t (a, b, c) VALUES ('x, (y)', 2, NULL);"
    (table,) = parser.extract_tables(sql)
    assert [column.type for column in table.columns] == ["TEXT", "INTEGER", "TEXT"]


def test_insert_without_column_list_is_skipped(parser):
    sql = "INSERT INTO t VALUES (1, 'a');\nINSERT INTO u (a) VALUES (1);"
    assert [table.name for table in parser.extract_tables(sql)] == ["u"]


def test_matches_only_without_ddl(parser):
    assert parser.matches("INSERT INTO t (a) VALUES (1);")
    assert not parser.matches("CREATE TABLE t (a INT); INSERT INTO t (a) VALUES (1);")
    assert not parser.matches("SELECT 1;")


def test_create_table_inside_a_value_still_matches(parser):
    sql = (
        "INSERT INTO snippets (snippet_id, body) VALUES (1, 'CREATE TABLE demo (x INT)');\n"
        "INSERT INTO snippets (snippet_id, body) VALUES (2, 'plain');"
    )
    assert parser.matches(sql)
    (snippets,) = parser.extract_tables(sql)
    assert snippets.name == "snippets"
    assert snippets.column("body").type == "TEXT"


@pytest.mark.parametrize(
    "name, position, sample, expected",
    [
        ("count", 1, "42", "INTEGER"),
        ("ratio", 1, "-0.5", "REAL"),
        ("label", 1, "'42'", "TEXT"),
        ("flag", 1, "'0'", "INTEGER"),
        ("anything", 1, "NULL", "TEXT"),
        ("missing", 3, None, "TEXT"),
    ],
)
def test_infer_column(name, position, sample, expected):
    assert infer_column(name, position, sample).type == expected
