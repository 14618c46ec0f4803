"""Tests for CREATE TABLE / CREATE INDEX extraction"""
import pytest
from dumplens.core.exceptions import ParseAmbiguity
from dumplens.parsing.ddl import (DDLStatementParser, extract_index_names,
                                  parse_column)


@pytest.fixture
def parser():
    return DDLStatementParser()


def test_one_table_per_create_in_source_order(parser, mysql_dump):
    tables = parser.extract_tables(mysql_dump)
    assert [table.name for table in tables] == ["customers", "orders"]


def test_columns_types_and_constraints(parser, mysql_dump):
    customers, orders = parser.extract_tables(mysql_dump)

    id_column = customers.column("id")
    assert id_column.type == "int(11)"
    assert id_column.affinity == "INTEGER"
    assert id_column.primary_key is True
    assert id_column.nullable is False

    email = customers.column("email")
    assert email.affinity == "TEXT"
    assert email.nullable is True
    assert customers.indexes == ["idx_email"]

    total = orders.column("total")
    assert total.type == "decimal(10,2)"
    assert total.affinity == "REAL"
    assert [column.name for column in orders.columns] == ["id", "customer_id", "total"]


def test_inline_references_clause(parser, mysql_dump):
    orders = parser.extract_tables(mysql_dump)[1]
    fk = orders.column("customer_id").foreign_key
    assert fk is not None
    assert (fk.table, fk.column) == ("customers", "id")
    assert orders.indexes == ["idx_orders_customer"]


def test_table_level_constraints_mark_columns(parser):
    sql = """
    CREATE TABLE IF NOT EXISTS "order_items" (
        order_id INTEGER NOT NULL,
        product_id INTEGER NOT NULL,
        qty INTEGER,
        PRIMARY KEY (order_id, product_id),
        CONSTRAINT fk_product FOREIGN KEY (product_id) REFERENCES products (id)
    );
    """
    (table,) = parser.extract_tables(sql)
    assert table.name == "order_items"
    assert table.column("order_id").primary_key
    assert table.column("product_id").primary_key
    assert not table.column("qty").primary_key
    fk = table.column("product_id").foreign_key
    assert (fk.table, fk.column) == ("products", "id")


def test_unbalanced_table_is_skipped(parser):
    sql = """
    CREATE TABLE good (id INTEGER PRIMARY KEY, name TEXT);
    CREATE TABLE bad (id INTEGER, name TEXT;
    CREATE TABLE after (id INTEGER);
    """
    assert [table.name for table in parser.extract_tables(sql)] == ["good", "after"]


def test_repeated_table_keeps_first_definition(parser):
    sql = "CREATE TABLE t (a INT); CREATE TABLE t (b TEXT, c TEXT);"
    (table,) = parser.extract_tables(sql)
    assert [column.name for column in table.columns] == ["a"]


def test_commented_out_ddl_is_ignored(parser):
    sql = "-- CREATE TABLE ghost (id INT);\nCREATE TABLE real_one (id INT);"
    assert [table.name for table in parser.extract_tables(sql)] == ["real_one"]


def test_matches_only_with_create_table(parser):
    assert parser.matches("create table x (id int);")
    assert not parser.matches("INSERT INTO x (id) VALUES (1);")
    assert not parser.matches("-- CREATE TABLE x (id int)\nINSERT INTO x (id) VALUES (1);")
    assert not parser.matches("INSERT INTO x (id, body) VALUES (1, 'CREATE TABLE y (z INT)');")


def test_create_table_text_in_values_adds_no_table(parser):
    sql = """
    CREATE TABLE docs (id INT, body TEXT);
    INSERT INTO docs (id, body) VALUES (1, 'CREATE TABLE ghost (x INT)');
    """
    assert [table.name for table in parser.extract_tables(sql)] == ["docs"]


def test_extract_index_names():
    sql = """
    CREATE INDEX idx_a ON t (a);
    CREATE UNIQUE INDEX IF NOT EXISTS `idx_b` ON `T` (b);
    CREATE INDEX idx_other ON other (x);
    """
    assert extract_index_names(sql) == {"t": ["idx_a", "idx_b"], "other": ["idx_other"]}


def test_parse_column_without_type():
    column = parse_column("flag NOT NULL DEFAULT 0")
    assert column["name"] == "flag"
    assert column["type"] == ""
    assert column["affinity"] == "TEXT"
    assert column["nullable"] is False


def test_parse_column_rejects_non_columns():
    with pytest.raises(ParseAmbiguity):
        parse_column("(weird)")
