"""Tests for parser selection, relationship resolution and schema assembly"""
from dumplens.models.schema import (ColumnSchema, ForeignKeyRef,
                                    TableSchema)
from dumplens.parsing.base import affinity_for, classify_query
from dumplens.parsing.relationships import resolve_relationships
from dumplens.services.schema_extractor import extract_schema, select_parser


def test_ddl_dump_schema(mysql_dump):
    schema = extract_schema(mysql_dump, "shop.sql")

    assert [table.name for table in schema.tables] == ["customers", "orders"]
    assert schema.metadata.file_name == "shop.sql"
    assert schema.metadata.total_tables == 2
    assert schema.metadata.strategy == "ddl"

    (edge,) = schema.relationships
    assert (edge.source.table, edge.source.column) == ("orders", "customer_id")
    assert (edge.target.table, edge.target.column) == ("customers", "id")
    assert edge.type == "many-to-one"


def test_inserts_only_dump_schema(inserts_only_dump):
    schema = extract_schema(inserts_only_dump, "rows.sql")
    assert schema.metadata.strategy == "inserts"
    assert [table.name for table in schema.tables] == ["orders"]
    assert len(schema.tables[0].columns) == 4
    assert schema.relationships == []


def test_ddl_keywords_inside_values_keep_insert_strategy():
    sql = "INSERT INTO snippets (snippet_id, body) VALUES (1, 'CREATE TABLE demo (x INT)');"
    schema = extract_schema(sql, "snippets.sql")
    assert schema.metadata.strategy == "inserts"
    assert [table.name for table in schema.tables] == ["snippets"]


def test_unrecognised_dump_gives_empty_schema():
    schema = extract_schema("SELECT 1; -- nothing to see", "empty.sql")
    assert schema.tables == []
    assert schema.metadata.total_tables == 0
    assert schema.metadata.strategy == "empty"
    assert select_parser("").strategy == "empty"


def test_resolve_relationships_in_table_then_column_order():
    tables = [
        TableSchema(
            name="a",
            columns=[
                ColumnSchema(name="x_id", type="INT", foreign_key=ForeignKeyRef(table="x", column="id")),
                ColumnSchema(name="plain", type="TEXT"),
                ColumnSchema(name="y_id", type="INT", foreign_key=ForeignKeyRef(table="y", column="id")),
            ],
        ),
        TableSchema(
            name="b",
            columns=[
                ColumnSchema(name="a_id", type="INT", foreign_key=ForeignKeyRef(table="a", column="x_id")),
            ],
        ),
    ]
    edges = resolve_relationships(tables)
    assert [(e.source.table, e.source.column, e.target.table) for e in edges] == [
        ("a", "x_id", "x"),
        ("a", "y_id", "y"),
        ("b", "a_id", "a"),
    ]
    assert {e.type for e in edges} == {"many-to-one"}
    assert resolve_relationships([]) == []


def test_relationship_serializes_with_from_and_to():
    tables = [
        TableSchema(
            name="orders",
            columns=[
                ColumnSchema(
                    name="customer_id",
                    type="INT",
                    foreign_key=ForeignKeyRef(table="customers", column="id"),
                )
            ],
        )
    ]
    (edge,) = resolve_relationships(tables)
    assert edge.model_dump(by_alias=True) == {
        "from": {"table": "orders", "column": "customer_id"},
        "to": {"table": "customers", "column": "id"},
        "type": "many-to-one",
    }


def test_classify_query():
    assert classify_query("  select * from t") == "read"
    assert classify_query("WITH x AS (SELECT 1) SELECT * FROM x") == "read"
    assert classify_query("pragma table_info(t)") == "read"
    assert classify_query("INSERT INTO t VALUES (1)") == "write"
    assert classify_query("DELETE FROM t") == "write"


def test_affinity_for():
    assert affinity_for("bigint(20)") == "INTEGER"
    assert affinity_for("TINYINT(1)") == "INTEGER"
    assert affinity_for("decimal(10,2)") == "REAL"
    assert affinity_for("double precision") == "REAL"
    assert affinity_for("varchar(255)") == "TEXT"
    assert affinity_for("") == "TEXT"
