"""Tests for the per-session schema artifact store"""
import orjson
import pytest
from dumplens.core.exceptions import InvalidSessionError, SchemaNotFoundError
from dumplens.services.schema_extractor import extract_schema


@pytest.mark.asyncio
async def test_schema_round_trip(schema_store, mysql_dump):
    schema = extract_schema(mysql_dump, "shop.sql")

    path = await schema_store.save_async("abc123", schema)
    loaded = await schema_store.load_async("abc123")

    assert path == schema_store.session_dir("abc123") / "schema.json"
    assert loaded == schema


@pytest.mark.asyncio
async def test_artifact_uses_from_and_to_keys(schema_store, mysql_dump):
    await schema_store.save_async("s1", extract_schema(mysql_dump, "shop.sql"))

    data = orjson.loads(schema_store.schema_path("s1").read_bytes())
    assert data["metadata"]["file_name"] == "shop.sql"
    assert data["metadata"]["total_tables"] == 2
    assert data["relationships"][0]["from"] == {"table": "orders", "column": "customer_id"}
    assert data["relationships"][0]["to"] == {"table": "customers", "column": "id"}


@pytest.mark.asyncio
async def test_new_upload_replaces_schema(schema_store, mysql_dump, inserts_only_dump):
    await schema_store.save_async("s1", extract_schema(mysql_dump, "first.sql"))
    await schema_store.save_async("s1", extract_schema(inserts_only_dump, "second.sql"))

    loaded = await schema_store.load_async("s1")
    assert loaded.metadata.file_name == "second.sql"
    assert [table.name for table in loaded.tables] == ["orders"]


@pytest.mark.asyncio
async def test_missing_schema_raises_not_found(schema_store):
    with pytest.raises(SchemaNotFoundError) as exc_info:
        await schema_store.load_async("never-uploaded")
    assert "not initialized" in str(exc_info.value)


@pytest.mark.asyncio
async def test_corrupt_schema_raises_not_found(schema_store):
    path = schema_store.schema_path("broken")
    path.parent.mkdir(parents=True)
    path.write_text("{not json")

    with pytest.raises(SchemaNotFoundError):
        await schema_store.load_async("broken")


@pytest.mark.parametrize("session", ["", "../escape", "a/b", "x" * 129, "has space"])
def test_invalid_session_identifiers(schema_store, session):
    with pytest.raises(InvalidSessionError):
        schema_store.session_dir(session)


def test_reset_session_removes_store_and_schema(schema_store):
    path = schema_store.database_path("s2")
    path.parent.mkdir(parents=True)
    path.write_bytes(b"old")
    schema_store.schema_path("s2").write_bytes(b"{}")
    assert schema_store.has_schema("s2")

    schema_store.reset_session("s2")
    assert not path.exists()
    assert not schema_store.has_schema("s2")
    schema_store.reset_session("s2")
