"""Session artifact storage: one directory per session under DATA_DIR."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional, Union

import orjson
from pydantic import ValidationError

from dumplens.core.config import settings
from dumplens.core.exceptions import InvalidSessionError, SchemaNotFoundError
from dumplens.models.schema import DatabaseSchema

logger = logging.getLogger(__name__)

# Session tokens are opaque, but they become directory names
_SESSION_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def validate_session(session: str) -> str:
    """Return the token unchanged, or raise InvalidSessionError."""
    if not isinstance(session, str) or not _SESSION_RE.match(session):
        raise InvalidSessionError(
            "Session identifiers may only contain letters, digits, '-' and '_'"
        )
    return session


class SchemaStore:
    """
    Repository for per-session artifacts.

    Layout::

        <root>/<session>/schema.json   serialized DatabaseSchema
        <root>/<session>/database.db   populated SQLite store

    The schema artifact is written once per upload and read-only afterwards.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root).resolve() if root is not None else settings.data_path

    def session_dir(self, session: str) -> Path:
        return self.root / validate_session(session)

    def database_path(self, session: str) -> Path:
        return self.session_dir(session) / settings.DATABASE_FILENAME

    def schema_path(self, session: str) -> Path:
        return self.session_dir(session) / settings.SCHEMA_FILENAME

    def has_schema(self, session: str) -> bool:
        return self.schema_path(session).is_file()

    def reset_session(self, session: str) -> None:
        """Remove a previous upload's store and schema artifact."""
        for path in (self.schema_path(session), self.database_path(session)):
            if path.exists():
                logger.info("Removing %s for session %s", path.name, session)
                path.unlink()

    def _write(self, path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_bytes(payload)
        tmp.replace(path)

    async def save_async(self, session: str, schema: DatabaseSchema) -> Path:
        """Serialize the schema for a session, replacing any previous one."""
        path = self.schema_path(session)
        payload = orjson.dumps(
            schema.model_dump(mode="json", by_alias=True),
            option=orjson.OPT_INDENT_2,
        )
        await asyncio.to_thread(self._write, path, payload)
        logger.debug("Schema saved for session %s (%d bytes)", session, len(payload))
        return path

    async def load_async(self, session: str) -> DatabaseSchema:
        """
        Load the schema produced by a session's upload.

        Raises:
            SchemaNotFoundError: If the session has no schema artifact (or it is unreadable)
        """
        path = self.schema_path(session)
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise SchemaNotFoundError(session) from e

        try:
            return DatabaseSchema.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning("Corrupt schema artifact for session %s: %s", session, e)
            raise SchemaNotFoundError(session) from e


schema_store = SchemaStore()
