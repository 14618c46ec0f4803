#!/usr/bin/env python3
"""Script to ingest a SQL dump into a local session store."""

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path

from dumplens.core.config import settings
from dumplens.core.exceptions import DumpLensError
from dumplens.services.ingest_service import ingest_service


async def ingest_file(path: Path, session: str) -> bool:
    """Ingest one dump file and print what it produced."""
    try:
        sql_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"✗ Cannot read {path}: {e}")
        return False

    try:
        result = await ingest_service.ingest(session, sql_text, path.name)
    except DumpLensError as e:
        print(f"✗ Ingest failed: {e}")
        return False

    metadata = result.schema_metadata
    execution = result.execution
    print(f"✓ Session: {result.session}")
    print(f"  File: {result.file_name}")
    print(f"  Strategy: {metadata.strategy}")
    print(f"  Tables: {metadata.total_tables}")
    print(
        f"  Statements: {execution.executed} executed, "
        f"{execution.failed} failed, {execution.skipped} skipped"
    )
    for failure in execution.failures:
        print(f"    #{failure.index}: {failure.preview}")
        print(f"      {failure.error}")

    tables = await ingest_service.list_tables(session)
    print(f"  Store tables: {', '.join(tables) if tables else '(none)'}")
    print(f"  Data dir: {ingest_service.store.session_dir(session)}")
    return True


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest a SQL dump into a session store")
    parser.add_argument("dump", type=Path, help="Path to the .sql dump")
    parser.add_argument(
        "--session",
        default=None,
        help="Session identifier (a new random one when omitted)",
    )
    return parser.parse_args(argv)


async def main():
    """Main function."""
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = args.session or uuid.uuid4().hex
    print(f"Ingesting {args.dump} into session {session}")
    print()

    success = await ingest_file(args.dump, session)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    asyncio.run(main())
