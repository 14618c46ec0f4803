"""Execution and request/response models"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from dumplens.models.schema import ExtractionStrategy, SchemaMetadata

QueryKind = Literal["read", "write"]


class StatementOutcome(BaseModel):
    """Result of running one normalized statement"""
    index: int
    preview: str
    ok: bool
    error: Optional[str] = None


class ExecutionReport(BaseModel):
    """Summary of one execution driver run"""
    strategy: ExtractionStrategy = "empty"
    executed: int = 0
    failed: int = 0
    skipped: int = 0
    failures: List[StatementOutcome] = []

    @property
    def total(self) -> int:
        return self.executed + self.failed + self.skipped


class IngestResult(BaseModel):
    """What an upload produced: the schema metadata plus the execution summary"""
    session: str
    file_name: str
    schema_metadata: SchemaMetadata
    execution: ExecutionReport


class DumpUploadRequest(BaseModel):
    """Raw dump text plus its display name"""
    file_name: str = Field(..., min_length=1, max_length=255)
    sql: str = Field(..., description="Raw SQL dump text (UTF-8)")

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        v = v.strip()
        if not v.lower().endswith(".sql"):
            raise ValueError("Only SQL files are allowed")
        return v


class QueryRequest(BaseModel):
    """An already-formed SQL statement from the conversational layer"""
    sql: str = Field(..., min_length=1)

    @field_validator("sql")
    @classmethod
    def validate_sql(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SQL cannot be empty or whitespace only")
        return v


class QueryResponse(BaseModel):
    """Rows for reads, a single change summary row for writes"""
    kind: QueryKind
    rows: List[Dict[str, Any]]
    row_count: int
