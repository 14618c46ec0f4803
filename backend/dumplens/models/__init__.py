"""
Models package initialization.
Exports all domain models and DTOs for easier access.
"""

from .execution import (DumpUploadRequest, ExecutionReport, IngestResult,
                        QueryKind, QueryRequest, QueryResponse,
                        StatementOutcome)
from .schema import (Affinity, ColumnRef, ColumnSchema, DatabaseSchema,
                     ForeignKeyRef, Relationship, SchemaMetadata, TableSchema)
