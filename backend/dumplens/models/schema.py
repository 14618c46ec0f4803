"""Schema models"""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Affinity = Literal["INTEGER", "REAL", "TEXT"]
RelationshipType = Literal["one-to-one", "one-to-many", "many-to-one", "many-to-many"]
ExtractionStrategy = Literal["ddl", "inserts", "empty"]


class ForeignKeyRef(BaseModel):
    """Target of a column-level REFERENCES clause"""
    model_config = ConfigDict(frozen=True)

    table: str
    column: str


class ColumnSchema(BaseModel):
    """Database column schema"""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str  # spelling from the dump, kept for diagnostics
    affinity: Affinity = "TEXT"
    nullable: bool = True
    primary_key: bool = False
    foreign_key: Optional[ForeignKeyRef] = None


class TableSchema(BaseModel):
    """Database table schema"""
    model_config = ConfigDict(frozen=True)

    name: str
    columns: List[ColumnSchema] = []
    indexes: List[str] = []

    def column(self, name: str) -> Optional[ColumnSchema]:
        """Case-insensitive column lookup"""
        lowered = name.lower()
        for col in self.columns:
            if col.name.lower() == lowered:
                return col
        return None


class ColumnRef(BaseModel):
    """A table.column endpoint of a relationship"""
    model_config = ConfigDict(frozen=True)

    table: str
    column: str


class Relationship(BaseModel):
    """Directed foreign-key edge between two columns"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: ColumnRef = Field(alias="from")
    target: ColumnRef = Field(alias="to")
    type: RelationshipType = "many-to-one"


class SchemaMetadata(BaseModel):
    """Provenance of an extracted schema"""
    model_config = ConfigDict(frozen=True)

    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    file_name: str
    total_tables: int = 0
    strategy: ExtractionStrategy = "empty"


class DatabaseSchema(BaseModel):
    """Complete schema inferred from one uploaded dump"""
    model_config = ConfigDict(frozen=True)

    tables: List[TableSchema] = []
    relationships: List[Relationship] = []
    metadata: SchemaMetadata

    def table(self, name: str) -> Optional[TableSchema]:
        """Case-insensitive table lookup"""
        lowered = name.lower()
        for table in self.tables:
            if table.name.lower() == lowered:
                return table
        return None
