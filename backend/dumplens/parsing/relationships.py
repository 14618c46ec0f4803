"""Foreign-key relationship resolution"""

from typing import Iterable, List

from dumplens.models.schema import ColumnRef, Relationship, TableSchema

# No cardinality analysis is done against the data or the referenced key:
# every foreign-key column is reported with this heuristic default.
DEFAULT_RELATIONSHIP_TYPE = "many-to-one"


def resolve_relationships(tables: Iterable[TableSchema]) -> List[Relationship]:
    """One edge per foreign-key column, in table then column order."""
    relationships: List[Relationship] = []
    for table in tables:
        for column in table.columns:
            if column.foreign_key is None:
                continue
            relationships.append(
                Relationship(
                    source=ColumnRef(table=table.name, column=column.name),
                    target=ColumnRef(
                        table=column.foreign_key.table,
                        column=column.foreign_key.column,
                    ),
                    type=DEFAULT_RELATIONSHIP_TYPE,
                )
            )
    return relationships
