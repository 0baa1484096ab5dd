"""
In-memory schema snapshot and result types for NL2SQL generation.

A SchemaModel is built fresh for every request and never cached by the
engine. Filtering produces a narrowed copy rather than editing the
snapshot it was given.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

MAX_SAMPLE_VALUES = 3


@dataclass
class ColumnModel:
    """A column as it is presented to the language model."""

    name: str
    type: str = ""
    description: Optional[str] = None
    sample_values: list[str] = field(default_factory=list)
    value_mapping: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.name == "id":
            self.sample_values = []
        else:
            self.sample_values = [
                v for v in self.sample_values if v
            ][:MAX_SAMPLE_VALUES]


@dataclass
class TableModel:
    """A table with its columns and primary key names."""

    name: str
    description: Optional[str] = None
    columns: list[ColumnModel] = field(default_factory=list)
    primary_keys: set[str] = field(default_factory=set)

    def __post_init__(self):
        self.primary_keys = set(self.primary_keys)
        unknown = self.primary_keys - set(self.column_names)
        if unknown:
            raise ValueError(
                f"Primary keys {sorted(unknown)} are not columns of table "
                f"'{self.name}'"
            )

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


@dataclass
class SchemaModel:
    """
    One tenant's database shape for a single request.

    The table count is derived from the table list, so the two can never
    disagree, including after filtering.
    """

    name: str
    tables: list[TableModel] = field(default_factory=list)
    foreign_keys: list[str] = field(default_factory=list)

    @property
    def table_count(self) -> int:
        return len(self.tables)

    @property
    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def retain_tables(self, names: Iterable[str]) -> "SchemaModel":
        """
        Return a copy keeping only the named tables, in declared order.

        Matching is case-insensitive. Foreign keys are kept verbatim.
        """
        wanted = {n.lower() for n in names}
        return SchemaModel(
            name=self.name,
            tables=[t for t in self.tables if t.name.lower() in wanted],
            foreign_keys=list(self.foreign_keys),
        )


@dataclass
class GeneratedStatement:
    """A validated SQL statement and the dialect it targets."""

    sql: str
    dialect: str
    question: str = ""
    schema_table_count: int = 0
    model_calls: int = 0
    generation_time_ms: float = 0.0

    def __post_init__(self):
        if not self.sql or not self.sql.strip():
            raise ValueError("GeneratedStatement requires non-empty SQL")

    def __str__(self) -> str:
        return self.sql

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "sql": self.sql,
            "dialect": self.dialect,
            "question": self.question,
            "schema_table_count": self.schema_table_count,
            "model_calls": self.model_calls,
            "generation_time_ms": self.generation_time_ms,
        }


@dataclass(frozen=True)
class OptionItem:
    """A label/value pair for a selection list."""

    label: str
    value: str

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}
