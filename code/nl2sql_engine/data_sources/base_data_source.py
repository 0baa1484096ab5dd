"""
Collaborator interfaces for the NL2SQL engine.

This module defines the contracts the engine consumes: a schema provider
for raw table metadata, a datasource provider for dialect lookup, and a
SQL execution provider for running already-validated statements.
Implementations handle connections, introspection and execution.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass
class ColumnInfo:
    """Raw metadata for a database column."""

    name: str
    type: str = ""
    description: Optional[str] = None
    primary: bool = False
    nullable: bool = True
    sample_values: List[str] = field(default_factory=list)
    value_mapping: Dict[str, str] = field(default_factory=dict)


@dataclass
class TableInfo:
    """Raw metadata for a database table."""

    name: str
    description: Optional[str] = None
    columns: List[ColumnInfo] = field(default_factory=list)
    primary_keys: List[str] = field(default_factory=list)
    foreign_keys: List[str] = field(default_factory=list)


@dataclass
class DatasourceDefinition:
    """Datasource registered for a system."""

    system_id: str
    type: Optional[str] = None
    name: Optional[str] = None
    database_name: Optional[str] = None


@dataclass
class QueryResult:
    """Result of a query execution."""

    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    sql: str = ""
    execution_time_ms: float = 0.0
    truncated: bool = False

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with columns in result order."""
        return pd.DataFrame(self.rows, columns=self.columns)


class SchemaProvider(ABC):
    """Source of raw table metadata for a system."""

    @abstractmethod
    def get_table_list(self, system_id: str) -> List[TableInfo]:
        """
        Get table metadata for a system.

        Args:
            system_id: Identifier of the tenant system.

        Returns:
            List of TableInfo objects, empty if the system has no tables.
        """
        pass


class DatasourceProvider(ABC):
    """Lookup of datasource definitions by system."""

    @abstractmethod
    def get_by_system_id(self, system_id: str) -> Optional[DatasourceDefinition]:
        """
        Get the datasource registered for a system.

        Returns:
            The DatasourceDefinition, or None if nothing is registered.
        """
        pass


class SqlExecutionProvider(ABC):
    """Executes read-only SQL against a system's datasource."""

    @abstractmethod
    def execute(
        self,
        system_id: str,
        sql: str,
        max_rows: int = 1000,
    ) -> QueryResult:
        """
        Execute a SQL statement and return at most max_rows rows.

        Args:
            system_id: Identifier of the tenant system.
            sql: A statement that already passed read-only validation.
            max_rows: Row cap for the result.

        Returns:
            QueryResult with column names and rows.

        Raises:
            QueryExecutionError: If execution fails.
        """
        pass


class QueryExecutionError(Exception):
    """Exception raised when executing a statement fails."""

    pass
