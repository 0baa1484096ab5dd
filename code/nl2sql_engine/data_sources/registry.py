"""
Registry of local data sources keyed by system id.

LocalDataSourceRegistry implements the schema, datasource and SQL
execution contracts over SQLite data sources, so the NL2SQL engine can
run end to end without external services.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..nl2sql.query_validator import SqlSecurityValidator
from .base_data_source import (
    DatasourceDefinition,
    DatasourceProvider,
    QueryExecutionError,
    QueryResult,
    SchemaProvider,
    SqlExecutionProvider,
    TableInfo,
)
from .sqlite_data_source import SQLiteDataSource

logger = logging.getLogger(__name__)


class LocalDataSourceRegistry(SchemaProvider, DatasourceProvider, SqlExecutionProvider):
    """In-memory mapping of system ids to SQLite data sources."""

    def __init__(self, validator: Optional[SqlSecurityValidator] = None):
        self._sources: Dict[str, Tuple[SQLiteDataSource, DatasourceDefinition]] = {}
        self.validator = validator or SqlSecurityValidator()

    def register(
        self,
        system_id: str,
        data_source: SQLiteDataSource,
        dialect: Optional[str] = "sqlite",
        name: Optional[str] = None,
    ) -> DatasourceDefinition:
        """
        Register a data source for a system, connecting it if needed.

        Args:
            system_id: Identifier of the tenant system
            data_source: The SQLite data source holding the system's tables
            dialect: Dialect reported to the engine (None for unknown)
            name: Optional display name

        Returns:
            The DatasourceDefinition stored for the system
        """
        if not system_id:
            raise ValueError("system_id cannot be empty")

        data_source.connect()
        definition = DatasourceDefinition(
            system_id=system_id,
            type=dialect,
            name=name or system_id,
        )
        self._sources[system_id] = (data_source, definition)
        logger.info("Registered data source for systemId=%s", system_id)
        return definition

    def unregister(self, system_id: str) -> None:
        """Remove a system and close its data source."""
        entry = self._sources.pop(system_id, None)
        if entry:
            entry[0].disconnect()

    def close(self) -> None:
        """Close every registered data source."""
        for system_id in list(self._sources):
            self.unregister(system_id)

    def get_by_system_id(self, system_id: str) -> Optional[DatasourceDefinition]:
        entry = self._sources.get(system_id)
        return entry[1] if entry else None

    def get_table_list(self, system_id: str) -> List[TableInfo]:
        entry = self._sources.get(system_id)
        if entry is None:
            return []
        return entry[0].get_tables()

    def execute(
        self,
        system_id: str,
        sql: str,
        max_rows: int = 1000,
    ) -> QueryResult:
        """
        Execute a read-only statement for a system.

        Raises:
            ValueError: If max_rows is not positive
            SecurityViolationError: If the statement is not read-only
            QueryExecutionError: If the system is unknown or the query fails
        """
        logger.info("Executing SQL for systemId=%s, maxRows=%d", system_id, max_rows)

        if max_rows <= 0:
            raise ValueError(f"maxRows must be positive, got: {max_rows}")

        self.validator.validate_read_only(sql)

        entry = self._sources.get(system_id)
        if entry is None:
            raise QueryExecutionError(f"Datasource not found for systemId: {system_id}")

        try:
            return entry[0].execute_query(sql, max_rows)
        except Exception as e:
            logger.error("SQL execution failed: %s", e)
            raise QueryExecutionError(f"Failed to execute SQL query: {e}") from e
