"""
Data Sources module for the NL2SQL engine.

This module provides the collaborator contracts the engine consumes and a
local SQLite implementation of them.
"""

from .base_data_source import (
    ColumnInfo,
    DatasourceDefinition,
    DatasourceProvider,
    QueryExecutionError,
    QueryResult,
    SchemaProvider,
    SqlExecutionProvider,
    TableInfo,
)
from .registry import LocalDataSourceRegistry
from .sqlite_data_source import SQLiteDataSource

__all__ = [
    # Contracts
    "SchemaProvider",
    "DatasourceProvider",
    "SqlExecutionProvider",
    "QueryExecutionError",
    # Metadata
    "ColumnInfo",
    "TableInfo",
    "DatasourceDefinition",
    "QueryResult",
    # Local SQLite
    "SQLiteDataSource",
    "LocalDataSourceRegistry",
]
