"""
Local SQLite Data Source for running the NL2SQL engine without a server.

This module provides a SQLite-based data source that loads CSV files or
pandas DataFrames into a database, introspects its tables for schema
snapshots, and executes read-only queries with a row cap.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .base_data_source import ColumnInfo, QueryResult, TableInfo

logger = logging.getLogger(__name__)

SAMPLE_VALUE_LIMIT = 3


class SQLiteDataSource:
    """
    SQLite-based data source for local use and tests.

    Tables are loaded from CSV files or DataFrames when the source
    connects. Optional descriptions and value mappings enrich the
    introspected metadata:

    - ``descriptions`` maps ``"table"`` or ``"table.column"`` to text
    - ``value_mappings`` maps ``"table.column"`` to ``{raw: label}``
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        data_files: Optional[Dict[str, str]] = None,
        descriptions: Optional[Dict[str, str]] = None,
        value_mappings: Optional[Dict[str, Dict[str, str]]] = None,
    ):
        """
        Initialize SQLite data source.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory
            data_files: Dict mapping table names to CSV file paths
            descriptions: Optional table and column descriptions
            value_mappings: Optional per-column value mappings
        """
        self._db_path = db_path
        self._data_files = dict(data_files or {})
        self._dataframes: Dict[str, pd.DataFrame] = {}
        self._descriptions = dict(descriptions or {})
        self._value_mappings = dict(value_mappings or {})
        self._connection: Optional[sqlite3.Connection] = None

    @classmethod
    def from_dataframes(
        cls,
        dataframes: Dict[str, pd.DataFrame],
        **kwargs,
    ) -> "SQLiteDataSource":
        """
        Create a SQLiteDataSource from pandas DataFrames directly.

        Args:
            dataframes: Dict mapping table names to DataFrames

        Returns:
            Configured SQLiteDataSource instance
        """
        instance = cls(db_path=":memory:", **kwargs)
        instance._dataframes = dict(dataframes)
        return instance

    @classmethod
    def from_csv_dir(cls, data_dir: str, **kwargs) -> "SQLiteDataSource":
        """Create a SQLiteDataSource with one table per CSV file in a directory."""
        data_path = Path(data_dir)
        csv_files = {p.stem: str(p) for p in sorted(data_path.glob("*.csv"))}
        logger.info("Found %d CSV files in %s", len(csv_files), data_dir)
        return cls(db_path=":memory:", data_files=csv_files, **kwargs)

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> None:
        """Connect to SQLite database and load data."""
        if self._connection is not None:
            return

        logger.info("Connecting to SQLite database: %s", self._db_path)
        self._connection = sqlite3.connect(self._db_path, check_same_thread=False)
        self._connection.execute("PRAGMA foreign_keys = ON")

        for table_name, df in self._dataframes.items():
            self._load_dataframe_to_table(table_name, df)

        for table_name, file_path in self._data_files.items():
            self._load_csv_to_table(table_name, file_path)

        logger.info(
            "SQLite connection established with %d tables",
            len(self.get_table_names()),
        )

    def disconnect(self) -> None:
        """Close SQLite connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("SQLite connection closed")

    def execute_script(self, script: str) -> None:
        """Run DDL/DML setup statements (not used for generated SQL)."""
        self._require_connection().executescript(script)

    def _load_csv_to_table(self, table_name: str, csv_path: str) -> None:
        """Load a CSV file into a SQLite table."""
        if not Path(csv_path).exists():
            logger.warning("File not found: %s", csv_path)
            return

        logger.info("Loading CSV %s from %s", table_name, csv_path)
        df = pd.read_csv(csv_path, low_memory=False)
        self._load_dataframe_to_table(table_name, df)

    def _load_dataframe_to_table(self, table_name: str, df: pd.DataFrame) -> None:
        """Load a pandas DataFrame into a SQLite table."""
        df = df.copy()
        # Clean column names (remove spaces, special chars)
        df.columns = [
            str(col).strip().replace(" ", "_").replace("-", "_").replace(".", "_")
            for col in df.columns
        ]

        df.to_sql(table_name, self._connection, if_exists="replace", index=False)

        logger.info(
            "Loaded %d rows into %s (%d columns)",
            len(df), table_name, len(df.columns)
        )

    def get_table_names(self) -> List[str]:
        """Get list of available tables, in creation order."""
        cursor = self._require_connection().execute(
            "SELECT name FROM sqlite_master WHERE type='table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY rowid"
        )
        return [row[0] for row in cursor.fetchall()]

    def get_tables(self) -> List[TableInfo]:
        """Introspect all tables with columns, keys and sample values."""
        return [self._describe_table(name) for name in self.get_table_names()]

    def _describe_table(self, table_name: str) -> TableInfo:
        conn = self._require_connection()
        quoted = _quote_identifier(table_name)

        columns = []
        primary_keys = []
        for _, name, col_type, notnull, _, pk in conn.execute(
            f"PRAGMA table_info({quoted})"
        ).fetchall():
            key = f"{table_name}.{name}"
            columns.append(ColumnInfo(
                name=name,
                type=col_type or "",
                description=self._descriptions.get(key),
                primary=bool(pk),
                nullable=not notnull,
                sample_values=self._get_sample_values(table_name, name),
                value_mapping=dict(self._value_mappings.get(key, {})),
            ))
            if pk:
                primary_keys.append(name)

        foreign_keys = [
            f"{table_name}.{from_col}={ref_table}.{to_col}"
            for _, _, ref_table, from_col, to_col, *_ in conn.execute(
                f"PRAGMA foreign_key_list({quoted})"
            ).fetchall()
        ]

        return TableInfo(
            name=table_name,
            description=self._descriptions.get(table_name),
            columns=columns,
            primary_keys=primary_keys,
            foreign_keys=foreign_keys,
        )

    def _get_sample_values(self, table_name: str, column_name: str) -> List[str]:
        """Get up to three distinct non-null values from a column."""
        column = _quote_identifier(column_name)
        cursor = self._require_connection().execute(
            f"SELECT DISTINCT {column} FROM {_quote_identifier(table_name)} "
            f"WHERE {column} IS NOT NULL LIMIT {SAMPLE_VALUE_LIMIT}"
        )
        return [str(row[0]) for row in cursor.fetchall()]

    def execute_query(self, query: str, max_rows: int) -> QueryResult:
        """Execute a SQL query against SQLite, returning at most max_rows rows."""
        conn = self._require_connection()
        start_time = datetime.now()

        logger.debug("Executing query: %s", query[:200])
        cursor = conn.execute(query)
        columns = [d[0] for d in cursor.description] if cursor.description else []
        fetched = cursor.fetchmany(max_rows + 1)
        truncated = len(fetched) > max_rows

        rows: List[Dict[str, Any]] = [
            dict(zip(columns, row)) for row in fetched[:max_rows]
        ]

        execution_time = (datetime.now() - start_time).total_seconds() * 1000
        logger.info("Query executed: %d rows in %.1fms", len(rows), execution_time)

        return QueryResult(
            columns=columns,
            rows=rows,
            sql=query,
            execution_time_ms=execution_time,
            truncated=truncated,
        )

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise RuntimeError("Not connected to database")
        return self._connection

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        return False


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'
