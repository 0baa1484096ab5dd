"""
Reduction of query results into label/value options.

Executes an already-validated statement through the SQL execution
provider and turns each returned row into an OptionItem.
"""

import logging
from typing import Any, Mapping, Union

from ..data_sources.base_data_source import QueryExecutionError, SqlExecutionProvider
from .schema_model import GeneratedStatement, OptionItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 1000


class ResultToOptionMapper:
    """Runs a statement and maps its rows to OptionItems."""

    def __init__(self, execution_provider: SqlExecutionProvider):
        self.execution_provider = execution_provider

    def execute(
        self,
        system_id: str,
        statement: Union[GeneratedStatement, str],
        label_column: str,
        value_column: str,
        max_rows: int = DEFAULT_MAX_ROWS,
    ) -> list[OptionItem]:
        """
        Execute a statement and map each row to an OptionItem.

        Row order is preserved as returned; nothing is sorted or
        deduplicated. A missing or null label/value becomes "".

        Args:
            system_id: Identifier of the tenant system
            statement: The validated statement (or its SQL text)
            label_column: Column providing the option label
            value_column: Column providing the option value
            max_rows: Row cap passed to the execution provider

        Returns:
            One OptionItem per returned row

        Raises:
            QueryExecutionError: If execution fails
        """
        sql = statement.sql if isinstance(statement, GeneratedStatement) else statement

        try:
            result = self.execution_provider.execute(system_id, sql, max_rows)
        except QueryExecutionError:
            raise
        except Exception as e:
            logger.error(f"Query execution failed for systemId={system_id}: {e}")
            raise QueryExecutionError(f"Failed to execute SQL query: {e}") from e

        options = [
            OptionItem(
                label=self._to_text(row, label_column),
                value=self._to_text(row, value_column),
            )
            for row in result.rows
        ]

        logger.info(
            f"Mapped {len(options)} options for systemId={system_id} "
            f"(label={label_column}, value={value_column})"
        )
        return options

    @staticmethod
    def _to_text(row: Mapping[str, Any], column: str) -> str:
        value = row.get(column)
        if value is None:
            return ""
        return str(value)
