"""Function-calling tool that runs a read-only SQL query for a system.

Pairs with the ``nl2sql`` tool: the model generates a statement there and
runs it here. Every statement goes through the execution provider, which
validates it as read-only before it reaches the database.
"""

import json
import logging
from typing import Any, Dict

from ..data_sources.base_data_source import QueryResult, SqlExecutionProvider
from ..nl2sql.errors import SecurityViolationError
from .nl2sql_tool import ToolResult

logger = logging.getLogger(__name__)

TOOL_NAME = "execute_sql"
DEFAULT_MAX_ROWS = 1000

EXECUTE_SQL_TOOL_SCHEMA: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": (
            "Execute a read-only SQL query against a system's database. "
            "Only SELECT statements are allowed. Returns a markdown table."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "systemId": {
                    "type": "string",
                    "description": "Identifier of the system whose database is queried",
                },
                "sql": {
                    "type": "string",
                    "description": "SQL SELECT query to execute",
                },
                "maxRows": {
                    "type": "integer",
                    "description": f"Maximum number of rows to return (default: {DEFAULT_MAX_ROWS})",
                },
            },
            "required": ["systemId", "sql"],
        },
    },
}


class ExecuteSqlTool:
    """Tool for running read-only SQL through an execution provider."""

    name = TOOL_NAME
    schema = EXECUTE_SQL_TOOL_SCHEMA

    def __init__(self, execution_provider: SqlExecutionProvider):
        self.execution_provider = execution_provider

    def execute(self, **kwargs) -> ToolResult:
        """
        Execute SQL from keyword arguments.

        Args:
            systemId: Identifier of the tenant system (required)
            sql: The SELECT statement to run (required)
            maxRows: Optional row cap, defaults to 1000

        Returns:
            ToolResult whose content is a markdown table or an error message
        """
        system_id = kwargs.get("systemId")
        sql = kwargs.get("sql")

        if not system_id or not str(system_id).strip():
            return ToolResult(False, "Error: systemId parameter is required")
        if not sql or not str(sql).strip():
            return ToolResult(False, "Error: sql parameter is required")

        try:
            max_rows = int(kwargs.get("maxRows", DEFAULT_MAX_ROWS))
            result = self.execution_provider.execute(system_id, sql, max_rows)
        except SecurityViolationError as e:
            logger.error(f"Security violation for systemId={system_id}: {e}")
            return ToolResult(False, f"Security violation: {e}")
        except Exception as e:
            logger.error(f"Error executing SQL: {str(e)}", exc_info=True)
            return ToolResult(False, f"Error executing SQL: {e}")

        logger.info(
            f"execute_sql succeeded: systemId={system_id}, rows={result.row_count}, "
            f"time={result.execution_time_ms:.1f}ms"
        )
        return ToolResult(
            True,
            self._format_result(result),
            data={"columns": result.columns, "rows": result.rows, "truncated": result.truncated},
        )

    def call(self, tool_input: str) -> str:
        """
        Invoke the tool with a JSON object of arguments.

        Args:
            tool_input: JSON text such as '{"systemId": "s1", "sql": "SELECT 1"}'

        Returns:
            The result table, or an error message
        """
        try:
            arguments = json.loads(tool_input) if tool_input else {}
        except json.JSONDecodeError as e:
            return f"Error executing SQL: invalid tool input: {e}"

        if not isinstance(arguments, dict):
            return "Error executing SQL: tool input must be a JSON object"

        return self.execute(**arguments).content

    @staticmethod
    def _format_result(result: QueryResult) -> str:
        """Format a query result as a markdown table."""
        if not result.columns:
            return "No results."

        lines = [
            "| " + " | ".join(str(col) for col in result.columns) + " |",
            "| " + " | ".join("---" for _ in result.columns) + " |",
        ]
        for row in result.rows:
            cells = []
            for col in result.columns:
                value = row.get(col)
                # Escape pipe characters in values
                cells.append("NULL" if value is None else str(value).replace("|", "\\|"))
            lines.append("| " + " | ".join(cells) + " |")

        if result.truncated:
            lines.append(f"\n*Showing first {result.row_count} rows*")

        return "\n".join(lines)
