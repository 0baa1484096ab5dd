"""Function-calling tool that turns a natural language question into SQL.

The tool only generates and validates the statement; executing it is left
to a separate ``execute_sql`` tool.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..nl2sql.schema_model import GeneratedStatement
from ..nl2sql.sql_generator import NL2SQLGenerator

logger = logging.getLogger(__name__)

TOOL_NAME = "nl2sql"

NL2SQL_TOOL_SCHEMA: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": (
            "Convert a natural language question into a read-only SQL query "
            "for the given system. Returns the SQL; run it with execute_sql."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "systemId": {
                    "type": "string",
                    "description": "Identifier of the system whose database is queried",
                },
                "query": {
                    "type": "string",
                    "description": "The natural language question",
                },
                "evidence": {
                    "type": "string",
                    "description": "Optional extra context or hints for the query",
                },
            },
            "required": ["systemId", "query"],
        },
    },
}


@dataclass
class ToolResult:
    """Outcome of a tool invocation."""

    success: bool
    content: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.content


class Nl2SqlTool:
    """Tool for generating SQL from natural language questions."""

    name = TOOL_NAME
    schema = NL2SQL_TOOL_SCHEMA

    def __init__(self, generator: NL2SQLGenerator):
        self.generator = generator

    @property
    def enabled(self) -> bool:
        return self.generator.config.enabled

    def execute(self, **kwargs) -> ToolResult:
        """
        Generate SQL from keyword arguments.

        Args:
            systemId: Identifier of the tenant system (required)
            query: The natural language question (required)
            evidence: Optional extra context

        Returns:
            ToolResult whose content is the formatted SQL or an error message
        """
        system_id = kwargs.get("systemId")
        query = kwargs.get("query")
        evidence: Optional[str] = kwargs.get("evidence")

        if not self.enabled:
            return ToolResult(False, "Error: NL2SQL is disabled")
        if not system_id:
            return ToolResult(False, "Error: systemId parameter is required")
        if not query:
            return ToolResult(False, "Error: query parameter is required")

        logger.info(f"nl2sql tool called: systemId={system_id}, query={query[:50]}")

        try:
            statement = self.generator.generate_sql(system_id, query, evidence)
        except Exception as e:
            logger.error(f"Error generating SQL: {str(e)}")
            return ToolResult(False, f"Error generating SQL: {e}")

        return ToolResult(
            True,
            self._format_statement(statement),
            data=statement.to_dict(),
        )

    def call(self, tool_input: str) -> str:
        """
        Invoke the tool with a JSON object of arguments.

        Args:
            tool_input: JSON text such as '{"systemId": "s1", "query": "..."}'

        Returns:
            The formatted SQL, or an error message
        """
        try:
            arguments = json.loads(tool_input) if tool_input else {}
        except json.JSONDecodeError as e:
            return f"Error generating SQL: invalid tool input: {e}"

        if not isinstance(arguments, dict):
            return "Error generating SQL: tool input must be a JSON object"

        return self.execute(**arguments).content

    @staticmethod
    def _format_statement(statement: GeneratedStatement) -> str:
        return (
            f"Generated SQL:\n```sql\n{statement.sql}\n```\n\n"
            "You can now execute this SQL using execute_sql tool."
        )
