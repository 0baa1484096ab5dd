"""
Tools module for the NL2SQL engine.

This module exposes SQL generation and read-only execution as
function-calling tools.
"""

from .execute_sql_tool import EXECUTE_SQL_TOOL_SCHEMA, ExecuteSqlTool
from .nl2sql_tool import NL2SQL_TOOL_SCHEMA, Nl2SqlTool, ToolResult

__all__ = [
    "Nl2SqlTool",
    "ExecuteSqlTool",
    "ToolResult",
    "NL2SQL_TOOL_SCHEMA",
    "EXECUTE_SQL_TOOL_SCHEMA",
]
