"""
Prompt Builder for NL2SQL generation.

This module renders the schema snapshot and the user's question into the
two prompts the engine sends to the language model: a filter prompt that
asks for the relevant tables, and a generation prompt that asks for a
single SELECT statement. Rendering is pure and deterministic.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .schema_model import ColumnModel, SchemaModel, TableModel

logger = logging.getLogger(__name__)


@dataclass
class PromptConfig:
    """Configuration for prompt building."""

    default_evidence: str = "none"
    execution_description: str = "Generate SQL based on natural language"


# Default SQL generation prompt template
DEFAULT_GENERATION_TEMPLATE = """You are an expert {dialect} SQL analyst.
Your task is to convert a natural language question into one accurate, read-only SQL query.

## Important Rules:
1. Generate ONLY a single SELECT statement - no INSERT, UPDATE, DELETE, DDL or permission statements
2. Use only the tables and columns listed in the schema below
3. Write SQL that is valid for the {dialect} dialect
4. Use ValueMapping entries to translate business labels into stored values
5. Do not explain the query

## Output Format:
Return the SQL wrapped in a fenced code block, exactly like:
```sql
SELECT ...
```

## Database Schema:
{schema_info}

## Evidence:
{evidence}

## Task:
{execution_description}

## Question:
{question}
"""

# Default schema filter prompt template
DEFAULT_FILTER_TEMPLATE = """You are a database expert helping to narrow a large schema.
Given a user question and the list of available tables, select the tables that are needed to answer the question.

## Available Tables:
{tables}

## Question:
{question}

## Output Format:
Respond with ONLY a JSON array of table names copied from the list above, for example:
["table_a", "table_b"]
"""


class PromptBuilder:
    """
    Builds prompts for NL2SQL generation.

    This class renders:
    - The schema block (tables, columns, keys, samples, value mappings)
    - The SQL generation prompt
    - The schema filter prompt
    """

    def __init__(
        self,
        config: Optional[PromptConfig] = None,
        generation_template: Optional[str] = None,
        filter_template: Optional[str] = None,
    ):
        """
        Initialize the prompt builder.

        Args:
            config: Optional prompt configuration
            generation_template: Optional custom SQL generation template
            filter_template: Optional custom schema filter template
        """
        self.config = config or PromptConfig()
        self.generation_template = DEFAULT_GENERATION_TEMPLATE
        self.filter_template = DEFAULT_FILTER_TEMPLATE

        if generation_template:
            self.set_custom_generation_template(generation_template)
        if filter_template:
            self.set_custom_filter_template(filter_template)

    def build_schema_info(self, schema: SchemaModel) -> str:
        """
        Render a schema snapshot as the schema block of a prompt.

        Args:
            schema: The schema snapshot to render

        Returns:
            Schema description with one line per column
        """
        parts = [f"【DB_ID】{schema.name or ''}"]

        for table in schema.tables:
            parts.append(self._format_table_header(table))
            parts.append("[")
            parts.append(
                ",\n".join(self._format_column(c, table) for c in table.columns)
            )
            parts.append("]")

        text = "\n".join(parts) + "\n"

        if schema.foreign_keys:
            text += "【Foreign keys】\n" + "\n".join(schema.foreign_keys)

        return text

    def build_generation_prompt(
        self,
        dialect: str,
        question: str,
        schema_info: str,
        evidence: Optional[str] = None,
        execution_description: Optional[str] = None,
    ) -> str:
        """
        Build the SQL generation prompt.

        Args:
            dialect: SQL dialect the statement must target
            question: The natural language question
            schema_info: Schema block from build_schema_info
            evidence: Optional extra context, defaults to the configured literal
            execution_description: Optional description of what the SQL is for

        Returns:
            Complete prompt string
        """
        if not evidence:
            evidence = self.config.default_evidence
        if not execution_description:
            execution_description = self.config.execution_description

        return self.generation_template.format(
            dialect=dialect,
            question=question,
            schema_info=schema_info,
            evidence=evidence,
            execution_description=execution_description,
        )

    def build_filter_prompt(self, question: str, table_names: list[str]) -> str:
        """
        Build the prompt asking which tables are relevant to a question.

        Args:
            question: The natural language question
            table_names: All table names of the schema, in declared order

        Returns:
            Complete prompt string
        """
        return self.filter_template.format(
            question=question,
            tables=", ".join(table_names),
        )

    def _format_table_header(self, table: TableModel) -> str:
        header = f"# Table: {table.name}"
        if table.description is not None and table.description != table.name:
            header += f", {table.description}"
        return header

    def _format_column(self, column: ColumnModel, table: TableModel) -> str:
        line = f"({column.name}"

        if column.type:
            line += f":{column.type.upper()}"

        if column.description is not None and column.description != column.name:
            line += f", {column.description}"

        if column.name in table.primary_keys:
            line += ", Primary Key"

        if column.sample_values and column.name != "id":
            line += f", Examples: [{','.join(column.sample_values)}]"

        if column.value_mapping:
            mappings = ", ".join(f"{k}={v}" for k, v in column.value_mapping.items())
            line += f", ValueMapping: {{{mappings}}}"

        return line + ")"

    def set_custom_generation_template(self, template: str) -> None:
        """Set a custom SQL generation template."""
        self._check_placeholders(
            template,
            ["{dialect}", "{question}", "{schema_info}", "{evidence}",
             "{execution_description}"],
        )
        self.generation_template = template
        logger.info("Custom generation template set")

    def set_custom_filter_template(self, template: str) -> None:
        """Set a custom schema filter template."""
        self._check_placeholders(template, ["{question}", "{tables}"])
        self.filter_template = template
        logger.info("Custom filter template set")

    @staticmethod
    def _check_placeholders(template: str, required: list[str]) -> None:
        for placeholder in required:
            if placeholder not in template:
                raise ValueError(
                    f"Template must contain {placeholder} placeholder"
                )
