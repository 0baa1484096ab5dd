"""
SQL Generator for NL2SQL conversion.

This module provides the generation pipeline: input validation, dialect
lookup, schema snapshot, optional relevance filtering, prompt assembly,
one language model call, SQL extraction and read-only validation. The
pipeline is synchronous and keeps no state between requests.
"""

import logging
import re
from datetime import datetime
from typing import Optional

from ..data_sources.base_data_source import (
    DatasourceProvider,
    SchemaProvider,
    SqlExecutionProvider,
)
from ..helpers.config_helper import NL2SQLConfig
from ..helpers.llm_helper import ChatModel
from .errors import (
    InvalidArgumentError,
    NL2SQLError,
    SqlGenerationError,
)
from .option_mapper import ResultToOptionMapper
from .prompt_builder import PromptBuilder
from .query_validator import SqlSecurityValidator
from .schema_builder import SchemaSnapshotBuilder
from .schema_filter import SchemaRelevanceFilter
from .schema_model import GeneratedStatement, OptionItem

logger = logging.getLogger(__name__)

_FENCE = "```"
_SQL_FENCE = re.compile(r"```sql(?!\w)(.*?)```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```(.*?)```", re.DOTALL)
_LANGUAGE_TAG = re.compile(r"[A-Za-z][\w+#.-]*")

# Words a bare statement can open with; never read as a fence language tag.
_STATEMENT_WORDS = frozenset({
    "SELECT", "WITH", "VALUES", "EXPLAIN", "SHOW", "DESCRIBE", "DESC",
    "INSERT", "UPDATE", "DELETE", "MERGE", "REPLACE", "DROP", "CREATE",
    "ALTER", "TRUNCATE", "GRANT", "REVOKE", "CALL", "EXEC", "EXECUTE",
})


class NL2SQLGenerator:
    """
    Generates read-only SQL from natural language.

    This class orchestrates:
    - Schema snapshot building for the tenant
    - Relevance filtering for large schemas (at most one extra model call)
    - Prompt assembly and a single generation call
    - SQL extraction and read-only validation
    - Optional execution into label/value options
    """

    def __init__(
        self,
        schema_provider: SchemaProvider,
        chat_model: ChatModel,
        execution_provider: SqlExecutionProvider,
        datasource_provider: DatasourceProvider,
        config: Optional[NL2SQLConfig] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        validator: Optional[SqlSecurityValidator] = None,
    ):
        """
        Initialize the NL2SQL generator.

        Args:
            schema_provider: Source of raw table metadata
            chat_model: Language model used for filtering and generation
            execution_provider: Executes statements for generate_and_execute
            datasource_provider: Looks up the dialect of a system
            config: Optional configuration (threshold, dialect, row cap)
            prompt_builder: Optional prompt builder
            validator: Optional read-only validator
        """
        self.config = config or NL2SQLConfig()
        self.chat_model = chat_model
        self.datasource_provider = datasource_provider
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.validator = validator or SqlSecurityValidator()

        self.schema_builder = SchemaSnapshotBuilder(schema_provider)
        self.schema_filter = SchemaRelevanceFilter(
            chat_model,
            prompt_builder=self.prompt_builder,
            threshold=self.config.schema_filter_threshold,
        )
        self.option_mapper = ResultToOptionMapper(execution_provider)

        logger.info(
            f"NL2SQLGenerator initialized with schema filter threshold: "
            f"{self.config.schema_filter_threshold}"
        )

    def generate_sql(
        self,
        system_id: str,
        question: str,
        evidence: Optional[str] = None,
    ) -> GeneratedStatement:
        """
        Generate a validated read-only SQL statement from a question.

        Args:
            system_id: Identifier of the tenant system
            question: The natural language question
            evidence: Optional extra context for the model

        Returns:
            GeneratedStatement with the SQL and its dialect

        Raises:
            InvalidArgumentError: If system_id or question is blank
            SchemaNotFoundError: If the system has no discoverable schema
            SecurityViolationError: If the model produced a non read-only statement
            SqlGenerationError: If the model call or SQL extraction fails
        """
        self._validate_input(system_id, question)

        logger.info(f"Generating SQL for systemId={system_id}, question={question[:50]}")
        start_time = datetime.now()

        try:
            dialect = self._resolve_dialect(system_id)
            schema = self.schema_builder.build_schema(system_id)

            filter_result = self.schema_filter.filter(schema, question)
            if filter_result.succeeded:
                schema = filter_result.schema
            else:
                logger.warning(
                    f"Using unfiltered schema ({schema.table_count} tables) for "
                    f"systemId={system_id}"
                )

            prompt = self.prompt_builder.build_generation_prompt(
                dialect=dialect,
                question=question,
                schema_info=self.prompt_builder.build_schema_info(schema),
                evidence=evidence,
            )
            logger.debug(f"Prompt built, length={len(prompt)}")

            response = self._call_model(prompt)
            sql = self.extract_sql(response)

            self.validator.validate_read_only(sql)

        except NL2SQLError as e:
            logger.error(f"NL2SQL error for systemId={system_id}: {e}")
            raise
        except Exception as e:
            logger.error(f"NL2SQL generation failed for systemId={system_id}: {e}")
            raise SqlGenerationError(str(e)) from e

        generation_time = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Generated SQL in {generation_time:.0f}ms, length={len(sql)}"
        )

        return GeneratedStatement(
            sql=sql,
            dialect=dialect,
            question=question,
            schema_table_count=schema.table_count,
            model_calls=filter_result.model_calls + 1,
            generation_time_ms=generation_time,
        )

    def generate_and_execute(
        self,
        system_id: str,
        question: str,
        label_column: str,
        value_column: str,
    ) -> list[OptionItem]:
        """
        Generate SQL for a question, execute it and map rows to options.

        Args:
            system_id: Identifier of the tenant system
            question: Natural language description of the option list
            label_column: Column providing each option's label
            value_column: Column providing each option's value

        Returns:
            One OptionItem per returned row, in result order

        Raises:
            NL2SQLError: Any of the generation errors of generate_sql
            QueryExecutionError: If the generated statement fails to run
        """
        self._validate_input(system_id, question)
        if not label_column or not label_column.strip():
            raise InvalidArgumentError("labelColumn cannot be null or empty")
        if not value_column or not value_column.strip():
            raise InvalidArgumentError("valueColumn cannot be null or empty")

        evidence = (
            f"The query result must include the column '{label_column}' "
            f"(used as the option label) and the column '{value_column}' "
            f"(used as the option value)."
        )
        statement = self.generate_sql(system_id, question, evidence)

        return self.option_mapper.execute(
            system_id,
            statement,
            label_column,
            value_column,
            max_rows=self.config.max_rows,
        )

    @staticmethod
    def _validate_input(system_id: str, question: str) -> None:
        if system_id is None or not system_id.strip():
            raise InvalidArgumentError("systemId cannot be null or empty")
        if question is None or not question.strip():
            raise InvalidArgumentError("query cannot be null or empty")

    def _resolve_dialect(self, system_id: str) -> str:
        """Look up the system's dialect, falling back to the default."""
        default = self.config.default_dialect
        try:
            datasource = self.datasource_provider.get_by_system_id(system_id)
        except Exception as e:
            logger.warning(
                f"Failed to get dialect for systemId={system_id}, "
                f"using default: {default} ({e})"
            )
            return default

        if datasource is None or not datasource.type:
            logger.warning(
                f"No datasource type for systemId={system_id}, "
                f"using default: {default}"
            )
            return default
        return datasource.type.lower()

    def _call_model(self, prompt: str) -> str:
        """Call the language model once, wrapping any failure."""
        try:
            response = self.chat_model.call(prompt)
        except Exception as e:
            raise SqlGenerationError(f"language model call failed: {e}") from e

        logger.debug(f"LLM response received, length={len(response or '')}")
        return response

    @staticmethod
    def extract_sql(response: Optional[str]) -> str:
        """
        Extract SQL text from a model response.

        Prefers a ```sql fenced block, then any other fenced block with its
        language tag removed, then the whole trimmed response. The result
        never contains a fence marker.

        Raises:
            SqlGenerationError: If the response or the extracted SQL is empty
        """
        text = (response or "").strip()
        if not text:
            raise SqlGenerationError("Empty response from LLM")

        match = _SQL_FENCE.search(text)
        if match:
            sql = match.group(1)
        else:
            match = _ANY_FENCE.search(text)
            if match:
                sql = _drop_language_tag(match.group(1))
            elif _FENCE in text:
                # Unclosed fence: keep the last non-blank segment
                segments = [s for s in text.split(_FENCE) if s.strip()]
                sql = _drop_language_tag(segments[-1]) if segments else ""
            else:
                sql = text
        sql = sql.strip()

        if not sql:
            raise SqlGenerationError("No SQL found in LLM response")
        return sql


def _drop_language_tag(block: str) -> str:
    """Remove a fence language tag such as ``sqlite`` from the first line.

    The first line counts as a tag only when it holds a single word that
    is not a statement keyword, so ```SELECT\\n...``` keeps its SELECT.
    """
    first, newline, rest = block.partition("\n")
    word = first.strip()
    if (
        newline
        and _LANGUAGE_TAG.fullmatch(word)
        and word.upper() not in _STATEMENT_WORDS
    ):
        return rest
    return block
