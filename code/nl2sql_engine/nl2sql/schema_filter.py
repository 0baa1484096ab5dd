"""
Schema relevance filtering for large schemas.

When a schema has at least ``threshold`` tables, the language model is
asked which tables matter for the question and the snapshot is narrowed
to those. Filtering is a cost optimization: a failure is reported as a
FilterResult, never raised, and the caller keeps the unfiltered schema.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..helpers.llm_helper import ChatModel
from .prompt_builder import PromptBuilder
from .schema_model import SchemaModel

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_FILTER_THRESHOLD = 10

_JSON_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class FilterOutcome(Enum):
    """How the filter stage ended."""

    SKIPPED = "skipped"
    NARROWED = "narrowed"
    FAILED = "failed"


@dataclass
class FilterResult:
    """Result of the filter stage: a schema to use, or a failure reason."""

    outcome: FilterOutcome
    schema: Optional[SchemaModel] = None
    error: Optional[str] = None
    model_calls: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome is not FilterOutcome.FAILED


class SchemaRelevanceFilter:
    """Narrows large schemas to the tables relevant to a question."""

    def __init__(
        self,
        chat_model: ChatModel,
        prompt_builder: Optional[PromptBuilder] = None,
        threshold: int = DEFAULT_SCHEMA_FILTER_THRESHOLD,
    ):
        if threshold < 1:
            raise ValueError(f"threshold must be positive, got: {threshold}")
        self.chat_model = chat_model
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.threshold = threshold

    def filter(self, schema: SchemaModel, question: str) -> FilterResult:
        """
        Narrow a schema to the tables relevant to a question.

        Schemas below the threshold are returned unchanged without calling
        the model. Otherwise exactly one model call is made.

        Args:
            schema: The full schema snapshot
            question: The natural language question

        Returns:
            FilterResult with the schema to use, or a FAILED outcome
        """
        if schema.table_count < self.threshold:
            return FilterResult(outcome=FilterOutcome.SKIPPED, schema=schema)

        logger.debug(
            f"Schema has {schema.table_count} tables (threshold "
            f"{self.threshold}), filtering required"
        )

        prompt = self.prompt_builder.build_filter_prompt(question, schema.table_names)
        try:
            response = self.chat_model.call(prompt)
        except Exception as e:
            return self._failed(f"model call failed: {e}", model_calls=1)

        try:
            selected = self.parse_table_names(response)
        except ValueError as e:
            return self._failed(str(e), model_calls=1)

        narrowed = schema.retain_tables(selected)
        if narrowed.table_count == 0:
            return self._failed(
                f"none of the selected tables exist: {selected}", model_calls=1
            )

        logger.info(
            f"Schema filtered from {schema.table_count} to "
            f"{narrowed.table_count} tables"
        )
        return FilterResult(
            outcome=FilterOutcome.NARROWED, schema=narrowed, model_calls=1
        )

    @staticmethod
    def parse_table_names(response: Optional[str]) -> list[str]:
        """
        Parse a model response as a JSON array of table names.

        Raises:
            ValueError: If the response is empty, not a JSON array of
                strings, or selects nothing
        """
        text = (response or "").strip()
        if not text:
            raise ValueError("empty filter response")

        match = _JSON_FENCE.search(text)
        if match:
            text = match.group(1).strip()

        start, end = text.find("["), text.rfind("]")
        if start == -1 or end < start:
            raise ValueError(f"no JSON array in filter response: {text[:100]}")

        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"malformed filter response: {e}") from e

        if not all(isinstance(name, str) for name in parsed):
            raise ValueError("filter response must contain only table names")

        names = [name.strip() for name in parsed if name.strip()]
        if not names:
            raise ValueError("filter response selected no tables")
        return names

    @staticmethod
    def _failed(reason: str, model_calls: int) -> FilterResult:
        logger.warning(f"Schema filtering failed, using full schema: {reason}")
        return FilterResult(
            outcome=FilterOutcome.FAILED, error=reason, model_calls=model_calls
        )
