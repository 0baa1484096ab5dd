"""
NL2SQL Engine module.

This module provides natural language to SQL conversion with adaptive
schema filtering, read-only security validation and reduction of query
results into label/value options.
"""

from .errors import (
    InvalidArgumentError,
    NL2SQLError,
    SchemaNotFoundError,
    SecurityViolationError,
    SqlGenerationError,
)
from .option_cache import OptionsCache
from .option_mapper import ResultToOptionMapper
from .options_source import Nl2SqlOptionsSource, Nl2SqlSourceConfig
from .prompt_builder import PromptBuilder, PromptConfig
from .query_validator import SqlSecurityValidator
from .schema_builder import SchemaSnapshotBuilder
from .schema_filter import FilterOutcome, FilterResult, SchemaRelevanceFilter
from .schema_model import (
    ColumnModel,
    GeneratedStatement,
    OptionItem,
    SchemaModel,
    TableModel,
)
from .sql_generator import NL2SQLGenerator

__all__ = [
    # SQL Generator
    "NL2SQLGenerator",
    # Errors
    "NL2SQLError",
    "InvalidArgumentError",
    "SchemaNotFoundError",
    "SecurityViolationError",
    "SqlGenerationError",
    # Schema
    "SchemaModel",
    "TableModel",
    "ColumnModel",
    "SchemaSnapshotBuilder",
    "SchemaRelevanceFilter",
    "FilterResult",
    "FilterOutcome",
    # Prompt Builder
    "PromptBuilder",
    "PromptConfig",
    # Security
    "SqlSecurityValidator",
    # Options
    "GeneratedStatement",
    "OptionItem",
    "ResultToOptionMapper",
    "OptionsCache",
    "Nl2SqlOptionsSource",
    "Nl2SqlSourceConfig",
]
