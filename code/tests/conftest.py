"""
Shared fixtures for NL2SQL engine tests.

Provides a scripted language model that records every prompt it receives,
in-memory collaborator fakes and sample schemas.
"""

from typing import Dict, List, Optional
from unittest.mock import Mock

import pandas as pd
import pytest

from nl2sql_engine.data_sources.base_data_source import (
    ColumnInfo,
    DatasourceDefinition,
    DatasourceProvider,
    QueryResult,
    SchemaProvider,
    SqlExecutionProvider,
    TableInfo,
)
from nl2sql_engine.helpers.config_helper import NL2SQLConfig
from nl2sql_engine.helpers.llm_helper import ChatModel
from nl2sql_engine.nl2sql.sql_generator import NL2SQLGenerator


# =============================================================================
# Language model stub
# =============================================================================


class RecordingChatModel(ChatModel):
    """ChatModel returning scripted responses and recording prompts."""

    def __init__(self, responses=None, error: Optional[Exception] = None):
        self.responses = list(responses or [])
        self.error = error
        self.prompts: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    def call(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.responses) == 1:
            return self.responses[0]
        return self.responses.pop(0)


# =============================================================================
# Collaborator fakes
# =============================================================================


class FakeSchemaProvider(SchemaProvider):
    def __init__(self, tables_by_system: Dict[str, List[TableInfo]]):
        self.tables_by_system = tables_by_system

    def get_table_list(self, system_id: str) -> List[TableInfo]:
        return self.tables_by_system.get(system_id, [])


class FakeDatasourceProvider(DatasourceProvider):
    def __init__(self, types: Dict[str, Optional[str]]):
        self.types = types

    def get_by_system_id(self, system_id: str) -> Optional[DatasourceDefinition]:
        if system_id not in self.types:
            return None
        return DatasourceDefinition(system_id=system_id, type=self.types[system_id])


class FakeExecutionProvider(SqlExecutionProvider):
    def __init__(self, rows: Optional[List[dict]] = None):
        self.rows = rows or []
        self.calls: List[tuple] = []

    def execute(self, system_id: str, sql: str, max_rows: int = 1000) -> QueryResult:
        self.calls.append((system_id, sql, max_rows))
        columns = list(self.rows[0].keys()) if self.rows else []
        return QueryResult(columns=columns, rows=list(self.rows), sql=sql)


# =============================================================================
# Schemas
# =============================================================================


def make_table(name: str, *column_names: str, description: Optional[str] = None) -> TableInfo:
    """Build a TableInfo whose first column is the primary key."""
    names = column_names or ("id", "name")
    return TableInfo(
        name=name,
        description=description,
        columns=[
            ColumnInfo(name=c, type="varchar" if c != "id" else "int", primary=(i == 0))
            for i, c in enumerate(names)
        ],
    )


def make_tables(count: int, named: tuple = ()) -> List[TableInfo]:
    """Build count tables, using the given names first, then table_N."""
    names = list(named) + [f"table_{i}" for i in range(len(named), count)]
    return [make_table(n) for n in names[:count]]


@pytest.fixture
def hr_tables() -> List[TableInfo]:
    """Five-table HR schema."""
    return [
        TableInfo(
            name="departments",
            description="Company departments",
            columns=[
                ColumnInfo(name="id", type="int", primary=True,
                           sample_values=["1", "2"]),
                ColumnInfo(name="name", type="varchar", description="Department name",
                           sample_values=["Eng", "Sales", "Ops", "Legal"]),
                ColumnInfo(name="active", type="tinyint",
                           value_mapping={"1": "active", "0": "inactive"}),
            ],
        ),
        make_table("employees", "id", "name", "department_id"),
        make_table("salaries", "id", "employee_id", "amount"),
        make_table("titles", "id", "employee_id", "title"),
        make_table("locations", "id", "city"),
    ]


@pytest.fixture
def chat_model():
    """Model that always answers with the active departments query."""
    return RecordingChatModel(
        ["```sql\nSELECT id,name FROM departments WHERE active=1\n```"]
    )


@pytest.fixture
def execution_provider():
    return FakeExecutionProvider()


@pytest.fixture
def make_generator(hr_tables, execution_provider):
    """Factory for generators over the HR schema (or a given table list)."""

    def _make(chat_model, tables=None, config=None, dialect="mysql", provider=None):
        return NL2SQLGenerator(
            schema_provider=FakeSchemaProvider({"hr": tables if tables is not None else hr_tables}),
            chat_model=chat_model,
            execution_provider=provider or execution_provider,
            datasource_provider=FakeDatasourceProvider({"hr": dialect}),
            config=config or NL2SQLConfig(),
        )

    return _make


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI client returning a fenced SELECT."""
    client = Mock()

    mock_choice = Mock()
    mock_choice.message.content = "```sql\nSELECT 1\n```"

    mock_usage = Mock()
    mock_usage.total_tokens = 42

    mock_response = Mock()
    mock_response.choices = [mock_choice]
    mock_response.usage = mock_usage

    client.chat.completions.create.return_value = mock_response
    return client


@pytest.fixture
def hr_dataframes() -> Dict[str, pd.DataFrame]:
    """HR tables as DataFrames for the SQLite data source."""
    return {
        "departments": pd.DataFrame({
            "id": [1, 2, 3],
            "name": ["Eng", "Sales", "Ops"],
            "active": [1, 1, 0],
        }),
        "employees": pd.DataFrame({
            "id": [10, 11],
            "name": ["Ada", "Linus"],
            "department_id": [1, 2],
        }),
    }
