"""
Unit tests for schema snapshot building and the schema model.
"""

from unittest.mock import Mock

import pytest

from conftest import FakeSchemaProvider
from nl2sql_engine.data_sources.base_data_source import ColumnInfo, TableInfo
from nl2sql_engine.nl2sql.errors import SchemaNotFoundError
from nl2sql_engine.nl2sql.schema_builder import SchemaSnapshotBuilder
from nl2sql_engine.nl2sql.schema_model import (
    ColumnModel,
    GeneratedStatement,
    OptionItem,
    SchemaModel,
    TableModel,
)


class TestSchemaSnapshotBuilder:
    """Tests for SchemaSnapshotBuilder."""

    def test_builds_tables_in_provider_order(self, hr_tables):
        builder = SchemaSnapshotBuilder(FakeSchemaProvider({"hr": hr_tables}))

        schema = builder.build_schema("hr")

        assert schema.name == "hr"
        assert schema.table_count == 5
        assert schema.table_names == [
            "departments", "employees", "salaries", "titles", "locations"
        ]

    def test_column_metadata_is_carried_over(self, hr_tables):
        schema = SchemaSnapshotBuilder(FakeSchemaProvider({"hr": hr_tables})).build_schema("hr")

        departments = schema.tables[0]
        assert departments.description == "Company departments"
        assert departments.primary_keys == {"id"}
        name = departments.columns[1]
        assert name.description == "Department name"
        assert name.sample_values == ["Eng", "Sales", "Ops"]
        assert departments.columns[2].value_mapping == {"1": "active", "0": "inactive"}

    def test_primary_keys_from_table_and_column_flags(self):
        table = TableInfo(
            name="t",
            columns=[ColumnInfo(name="a"), ColumnInfo(name="b", primary=True)],
            primary_keys=["a", "missing"],
        )
        schema = SchemaSnapshotBuilder(FakeSchemaProvider({"s": [table]})).build_schema("s")

        assert schema.tables[0].primary_keys == {"a", "b"}

    def test_foreign_keys_are_collected_once(self):
        tables = [
            TableInfo(name="a", foreign_keys=["a.b_id=b.id"]),
            TableInfo(name="b", foreign_keys=["a.b_id=b.id", "b.c_id=c.id"]),
        ]
        schema = SchemaSnapshotBuilder(FakeSchemaProvider({"s": tables})).build_schema("s")

        assert schema.foreign_keys == ["a.b_id=b.id", "b.c_id=c.id"]

    def test_sample_values_are_text(self):
        table = TableInfo(
            name="t",
            columns=[ColumnInfo(name="n", sample_values=[1, None, 2.5])],
        )
        schema = SchemaSnapshotBuilder(FakeSchemaProvider({"s": [table]})).build_schema("s")

        assert schema.tables[0].columns[0].sample_values == ["1", "2.5"]

    def test_empty_schema_is_not_found(self):
        builder = SchemaSnapshotBuilder(FakeSchemaProvider({}))

        with pytest.raises(SchemaNotFoundError, match="Schema not found for systemId: nope"):
            builder.build_schema("nope")

    def test_provider_failure_is_not_found_with_cause(self):
        provider = Mock()
        provider.get_table_list.side_effect = RuntimeError("metadata service down")

        with pytest.raises(SchemaNotFoundError) as exc_info:
            SchemaSnapshotBuilder(provider).build_schema("hr")

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestSchemaModel:
    """Tests for the schema model invariants."""

    def test_sample_values_are_capped_at_three(self):
        column = ColumnModel(name="city", sample_values=["a", "", "b", "c", "d"])
        assert column.sample_values == ["a", "b", "c"]

    def test_id_column_has_no_sample_values(self):
        assert ColumnModel(name="id", sample_values=["1"]).sample_values == []

    def test_primary_key_must_be_a_column(self):
        with pytest.raises(ValueError, match="not columns"):
            TableModel(name="t", columns=[ColumnModel(name="a")], primary_keys={"b"})

    def test_table_count_follows_tables(self):
        schema = SchemaModel(name="s", tables=[TableModel(name="a"), TableModel(name="b")])
        assert schema.table_count == 2
        assert schema.retain_tables(["B"]).table_count == 1

    def test_generated_statement_requires_sql(self):
        with pytest.raises(ValueError):
            GeneratedStatement(sql="  ", dialect="mysql")

    def test_generated_statement_str_and_dict(self):
        statement = GeneratedStatement(sql="SELECT 1", dialect="mysql", model_calls=1)

        assert str(statement) == "SELECT 1"
        assert statement.to_dict()["dialect"] == "mysql"
        assert statement.to_dict()["model_calls"] == 1

    def test_option_item_dict(self):
        assert OptionItem(label="Eng", value="1").to_dict() == {"label": "Eng", "value": "1"}
