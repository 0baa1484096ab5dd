"""
Schema snapshot building for NL2SQL generation.

Fetches raw table metadata from the schema provider and normalizes it
into the per-request SchemaModel used by the prompt builder.
"""

import logging

from ..data_sources.base_data_source import ColumnInfo, SchemaProvider, TableInfo
from .errors import SchemaNotFoundError
from .schema_model import ColumnModel, SchemaModel, TableModel

logger = logging.getLogger(__name__)


class SchemaSnapshotBuilder:
    """Builds a SchemaModel for a system from its schema provider."""

    def __init__(self, schema_provider: SchemaProvider):
        self.schema_provider = schema_provider

    def build_schema(self, system_id: str) -> SchemaModel:
        """
        Build a schema snapshot for a system.

        Args:
            system_id: Identifier of the tenant system

        Returns:
            SchemaModel with tables in provider order

        Raises:
            SchemaNotFoundError: If the provider fails or returns no tables
        """
        try:
            tables = self.schema_provider.get_table_list(system_id)
        except Exception as e:
            logger.error(f"Schema lookup failed for systemId={system_id}: {e}")
            raise SchemaNotFoundError(system_id) from e

        if not tables:
            raise SchemaNotFoundError(system_id)

        foreign_keys = []
        for table in tables:
            for fk in table.foreign_keys or []:
                if fk not in foreign_keys:
                    foreign_keys.append(fk)

        schema = SchemaModel(
            name=system_id,
            tables=[self._to_table_model(t) for t in tables],
            foreign_keys=foreign_keys,
        )

        logger.debug(
            f"Built schema snapshot for systemId={system_id} with "
            f"{schema.table_count} tables"
        )
        return schema

    def _to_table_model(self, table: TableInfo) -> TableModel:
        columns = [self._to_column_model(c) for c in table.columns or []]
        column_names = {c.name for c in columns}

        primary_keys = set(table.primary_keys or [])
        primary_keys.update(c.name for c in table.columns or [] if c.primary)
        # Keys the provider reports without a matching column are dropped
        primary_keys &= column_names

        return TableModel(
            name=table.name,
            description=table.description,
            columns=columns,
            primary_keys=primary_keys,
        )

    def _to_column_model(self, column: ColumnInfo) -> ColumnModel:
        return ColumnModel(
            name=column.name,
            type=column.type or "",
            description=column.description,
            sample_values=[str(v) for v in column.sample_values or [] if v is not None],
            value_mapping={
                str(k): str(v) for k, v in (column.value_mapping or {}).items()
            },
        )
