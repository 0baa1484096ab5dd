#!/usr/bin/env python3
"""
NL2SQL Local Run Script

Loads CSV files from a folder into an in-memory SQLite database registered
under a system id, then asks the NL2SQL engine to answer a question.

Usage:
    python scripts/run_nl2sql_local.py --data-dir data/ --query "List all customers"

    Options:
      --system-id ID        System id the data is registered under (default: local)
      --dialect NAME        Dialect reported for the system (default: sqlite)
      --config PATH         YAML configuration file (NL2SQL_* env vars still apply)
      --evidence TEXT       Extra context for the model
      --label-column COL    With --value-column, execute and print options
      --value-column COL    Column used as the option value
      --execute             Execute the generated SQL and print the rows

Requires OPENAI_API_KEY, or AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add code directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "code"))

from nl2sql_engine.data_sources.registry import LocalDataSourceRegistry  # noqa: E402
from nl2sql_engine.data_sources.sqlite_data_source import SQLiteDataSource  # noqa: E402
from nl2sql_engine.helpers.config_helper import load_config  # noqa: E402
from nl2sql_engine.helpers.llm_helper import OpenAIChatModel  # noqa: E402
from nl2sql_engine.nl2sql.errors import NL2SQLError  # noqa: E402
from nl2sql_engine.nl2sql.sql_generator import NL2SQLGenerator  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the NL2SQL engine on local CSV data")
    parser.add_argument("--data-dir", required=True, help="Folder of CSV files, one table each")
    parser.add_argument("--query", required=True, help="Natural language question")
    parser.add_argument("--system-id", default="local", help="System id for the data")
    parser.add_argument("--dialect", default="sqlite", help="Dialect reported for the system")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--evidence", help="Extra context for the model")
    parser.add_argument("--label-column", help="Option label column")
    parser.add_argument("--value-column", help="Option value column")
    parser.add_argument("--execute", action="store_true", help="Execute the generated SQL")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if bool(args.label_column) != bool(args.value_column):
        parser.error("--label-column and --value-column must be given together")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = load_config(args.config)
    if not config.enabled:
        print("NL2SQL is disabled (NL2SQL_ENABLED=false)", file=sys.stderr)
        return 1

    registry = LocalDataSourceRegistry()
    registry.register(
        args.system_id,
        SQLiteDataSource.from_csv_dir(args.data_dir),
        dialect=args.dialect,
    )

    generator = NL2SQLGenerator(
        schema_provider=registry,
        chat_model=OpenAIChatModel(config.llm),
        execution_provider=registry,
        datasource_provider=registry,
        config=config,
    )

    print("\n" + "=" * 60)
    print(f"Question: {args.query}")
    print("=" * 60)

    try:
        if args.label_column:
            options = generator.generate_and_execute(
                args.system_id, args.query, args.label_column, args.value_column
            )
            print(f"\n{len(options)} options:")
            for option in options:
                print(f"  {option.label} -> {option.value}")
            return 0

        statement = generator.generate_sql(args.system_id, args.query, args.evidence)
        print(f"\nGenerated SQL ({statement.dialect}, {statement.model_calls} model calls):")
        print(statement.sql)

        if args.execute:
            result = registry.execute(args.system_id, statement.sql, config.max_rows)
            print(f"\n{result.row_count} rows{' (truncated)' if result.truncated else ''}:")
            print(result.to_dataframe().to_string(index=False))
    except NL2SQLError as e:
        print(f"\nError: {e}")
        return 1
    finally:
        registry.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
