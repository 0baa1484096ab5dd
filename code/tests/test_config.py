"""
Unit tests for configuration and environment helpers.
"""

import pytest

from nl2sql_engine.helpers.config_helper import (
    CacheConfig,
    ConfigurationError,
    LLMConfig,
    NL2SQLConfig,
    load_config,
)
from nl2sql_engine.helpers.env_helper import EnvHelper


class TestDefaults:
    """Tests for default values and validation."""

    def test_defaults(self):
        config = NL2SQLConfig()

        assert config.enabled is True
        assert config.schema_filter_threshold == 10
        assert config.default_dialect == "mysql"
        assert config.max_rows == 1000
        assert config.llm.model == "gpt-4o"
        assert config.cache.ttl_minutes == 30

    @pytest.mark.parametrize("kwargs", [
        {"schema_filter_threshold": 0},
        {"max_rows": 0},
        {"default_dialect": ""},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            NL2SQLConfig(**kwargs)

    def test_invalid_llm_values(self):
        with pytest.raises(ConfigurationError):
            LLMConfig(temperature=3.0)
        with pytest.raises(ConfigurationError):
            LLMConfig(timeout=0)

    def test_invalid_cache_ttl(self):
        with pytest.raises(ConfigurationError):
            CacheConfig(ttl_minutes=-1)


class TestFromYaml:
    """Tests for YAML loading."""

    def test_values_over_defaults(self, tmp_path):
        path = tmp_path / "nl2sql.yaml"
        path.write_text(
            "schema_filter_threshold: 20\n"
            "default_dialect: postgresql\n"
            "llm:\n"
            "  model: gpt-4o-mini\n"
            "cache:\n"
            "  enabled: false\n"
        )

        config = NL2SQLConfig.from_yaml(str(path))

        assert config.schema_filter_threshold == 20
        assert config.default_dialect == "postgresql"
        assert config.max_rows == 1000
        assert config.llm.model == "gpt-4o-mini"
        assert config.llm.temperature == 0.1
        assert config.cache.enabled is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert NL2SQLConfig.from_yaml(str(path)) == NL2SQLConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Failed to load"):
            NL2SQLConfig.from_yaml(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("llm: [unclosed\n")

        with pytest.raises(ConfigurationError):
            NL2SQLConfig.from_yaml(str(path))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            NL2SQLConfig.from_yaml(str(path))

    def test_unknown_nested_key(self):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            NL2SQLConfig.from_dict({"llm": {"modle": "x"}})


class TestFromEnv:
    """Tests for environment loading."""

    def test_environment_overrides(self):
        env = EnvHelper(environ={
            "NL2SQL_ENABLED": "false",
            "NL2SQL_SCHEMA_FILTER_THRESHOLD": "25",
            "NL2SQL_DEFAULT_DIALECT": "postgresql",
            "NL2SQL_MAX_ROWS": "50",
            "NL2SQL_LLM_TEMPERATURE": "0",
            "NL2SQL_CACHE_TTL_MINUTES": "5",
        })

        config = NL2SQLConfig.from_env(env)

        assert config.enabled is False
        assert config.schema_filter_threshold == 25
        assert config.default_dialect == "postgresql"
        assert config.max_rows == 50
        assert config.llm.temperature == 0.0
        assert config.cache.ttl_minutes == 5

    def test_unset_variables_keep_base(self):
        base = NL2SQLConfig(max_rows=10)

        config = NL2SQLConfig.from_env(EnvHelper(environ={}), base=base)

        assert config == base

    def test_malformed_value(self):
        env = EnvHelper(environ={"NL2SQL_MAX_ROWS": "many"})

        with pytest.raises(ConfigurationError, match="NL2SQL_MAX_ROWS"):
            NL2SQLConfig.from_env(env)

    def test_load_config_combines_file_and_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "nl2sql.yaml"
        path.write_text("max_rows: 200\ndefault_dialect: oracle\n")
        monkeypatch.setenv("NL2SQL_DEFAULT_DIALECT", "mysql")

        config = load_config(str(path))

        assert config.max_rows == 200
        assert config.default_dialect == "mysql"


class TestEnvHelper:
    """Tests for EnvHelper."""

    def test_blank_values_are_unset(self):
        env = EnvHelper(environ={"A": "  "})
        assert env.get("A", "default") == "default"

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("TRUE", True), ("yes", True), ("on", True),
        ("0", False), ("False", False), ("no", False), ("off", False),
    ])
    def test_get_bool(self, raw, expected):
        assert EnvHelper(environ={"FLAG": raw}).get_bool("FLAG", not expected) is expected

    def test_get_bool_rejects_other_values(self):
        with pytest.raises(ValueError):
            EnvHelper(environ={"FLAG": "maybe"}).get_bool("FLAG", False)

    def test_openai_settings(self):
        env = EnvHelper(environ={"AZURE_OPENAI_ENDPOINT": "https://example.openai.azure.com"})

        assert env.AZURE_OPENAI_ENDPOINT == "https://example.openai.azure.com"
        assert env.AZURE_OPENAI_API_VERSION == "2024-02-01"
        assert env.OPENAI_API_KEY is None
