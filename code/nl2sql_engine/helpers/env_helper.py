"""
Environment access for the NL2SQL engine.

Reads language-model credentials and ``NL2SQL_*`` overrides from the
process environment.
"""

import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class EnvHelper:
    """Typed view over environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

        self.OPENAI_API_KEY = self.get("OPENAI_API_KEY")
        self.AZURE_OPENAI_API_KEY = self.get("AZURE_OPENAI_API_KEY")
        self.AZURE_OPENAI_ENDPOINT = self.get("AZURE_OPENAI_ENDPOINT")
        self.AZURE_OPENAI_API_VERSION = self.get(
            "AZURE_OPENAI_API_VERSION", "2024-02-01"
        )

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self._environ.get(name)
        if value is None or value.strip() == "":
            return default
        return value.strip()

    def get_bool(self, name: str, default: bool) -> bool:
        value = self.get(name)
        if value is None:
            return default
        if value.lower() in _TRUE_VALUES:
            return True
        if value.lower() in _FALSE_VALUES:
            return False
        raise ValueError(f"{name} must be a boolean, got: {value!r}")

    def get_int(self, name: str, default: int) -> int:
        value = self.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ValueError(f"{name} must be an integer, got: {value!r}") from e

    def get_float(self, name: str, default: float) -> float:
        value = self.get(name)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError as e:
            raise ValueError(f"{name} must be a number, got: {value!r}") from e
