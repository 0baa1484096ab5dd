"""
Error taxonomy for NL2SQL generation.

Callers see exactly four generation errors (invalid argument, missing
schema, security violation, generation failure). Execution failures are
reported separately by the data source layer.
"""


class NL2SQLError(Exception):
    """Base exception for SQL generation failures."""

    pass


class InvalidArgumentError(NL2SQLError, ValueError):
    """Raised when a required argument is missing or blank."""

    pass


class SchemaNotFoundError(NL2SQLError):
    """Raised when no schema can be discovered for a system."""

    def __init__(self, system_id: str):
        super().__init__(f"Schema not found for systemId: {system_id}")
        self.system_id = system_id


class SecurityViolationError(NL2SQLError):
    """Raised when a statement is not a single read-only query."""

    pass


class SqlGenerationError(NL2SQLError):
    """Raised when the language model call or SQL extraction fails."""

    def __init__(self, message: str):
        super().__init__(f"SQL generation failed: {message}")
