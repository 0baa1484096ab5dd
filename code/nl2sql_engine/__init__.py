"""
NL2SQL engine.

Turns free-text questions into validated, read-only SQL against a
tenant-scoped schema, and reduces query results into label/value options.
"""

__version__ = "1.0.0"
