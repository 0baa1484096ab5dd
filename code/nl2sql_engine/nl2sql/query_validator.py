"""
Query Validator for NL2SQL security enforcement.

This module rejects any generated statement that is not a single
read-only query before it can reach an execution provider.

Comment handling: a ``/* ... */`` block comment is blanked out, and a
``--`` line comment ends the text used for the SELECT prefix check, so a
statement that opens with a line comment is rejected. The keyword check
still reads every non-comment token after a line comment. MySQL ``#``
comments are not treated as comments and are checked as plain text.

Known limitation: banned keywords are matched as plain substrings of the
normalized text. This over-rejects (a column named ``updated_at`` or a
literal such as ``'DELETED'``) and can under-reject obfuscated input.
"""

import logging

from sqlparse import lexer
from sqlparse import tokens as T

from .errors import SecurityViolationError

logger = logging.getLogger(__name__)

FORBIDDEN_KEYWORDS = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "TRUNCATE",
    "ALTER",
    "CREATE",
    "GRANT",
    "REVOKE",
)

LINE_COMMENT = "--"
BLOCK_COMMENT = "/*"


def _comment_style(ttype, value: str):
    """Return ``--`` or ``/*`` for a stripped comment token, else None."""
    if ttype not in T.Comment:
        return None
    if value.startswith(LINE_COMMENT):
        return LINE_COMMENT
    if value.startswith(BLOCK_COMMENT):
        return BLOCK_COMMENT
    return None


class SqlSecurityValidator:
    """
    Validates that SQL statements are read-only.

    A statement passes only if its normalized text starts with SELECT and
    none of the forbidden keywords appear anywhere outside comments. There
    is no partial pass and no auto-correction.
    """

    def __init__(self, forbidden_keywords: tuple[str, ...] = FORBIDDEN_KEYWORDS):
        self.forbidden_keywords = tuple(k.upper() for k in forbidden_keywords)

    def validate_read_only(self, sql: str) -> None:
        """
        Validate that a SQL statement is a read-only query.

        Args:
            sql: The SQL statement to validate

        Raises:
            SecurityViolationError: If the statement is empty, does not
                start with SELECT, or contains a forbidden keyword
        """
        if sql is None or not sql.strip():
            raise SecurityViolationError("SQL statement cannot be empty")

        if not self.normalize(sql).startswith("SELECT"):
            logger.warning("Rejected non-SELECT statement")
            raise SecurityViolationError("Only SELECT statements are allowed")

        body = self.strip_comments(sql)
        for keyword in self.forbidden_keywords:
            if keyword in body:
                logger.warning(f"Rejected statement containing {keyword}")
                raise SecurityViolationError(
                    f"SQL contains forbidden keyword: {keyword}"
                )

    def is_read_only(self, sql: str) -> bool:
        """Return True if validate_read_only would accept the statement."""
        try:
            self.validate_read_only(sql)
        except SecurityViolationError:
            return False
        return True

    @staticmethod
    def normalize(sql: str) -> str:
        """
        Blank block comments and drop everything from the first ``--``
        comment onwards, then upper-case and trim.
        """
        parts = []
        for ttype, value in lexer.tokenize(sql):
            style = _comment_style(ttype, value)
            if style == LINE_COMMENT:
                break
            parts.append(" " if style else value)
        return "".join(parts).strip().upper()

    @staticmethod
    def strip_comments(sql: str) -> str:
        """Blank every ``--`` and ``/* */`` comment, then upper-case and trim."""
        parts = []
        for ttype, value in lexer.tokenize(sql):
            parts.append(" " if _comment_style(ttype, value) else value)
        return "".join(parts).strip().upper()
