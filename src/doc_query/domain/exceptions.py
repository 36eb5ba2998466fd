"""Domain errors raised while parsing or evaluating expressions."""

from __future__ import annotations


class DocQueryError(Exception):
    """Base class for every error raised by the query engine."""


class InvalidExpression(DocQueryError):
    """Raised when a filter, update, sort or page directive is malformed.

    Always raised before any write scope is entered, so a malformed request
    can never leave a partial mutation behind.

    Attributes:
        path: The offending field-path, when one is involved.
        operator: The offending operator key, when one is involved.
    """

    def __init__(
        self,
        message: str,
        path: object | None = None,
        operator: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.operator = operator
