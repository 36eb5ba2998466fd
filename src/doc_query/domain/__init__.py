"""Domain layer: records, expressions and their evaluation rules."""

from doc_query.domain.exceptions import DocQueryError, InvalidExpression

__all__ = ["DocQueryError", "InvalidExpression"]
