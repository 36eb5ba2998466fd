"""Closed enumerations for the filter and sort languages."""

from __future__ import annotations

from enum import Enum

from doc_query.domain.exceptions import InvalidExpression


OPERATOR_PREFIX = "$"


class ComparisonKind(Enum):
    """Filter operators, keyed by their wire token.

    EQ is the implicit operator of a literal clause (``{"name": "x"}``) and
    has no ``$`` spelling of its own.
    """

    EQ = "=="
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    EXISTS = "$exists"

    @property
    def is_ordering(self) -> bool:
        return self in _ORDERING

    @property
    def is_membership(self) -> bool:
        return self in (ComparisonKind.IN, ComparisonKind.NIN)

    @classmethod
    def from_token(cls, token: str, path: str | None = None) -> ComparisonKind:
        """Map an operator key such as ``"$gte"`` to its kind.

        Raises:
            InvalidExpression: If the token is not a known operator.
        """
        if token.startswith(OPERATOR_PREFIX):
            try:
                return cls(token)
            except ValueError:
                pass
        raise InvalidExpression(f"Unknown operator '{token}'", path=path, operator=token)


_ORDERING = frozenset(
    {ComparisonKind.GT, ComparisonKind.GTE, ComparisonKind.LT, ComparisonKind.LTE}
)


class SortDirection(Enum):
    """Sort order for a single key."""

    ASC = "ASC"
    DESC = "DESC"

    @property
    def descending(self) -> bool:
        return self is SortDirection.DESC

    @classmethod
    def parse(cls, value: object, path: str | None = None) -> SortDirection:
        """Accept ``"ASC"``/``"DESC"`` in any case, or ``1``/``-1``.

        Raises:
            InvalidExpression: For any other value.
        """
        if isinstance(value, SortDirection):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        elif isinstance(value, int) and not isinstance(value, bool):
            if value == 1:
                return cls.ASC
            if value == -1:
                return cls.DESC
        raise InvalidExpression(f"Invalid sort direction {value!r}", path=path)
