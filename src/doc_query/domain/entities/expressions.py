"""Parsed filter, update and sort expressions.

Raw expressions arrive as plain mappings in the MongoDB style:

    filter:  {"age": {"$gte": 30, "$lte": 40}, "metadata.status": "draft"}
    update:  {"metadata.status": "review", "tags": ["a", "b"]}
    sort:    {"name": "ASC", "createdAt": "DESC"}

Each is parsed and validated exactly once into the immutable objects below,
with operator keys resolved to ComparisonKind members. Evaluation then runs
per record without re-inspecting the raw mappings. Every validation failure
raises InvalidExpression naming the offending path or operator.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from doc_query.domain.entities.record import DEFAULT_KEYS, Record, RecordKeys
from doc_query.domain.exceptions import InvalidExpression
from doc_query.domain.services.values import contains, deep_equal, ordered_compare
from doc_query.domain.value_objects import (
    ABSENT,
    OPERATOR_PREFIX,
    ComparisonKind,
    FieldPath,
    SortDirection,
)

_MEMBERSHIP_OPERAND_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True, slots=True)
class Condition:
    """One operator applied to a resolved value."""

    kind: ComparisonKind
    operand: Any

    def matches(self, value: Any) -> bool:
        kind = self.kind
        if kind is ComparisonKind.EQ:
            return deep_equal(value, self.operand)
        if kind.is_ordering:
            result = ordered_compare(value, self.operand)
            if result is None:
                return False
            if kind is ComparisonKind.GT:
                return result > 0
            if kind is ComparisonKind.GTE:
                return result >= 0
            if kind is ComparisonKind.LT:
                return result < 0
            return result <= 0
        if kind is ComparisonKind.IN:
            return value is not ABSENT and contains(self.operand, value)
        if kind is ComparisonKind.NIN:
            return not (value is not ABSENT and contains(self.operand, value))
        # EXISTS
        present = value is not ABSENT and value is not None
        return present == self.operand


@dataclass(frozen=True, slots=True)
class FieldClause:
    """All conditions on one field path; every condition must hold."""

    path: FieldPath
    conditions: tuple[Condition, ...]

    def matches(self, record: Record) -> bool:
        value = record.resolve(self.path)
        return all(condition.matches(value) for condition in self.conditions)


@dataclass(frozen=True, slots=True)
class FilterExpression:
    """AND-combination of field clauses. An empty filter matches everything."""

    clauses: tuple[FieldClause, ...] = ()

    @classmethod
    def parse(cls, raw: Mapping[str, Any] | None) -> FilterExpression:
        """Parse a raw filter mapping.

        Raises:
            InvalidExpression: If raw is not a mapping, a key is not a valid
                field path, or an operator key is unknown or mixed with
                plain keys.
        """
        if raw is None:
            return cls()
        if isinstance(raw, FilterExpression):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidExpression(
                f"Filter must be a mapping, got {type(raw).__name__}"
            )
        clauses = []
        for key, value in raw.items():
            if isinstance(key, str) and key.startswith(OPERATOR_PREFIX):
                raise InvalidExpression(
                    f"Unknown top-level operator '{key}'", operator=key
                )
            path = FieldPath.parse(key)
            clauses.append(FieldClause(path=path, conditions=_parse_conditions(path, value)))
        return cls(clauses=tuple(clauses))

    @property
    def is_empty(self) -> bool:
        return not self.clauses

    def matches(self, record: Record) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


def _is_operator_object(path: FieldPath, value: Any) -> bool:
    if not isinstance(value, Mapping) or not value:
        return False
    flags = [isinstance(k, str) and k.startswith(OPERATOR_PREFIX) for k in value]
    if all(flags):
        return True
    if any(flags):
        raise InvalidExpression(
            f"Field '{path}' mixes operators with plain keys", path=path.raw
        )
    return False


def _parse_conditions(path: FieldPath, value: Any) -> tuple[Condition, ...]:
    if not _is_operator_object(path, value):
        return (Condition(kind=ComparisonKind.EQ, operand=value),)

    conditions = []
    for token, operand in value.items():
        kind = ComparisonKind.from_token(token, path=path.raw)
        if kind.is_membership:
            if not isinstance(operand, _MEMBERSHIP_OPERAND_TYPES):
                raise InvalidExpression(
                    f"Operator '{token}' on '{path}' needs a list operand",
                    path=path.raw,
                    operator=token,
                )
            operand = tuple(operand)
        elif kind is ComparisonKind.EXISTS:
            operand = bool(operand)
        conditions.append(Condition(kind=kind, operand=operand))
    return tuple(conditions)


@dataclass(frozen=True, slots=True)
class Assignment:
    path: FieldPath
    value: Any


@dataclass(frozen=True, slots=True)
class UpdateExpression:
    """Field-path to replacement-value assignments, applied in order.

    Single-key paths replace the field wholesale. Compound paths merge into
    the existing nested document, keeping sibling keys.
    """

    assignments: tuple[Assignment, ...] = ()

    @classmethod
    def parse(
        cls, raw: Mapping[str, Any], keys: RecordKeys = DEFAULT_KEYS
    ) -> UpdateExpression:
        """Parse a raw update mapping.

        Raises:
            InvalidExpression: If raw is not a mapping, a key is an operator
                or an invalid path, a path targets the primary key, or two
                paths overlap (``"metadata"`` and ``"metadata.status"``).
        """
        if isinstance(raw, UpdateExpression):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidExpression(
                f"Update must be a mapping, got {type(raw).__name__}"
            )
        assignments: list[Assignment] = []
        for key, value in raw.items():
            if isinstance(key, str) and key.startswith(OPERATOR_PREFIX):
                raise InvalidExpression(
                    f"Unsupported update operator '{key}'", path=key, operator=key
                )
            path = FieldPath.parse(key)
            if path.head == keys.id_field:
                raise InvalidExpression(
                    f"Primary key '{keys.id_field}' cannot be updated", path=path.raw
                )
            for earlier in assignments:
                if _overlaps(earlier.path, path):
                    raise InvalidExpression(
                        f"Update paths '{earlier.path}' and '{path}' conflict",
                        path=path.raw,
                    )
            assignments.append(Assignment(path=path, value=value))
        return cls(assignments=tuple(assignments))

    def apply(self, record: Record) -> None:
        for assignment in self.assignments:
            record.assign(assignment.path, assignment.value)


def _overlaps(a: FieldPath, b: FieldPath) -> bool:
    shorter, longer = sorted((a.segments, b.segments), key=len)
    return longer[: len(shorter)] == shorter


@dataclass(frozen=True, slots=True)
class SortKey:
    path: FieldPath
    direction: SortDirection


@dataclass(frozen=True, slots=True)
class SortDirective:
    """Ordered sort keys; later keys break ties of earlier ones."""

    keys: tuple[SortKey, ...] = ()

    @classmethod
    def parse(cls, raw: Mapping[str, Any] | None) -> SortDirective:
        """Parse a raw sort mapping.

        Raises:
            InvalidExpression: If raw is not a mapping, a key is not a valid
                path, or a direction is not ASC/DESC/1/-1.
        """
        if raw is None:
            return cls()
        if isinstance(raw, SortDirective):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidExpression(
                f"Sort must be a mapping, got {type(raw).__name__}"
            )
        keys = []
        for key, direction in raw.items():
            path = FieldPath.parse(key)
            keys.append(SortKey(path=path, direction=SortDirection.parse(direction, path.raw)))
        return cls(keys=tuple(keys))

    @property
    def is_empty(self) -> bool:
        return not self.keys
