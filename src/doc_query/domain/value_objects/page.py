"""Skip/take pagination directive."""

from __future__ import annotations

from dataclasses import dataclass

from doc_query.domain.exceptions import InvalidExpression


@dataclass(frozen=True, slots=True)
class PageDirective:
    """Leading matches to discard and the maximum number to keep.

    ``take=None`` means unlimited; ``take=0`` keeps nothing.

    Example:
        >>> PageDirective(skip=2, take=2).apply(["a", "b", "c", "d", "e"])
        ['c', 'd']
    """

    skip: int = 0
    take: int | None = None

    def __post_init__(self) -> None:
        _check_count("skip", self.skip)
        if self.take is not None:
            _check_count("take", self.take)

    @classmethod
    def of(cls, skip: int | None = None, take: int | None = None) -> PageDirective:
        return cls(skip=0 if skip is None else skip, take=take)

    @property
    def is_unbounded(self) -> bool:
        return self.skip == 0 and self.take is None

    @property
    def stop(self) -> int | None:
        """Exclusive end index into the sorted match list."""
        if self.take is None:
            return None
        return self.skip + self.take

    def clamp(self, max_take: int | None) -> PageDirective:
        """Return a copy whose take never exceeds max_take."""
        if max_take is None or (self.take is not None and self.take <= max_take):
            return self
        return PageDirective(skip=self.skip, take=max_take)

    def apply(self, items: list) -> list:
        return items[self.skip:self.stop]


def _check_count(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidExpression(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidExpression(f"{name} must be non-negative, got {value}")
