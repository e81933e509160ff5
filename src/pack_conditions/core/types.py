"""Shared domain types for condition evaluation.

This module defines the value types and enums shared across the
``pack_conditions`` implementation.  All public symbols are re-exported
from the top-level ``pack_conditions`` package.

Key design decisions:
* ``EvaluationResult`` is a *string* enum with an explicit rank for the
  graded members.  Ordering operators are defined only between graded
  members; comparing against a sentinel (``IGNORED``, ``UNDEFINED``,
  ``ERROR``) raises ``TypeError`` so that sentinels can never leak into a
  ``min``/``max`` fold unnoticed.
* ``AttributeSet`` is an immutable, hashable mapping.  Target attributes
  and expression predicates share the same type.
"""
from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from typing import Any

# ---------------------------------------------------------------------------
# Evaluation result lattice
# ---------------------------------------------------------------------------

_GRADE_RANK: dict[str, int] = {
    "failed": 0,
    "missing": 1,
    "incompatible": 2,
    "selectable": 3,
    "fulfilled": 4,
}


class EvaluationResult(enum.StrEnum):
    """Graded outcome of evaluating an item against target attributes.

    Graded members, from worst to best:

    * **FAILED** -- the item was evaluated and does not match.
    * **MISSING** -- a required artifact is not available at all.
    * **INCOMPATIBLE** -- an artifact is present but does not fit.
    * **SELECTABLE** -- a matching artifact exists but is not selected.
    * **FULFILLED** -- all constraints are satisfied.

    Sentinels (not part of the order):

    * **IGNORED** -- no information; the item does not apply.
    * **UNDEFINED** -- not evaluated yet.
    * **ERROR** -- evaluation fault (cycle, unknown domain, missing link).
    """

    FAILED = "failed"
    MISSING = "missing"
    INCOMPATIBLE = "incompatible"
    SELECTABLE = "selectable"
    FULFILLED = "fulfilled"

    IGNORED = "ignored"
    UNDEFINED = "undefined"
    ERROR = "error"

    @property
    def is_graded(self) -> bool:
        """Return ``True`` for members of the ordered scale."""
        return self.value in _GRADE_RANK

    @property
    def is_sentinel(self) -> bool:
        """Return ``True`` for ``IGNORED``, ``UNDEFINED`` and ``ERROR``."""
        return not self.is_graded

    @property
    def rank(self) -> int:
        """Return the position on the graded scale (0 = ``FAILED``).

        Raises
        ------
        TypeError
            If the member is a sentinel.
        """
        try:
            return _GRADE_RANK[self.value]
        except KeyError:
            raise TypeError(f"{self.name} is a sentinel and has no rank") from None

    @property
    def is_fulfilled(self) -> bool:
        """Return ``True`` if the result is graded and at least ``FULFILLED``."""
        return self.is_graded and self.rank >= _GRADE_RANK["fulfilled"]

    @classmethod
    def graded(cls) -> list[EvaluationResult]:
        """Return the graded members, worst first."""
        return sorted((m for m in cls if m.is_graded), key=lambda m: m.rank)

    def _comparable(self, other: object) -> bool:
        return (
            isinstance(other, EvaluationResult)
            and self.is_graded
            and other.is_graded
        )

    def __ge__(self, other: object) -> bool:
        if self._comparable(other):
            return self.rank >= other.rank  # type: ignore[union-attr]
        return NotImplemented

    def __gt__(self, other: object) -> bool:
        if self._comparable(other):
            return self.rank > other.rank  # type: ignore[union-attr]
        return NotImplemented

    def __le__(self, other: object) -> bool:
        if self._comparable(other):
            return self.rank <= other.rank  # type: ignore[union-attr]
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if self._comparable(other):
            return self.rank < other.rank  # type: ignore[union-attr]
        return NotImplemented


# ---------------------------------------------------------------------------
# Expression tags
# ---------------------------------------------------------------------------

class ExpressionDomain(enum.StrEnum):
    """What an expression's predicate talks about.

    Component expressions are resolved by the component dependency
    resolver, not by condition evaluation, and always yield ``IGNORED``.
    """

    COMPONENT = "component"
    DEVICE = "device"
    TOOLCHAIN = "toolchain"
    REFERENCE = "reference"


class ExpressionRole(enum.StrEnum):
    """How an expression's result is folded into its condition.

    * **ACCEPT** -- disjunctive alternative; the best accept result wins.
    * **REQUIRE** -- conjunctive constraint; the worst result wins.
    * **DENY** -- a require constraint evaluated under inverted polarity.
    """

    ACCEPT = "accept"
    REQUIRE = "require"
    DENY = "deny"


# ---------------------------------------------------------------------------
# AttributeSet -- immutable name -> value mapping
# ---------------------------------------------------------------------------

class AttributeSet(Mapping[str, str]):
    """Immutable mapping of attribute names to string values.

    Used both for the target attributes of an evaluation pass (device
    name, core, toolchain...) and for the predicate carried by a device
    or toolchain expression.  Values are coerced to ``str``.

    Example::

        target = AttributeSet(Dname="STM32F407VG", Dcore="Cortex-M4")
        predicate = AttributeSet({"Dname": "STM32F4*"})
    """

    __slots__ = ("_data", "_hash")

    def __init__(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        merged: dict[str, str] = {}
        if data:
            merged.update((str(k), str(v)) for k, v in data.items())
        merged.update((k, str(v)) for k, v in kwargs.items())
        self._data = merged
        self._hash: int | None = None

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._data.items()))
        return self._hash

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeSet):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"AttributeSet({self._data!r})"

    def merged(self, other: Mapping[str, Any]) -> AttributeSet:
        """Return a new set with *other* layered over this one."""
        return AttributeSet(self._data, **{str(k): v for k, v in other.items()})

    def common_keys(self, other: Mapping[str, Any]) -> list[str]:
        """Return the attribute names present in both sets, in this set's order."""
        return [k for k in self._data if k in other]

    def to_dict(self) -> dict[str, str]:
        """Return a plain ``dict`` copy."""
        return dict(self._data)
