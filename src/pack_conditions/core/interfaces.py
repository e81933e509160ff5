"""Abstract interfaces and in-memory implementations.

This module defines the *structural* interfaces (``typing.Protocol``) for
the collaborators of the evaluation engine -- evaluatable items, the
attribute matcher and the condition store -- plus an in-memory condition
store suitable for tests and for graphs built by
:mod:`pack_conditions.model.loader`.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.

The in-memory store is **not** thread-safe.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pack_conditions.core.errors import (
    DuplicateCondition,
    UnresolvedConditionReference,
)
from pack_conditions.core.types import ExpressionDomain

if TYPE_CHECKING:
    from pack_conditions.core.types import EvaluationResult
    from pack_conditions.engine.context import EvaluationContext
    from pack_conditions.model.conditions import Condition

logger = logging.getLogger(__name__)

# ===================================================================
# Protocol (interface) definitions
# ===================================================================

@runtime_checkable
class Evaluatable(Protocol):
    """Anything that can produce a graded result for a context.

    Implementations evaluate themselves against the target attributes
    held by *context*.  Nested items MUST be evaluated through
    :meth:`EvaluationContext.evaluate` so that caching and the recursion
    guard apply.
    """

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        """Return this item's result for *context*."""
        ...


@runtime_checkable
class AttributeMatcher(Protocol):
    """Decides whether an expression predicate matches target attributes."""

    def matches(
        self, predicate: Mapping[str, str], target: Mapping[str, str]
    ) -> bool:
        """Return ``True`` if *predicate* matches *target*."""
        ...


@runtime_checkable
class ConditionStore(Protocol):
    """Provider of the condition graph walked by the engine.

    The engine never mutates the graph it is given.
    """

    def get(self, condition_id: str) -> Condition | None:
        """Return the condition with *condition_id*, or ``None``."""
        ...

    def add(self, condition: Condition) -> None:
        """Register *condition*.  Raises on a duplicate id."""
        ...

    def conditions(self) -> list[Condition]:
        """Return all conditions in registration order."""
        ...


# ===================================================================
# In-memory implementation
# ===================================================================

class InMemoryConditionStore:
    """In-memory condition store.

    Conditions are kept in registration order.  Reference expressions
    carry the id of the condition they point to; :meth:`link` binds each
    of them to the stored condition object so that evaluation can follow
    references by identity.
    """

    def __init__(self, conditions: list[Condition] | None = None) -> None:
        self._conditions: dict[str, Condition] = {}
        for condition in conditions or []:
            self.add(condition)

    def __len__(self) -> int:
        return len(self._conditions)

    def __contains__(self, condition_id: object) -> bool:
        return condition_id in self._conditions

    # -- Protocol implementation ---------------------------------------

    def get(self, condition_id: str) -> Condition | None:
        """Return the condition with *condition_id*, or ``None``."""
        return self._conditions.get(condition_id)

    def add(self, condition: Condition) -> None:
        """Register *condition*.

        Raises :class:`DuplicateCondition` if the id is already taken.
        """
        if condition.id in self._conditions:
            raise DuplicateCondition(
                f"Condition already defined: {condition.id}",
                details={"condition_id": condition.id},
            )
        self._conditions[condition.id] = condition

    def conditions(self) -> list[Condition]:
        """Return all conditions in registration order."""
        return list(self._conditions.values())

    # -- linking ---------------------------------------------------------

    def link(self, *, strict: bool = True) -> list[str]:
        """Bind every reference expression to its target condition.

        Parameters
        ----------
        strict:
            When ``True``, an unknown reference raises.  When ``False``,
            the expression is left unbound (it evaluates to ``ERROR``)
            and its id is reported in the return value.

        Returns
        -------
        list[str]
            Ids of references that could not be resolved.

        Raises
        ------
        UnresolvedConditionReference
            If *strict* and a reference names an unknown condition.
        """
        unresolved: list[str] = []
        for condition in self._conditions.values():
            for expression in condition.expressions:
                if expression.domain != ExpressionDomain.REFERENCE:
                    continue
                target = self._conditions.get(expression.condition_id or "")
                if target is None:
                    if strict:
                        raise UnresolvedConditionReference(
                            f"Condition '{condition.id}' references unknown "
                            f"condition '{expression.condition_id}'",
                            details={
                                "condition_id": condition.id,
                                "reference": expression.condition_id,
                            },
                        )
                    logger.warning(
                        "Unresolved reference '%s' in condition '%s'",
                        expression.condition_id,
                        condition.id,
                    )
                    unresolved.append(str(expression.condition_id))
                    continue
                expression.condition = target
        return unresolved
