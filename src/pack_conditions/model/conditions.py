"""Conditions and condition-guarded items.

A :class:`Condition` is a named rule made of child expressions that is
evaluated as one unit.  Nested conditions are never direct children;
they are reached through reference expressions.

A :class:`ConditionalItem` is any artifact of a pack -- a source file, a
component, a preprocessor define -- whose inclusion in a build depends
on a condition.  Collections of such items are what consumers pass to
:meth:`EvaluationContext.filter_items`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pack_conditions.core.types import EvaluationResult, ExpressionDomain
from pack_conditions.model.expressions import Expression

if TYPE_CHECKING:
    from pack_conditions.engine.context import EvaluationContext


@dataclass(eq=False, slots=True)
class Condition:
    """A named compatibility rule.

    Attributes
    ----------
    id:
        Unique name of the condition within its store.
    expressions:
        Child expressions in document order.
    description:
        Free-text description from the pack.
    """

    id: str
    expressions: list[Expression] = field(default_factory=list)
    description: str = ""

    def add(self, expression: Expression) -> Expression:
        """Append *expression* and return it."""
        self.expressions.append(expression)
        return expression

    def references(self) -> list[str]:
        """Return the ids of the conditions this one references, in order."""
        return [
            e.condition_id
            for e in self.expressions
            if e.domain == ExpressionDomain.REFERENCE and e.condition_id
        ]

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        return context.evaluate_condition(self)

    def __repr__(self) -> str:
        return f"Condition({self.id!r}, {len(self.expressions)} expressions)"


@dataclass(eq=False, slots=True)
class ConditionalItem:
    """An artifact whose applicability is governed by a condition.

    An item without a condition applies to every target and evaluates to
    ``FULFILLED``.
    """

    name: str
    condition: Condition | None = None
    payload: Any = None

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        if self.condition is None:
            return EvaluationResult.FULFILLED
        return context.evaluate(self.condition)

    def __repr__(self) -> str:
        guard = self.condition.id if self.condition is not None else None
        return f"ConditionalItem({self.name!r}, condition={guard!r})"
