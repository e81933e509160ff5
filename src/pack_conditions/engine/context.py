"""Evaluation context -- the condition evaluation engine.

An :class:`EvaluationContext` evaluates expressions, conditions and
condition-guarded items against one fixed set of target attributes.  It
owns all state of an evaluation pass:

* the **result cache**, keyed by item identity and deny polarity;
* the **recursion guard**, the conditions currently being combined;
* the **deny flag**, toggled per nesting level by deny expressions;
* the **accept state** of the last finished combination;
* the **diagnostics** explaining every ``ERROR`` produced.

Condition combination
---------------------
For each child expression, in document order:

1. Deny children are evaluated with the deny flag inverted; the flag is
   restored right after the child, whatever its outcome.  The child's
   verdict is then negated (``FULFILLED`` <-> ``FAILED``), so a deny
   constrains the condition exactly when its target is satisfied.
2. ``IGNORED`` and ``UNDEFINED`` results are skipped.
3. ``ERROR`` aborts the combination and is returned unchanged.
4. Accept results are folded with ``max`` (best alternative wins).
5. Require and negated deny results are folded with ``min`` (worst
   constraint wins), starting from ``IGNORED`` as the most permissive
   baseline.

The verdict is the require fold, capped by the accept fold when an
accept expression was seen and its result is weaker.

The depth limit applies to the reference graph, not to the call stack:
every cached result remembers how many nested evaluation levels it
spans, and a cache hit that would not fit under the limit at the
current depth yields ``ERROR`` just as a cold evaluation would.

A context is not safe for concurrent use.  Call :meth:`reset_result`, or
create a new context, before starting an unrelated pass.
"""
from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from pack_conditions.core.config import EvaluatorConfig
from pack_conditions.core.errors import (
    ConditionCycleDetected,
    ConditionsError,
    EvaluationDepthExceeded,
    UnknownExpressionDomain,
    UnresolvedConditionReference,
)
from pack_conditions.core.types import (
    AttributeSet,
    EvaluationResult,
    ExpressionDomain,
    ExpressionRole,
)
from pack_conditions.engine.diagnostics import EvaluationDiagnostic
from pack_conditions.matching.wildcards import WildcardMatcher

if TYPE_CHECKING:
    from pack_conditions.core.interfaces import AttributeMatcher, Evaluatable
    from pack_conditions.model.conditions import Condition
    from pack_conditions.model.expressions import Expression

logger = logging.getLogger(__name__)

_NO_CONTRIBUTION = (EvaluationResult.IGNORED, EvaluationResult.UNDEFINED)

_MATCHED_DOMAINS = (ExpressionDomain.DEVICE, ExpressionDomain.TOOLCHAIN)

_NEGATED = {
    EvaluationResult.FULFILLED: EvaluationResult.FAILED,
    EvaluationResult.FAILED: EvaluationResult.FULFILLED,
}


class EvaluationContext:
    """Evaluates items against a fixed set of target attributes.

    Parameters
    ----------
    attributes:
        Target attributes of this pass (device, core, toolchain...).
    matcher:
        Matcher for device and toolchain predicates.  Defaults to a
        :class:`~pack_conditions.matching.wildcards.WildcardMatcher`
        honouring ``config.case_sensitive``.
    config:
        Evaluation limits.  Defaults to ``EvaluatorConfig()``.
    """

    def __init__(
        self,
        attributes: Mapping[str, Any] | None = None,
        *,
        matcher: AttributeMatcher | None = None,
        config: EvaluatorConfig | None = None,
    ) -> None:
        self._config = config or EvaluatorConfig()
        self._matcher: AttributeMatcher = matcher or WildcardMatcher(
            case_sensitive=self._config.case_sensitive
        )
        self._attributes = _as_attribute_set(attributes)

        self._result = EvaluationResult.IGNORED
        # (id(item), deny) -> (item, result, height); the item is held so its
        # id stays unique for the lifetime of the pass, height is the number
        # of nested evaluation levels the result spans
        self._results: dict[tuple[int, bool], tuple[Any, EvaluationResult, int]] = {}
        self._diagnostics: list[EvaluationDiagnostic] = []

        # transient state of the current call stack
        self._in_progress: dict[int, Condition] = {}
        self._accept_result = EvaluationResult.UNDEFINED
        self._deny = False
        self._depth = 0
        self._reached = 0

    # -- public properties --------------------------------------------------

    @property
    def attributes(self) -> AttributeSet:
        """Target attributes of the current pass."""
        return self._attributes

    @attributes.setter
    def attributes(self, value: Mapping[str, Any]) -> None:
        self._attributes = _as_attribute_set(value)
        self.reset_result()

    @property
    def config(self) -> EvaluatorConfig:
        return self._config

    @property
    def evaluation_result(self) -> EvaluationResult:
        """Overall verdict of the pass, as set by the consumer."""
        return self._result

    @evaluation_result.setter
    def evaluation_result(self, result: EvaluationResult) -> None:
        self._result = result

    @property
    def accept_result(self) -> EvaluationResult:
        """Accept fold of the most recently finished condition combination."""
        return self._accept_result

    @property
    def is_denying(self) -> bool:
        """``True`` while evaluating under an odd number of deny expressions."""
        return self._deny

    @property
    def diagnostics(self) -> list[EvaluationDiagnostic]:
        return list(self._diagnostics)

    @property
    def active_conditions(self) -> list[Condition]:
        """Conditions currently held by the recursion guard."""
        return list(self._in_progress.values())

    # -- lifecycle ----------------------------------------------------------

    def reset_result(self) -> None:
        """Forget everything computed so far.

        Clears the cache, the recursion guard, the accept and deny state,
        the diagnostics and the overall result.
        """
        self._result = EvaluationResult.IGNORED
        self._results.clear()
        self._diagnostics.clear()
        self._in_progress.clear()
        self._accept_result = EvaluationResult.UNDEFINED
        self._deny = False
        self._depth = 0
        self._reached = 0

    def result_of(self, item: object) -> EvaluationResult | None:
        """Return the cached result of *item* under normal polarity, if any."""
        entry = self._results.get((id(item), False))
        return entry[1] if entry is not None else None

    # -- evaluation ---------------------------------------------------------

    def evaluate(self, item: Evaluatable | None) -> EvaluationResult:
        """Evaluate *item*, serving graded results from the pass cache.

        ``None`` evaluates to ``IGNORED``.  ``IGNORED`` and ``UNDEFINED``
        results are not cached and are recomputed on the next request;
        ``ERROR`` is recorded but never served from the cache.  A cached
        result is served only if the levels it spans still fit under
        ``max_depth`` at the current depth.
        """
        if item is None:
            return EvaluationResult.IGNORED

        key = (id(item), self._deny)
        cached = self._results.get(key)
        if cached is not None and cached[1].is_graded:
            _, result, height = cached
            if self._depth + height > self._config.max_depth:
                return self._depth_exceeded(item)
            logger.debug("Cache hit for %r: %s", item, result)
            self._reached = max(self._reached, self._depth + height)
            return result

        if self._depth >= self._config.max_depth:
            return self._depth_exceeded(item)

        outer_reached = self._reached
        self._depth += 1
        self._reached = self._depth
        try:
            result = item.evaluate(self)
        finally:
            self._depth -= 1
            height = self._reached - self._depth
            self._reached = max(outer_reached, self._reached)

        if result not in _NO_CONTRIBUTION:
            self._results[key] = (item, result, height)
        return result

    def evaluate_expression(self, expression: Expression | None) -> EvaluationResult:
        """Evaluate a single expression according to its domain.

        * component -- ``IGNORED``;
        * device, toolchain -- ``FULFILLED`` if the predicate matches the
          target attributes, ``FAILED`` otherwise;
        * reference -- the result of the referenced condition;
        * anything else -- ``ERROR``.
        """
        if expression is None:
            return EvaluationResult.IGNORED

        domain = expression.domain
        if domain == ExpressionDomain.COMPONENT:
            return EvaluationResult.IGNORED

        if domain in _MATCHED_DOMAINS:
            matched = self._matcher.matches(expression.attributes, self._attributes)
            return EvaluationResult.FULFILLED if matched else EvaluationResult.FAILED

        if domain == ExpressionDomain.REFERENCE:
            if expression.condition is None:
                self._diagnose(
                    UnresolvedConditionReference,
                    f"Reference to condition '{expression.condition_id}' "
                    "is not linked",
                    expression.condition_id,
                )
                return EvaluationResult.ERROR
            return self.evaluate(expression.condition)

        self._diagnose(
            UnknownExpressionDomain,
            f"Unknown expression domain '{domain}'",
            None,
        )
        return EvaluationResult.ERROR

    def evaluate_condition(self, condition: Condition) -> EvaluationResult:
        """Combine the results of *condition*'s expressions.

        Returns ``ERROR`` without evaluating anything if *condition* is
        already being evaluated further up the stack.
        """
        if id(condition) in self._in_progress:
            self._diagnose(
                ConditionCycleDetected,
                f"Condition '{condition.id}' references itself",
                condition.id,
            )
            return EvaluationResult.ERROR

        self._accept_result = EvaluationResult.UNDEFINED
        with self._guard(condition):
            result_require = EvaluationResult.IGNORED
            result_accept = EvaluationResult.UNDEFINED
            for expression in condition.expressions:
                is_deny = expression.role == ExpressionRole.DENY
                with self._deny_scope(is_deny):
                    result = self.evaluate(expression)
                if result in _NO_CONTRIBUTION:
                    continue
                if result == EvaluationResult.ERROR:
                    logger.debug("Condition %r aborted on %r", condition.id, expression)
                    self._accept_result = EvaluationResult.UNDEFINED
                    return result
                if is_deny:
                    result = _NEGATED.get(result, result)
                if expression.role == ExpressionRole.ACCEPT:
                    if result_accept == EvaluationResult.UNDEFINED or result > result_accept:
                        result_accept = result
                elif result_require == EvaluationResult.IGNORED or result < result_require:
                    result_require = result

        self._accept_result = result_accept
        if result_accept != EvaluationResult.UNDEFINED and (
            result_require == EvaluationResult.IGNORED or result_accept < result_require
        ):
            result_require = result_accept
        logger.debug("Condition %r evaluated to %s", condition.id, result_require)
        return result_require

    def filter_items(self, items: Iterable[Any] | None) -> list[Any]:
        """Return, in input order, the items that evaluate to a fulfilled grade.

        Failed and weaker grades, ``IGNORED`` and ``ERROR`` are excluded.
        """
        if not items:
            return []
        return [item for item in items if self.evaluate(item).is_fulfilled]

    # -- internal helpers ---------------------------------------------------

    @contextlib.contextmanager
    def _guard(self, condition: Condition) -> Iterator[None]:
        self._in_progress[id(condition)] = condition
        try:
            yield
        finally:
            del self._in_progress[id(condition)]

    @contextlib.contextmanager
    def _deny_scope(self, invert: bool) -> Iterator[None]:
        saved = self._deny
        if invert:
            self._deny = not saved
        try:
            yield
        finally:
            self._deny = saved

    def _depth_exceeded(self, item: object) -> EvaluationResult:
        self._diagnose(
            EvaluationDepthExceeded,
            f"Evaluation depth limit of {self._config.max_depth} reached "
            f"at {item!r}",
            getattr(item, "id", None),
        )
        return EvaluationResult.ERROR

    def _diagnose(
        self,
        error: type[ConditionsError],
        message: str,
        condition_id: str | None,
    ) -> None:
        logger.warning("%s: %s", error.code, message)
        self._diagnostics.append(
            EvaluationDiagnostic(
                code=error.code, message=message, condition_id=condition_id
            )
        )


def _as_attribute_set(value: Mapping[str, Any] | None) -> AttributeSet:
    if isinstance(value, AttributeSet):
        return value
    return AttributeSet(value)
