"""Condition evaluator -- the main entry point for consumers.

This module implements :class:`ConditionEvaluator`, which a consumer
(a build system deciding which files, components or flags apply to a
build configuration) calls once per configuration check.  Every call
runs in a fresh :class:`~pack_conditions.engine.context.EvaluationContext`,
so results never leak between unrelated configurations.

Usage
-----
::

    from pack_conditions import ConditionEvaluator, load_conditions

    store = load_conditions(definitions)
    evaluator = ConditionEvaluator(store=store)

    report = evaluator.check({"Dname": "STM32F407VG", "Tcompiler": "GCC"},
                             "STM32F4 GCC")
    if not report.fulfilled:
        report.raise_for_result()
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from pack_conditions.core.config import EvaluatorConfig
from pack_conditions.core.errors import (
    ConditionNotFulfilled,
    IndeterminateResult,
    UnresolvedConditionReference,
)
from pack_conditions.core.interfaces import InMemoryConditionStore
from pack_conditions.core.types import EvaluationResult
from pack_conditions.engine.context import EvaluationContext
from pack_conditions.engine.diagnostics import EvaluationDiagnostic
from pack_conditions.model.loader import load_conditions

if TYPE_CHECKING:
    from pack_conditions.core.interfaces import (
        AttributeMatcher,
        ConditionStore,
        Evaluatable,
    )

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Evaluation report
# ---------------------------------------------------------------------------

class EvaluationReport(BaseModel):
    """Outcome of checking one item against one configuration.

    Attributes
    ----------
    target:
        The target attributes the item was evaluated against.
    item:
        ``repr`` of the evaluated item (or the condition id).
    result:
        The verdict.
    accept_result:
        Accept fold of the last condition combined during the check.
    diagnostics:
        Reasons for an ``ERROR`` verdict, innermost first.
    """

    model_config = ConfigDict(frozen=True)

    target: dict[str, str]
    item: str
    result: EvaluationResult
    accept_result: EvaluationResult = EvaluationResult.UNDEFINED
    diagnostics: list[EvaluationDiagnostic] = Field(default_factory=list)

    @property
    def fulfilled(self) -> bool:
        return self.result.is_fulfilled

    def raise_for_result(self) -> None:
        """Raise unless the verdict is fulfilled.

        Raises
        ------
        ConditionsError
            The error recorded by the first diagnostic for ``ERROR``.
        ConditionNotFulfilled
            For graded verdicts below ``FULFILLED``.
        IndeterminateResult
            For ``IGNORED`` or ``UNDEFINED`` verdicts.
        """
        if self.fulfilled:
            return
        details = {"item": self.item, "result": str(self.result)}
        if self.result == EvaluationResult.ERROR:
            if self.diagnostics:
                error = self.diagnostics[0].to_error()
                error.details.update(details)
                raise error
            raise IndeterminateResult(
                f"Evaluation of {self.item} failed without a diagnostic",
                details=details,
            )
        if self.result.is_graded:
            raise ConditionNotFulfilled(
                f"{self.item} evaluated to {self.result}", details=details
            )
        raise IndeterminateResult(details=details)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class ConditionEvaluator:
    """Evaluates conditions and condition-guarded items per configuration.

    Parameters
    ----------
    config:
        Evaluation limits and matching options.
    store:
        Condition store used to resolve condition ids passed to
        :meth:`check` and enumerated by :meth:`check_all`.
    matcher:
        Attribute matcher handed to every context.  When ``None`` each
        context builds the default wildcard matcher.
    """

    def __init__(
        self,
        config: EvaluatorConfig | None = None,
        store: ConditionStore | None = None,
        matcher: AttributeMatcher | None = None,
    ) -> None:
        self._config = config or EvaluatorConfig()
        self._store: ConditionStore = (
            store if store is not None else InMemoryConditionStore()
        )
        self._matcher = matcher

    @property
    def config(self) -> EvaluatorConfig:
        return self._config

    @property
    def store(self) -> ConditionStore:
        return self._store

    def load(self, data: Mapping[str, Any]) -> InMemoryConditionStore:
        """Load condition definitions into the evaluator's store.

        References are linked according to ``config.strict_links``.
        """
        if not isinstance(self._store, InMemoryConditionStore):
            raise TypeError(
                f"Cannot load into {type(self._store).__name__}; "
                "an InMemoryConditionStore is required"
            )
        return load_conditions(data, self._store, strict=self._config.strict_links)

    def new_context(self, attributes: Mapping[str, Any]) -> EvaluationContext:
        """Create a context for one evaluation pass over *attributes*."""
        return EvaluationContext(
            attributes, matcher=self._matcher, config=self._config
        )

    def check(
        self,
        attributes: Mapping[str, Any],
        item: Evaluatable | str,
    ) -> EvaluationReport:
        """Evaluate *item* for the configuration described by *attributes*.

        *item* may be any evaluatable item or the id of a stored condition.

        Raises
        ------
        UnresolvedConditionReference
            If *item* is an id the store does not know.
        """
        target = self._resolve(item)
        context = self.new_context(attributes)
        result = context.evaluate(target)
        context.evaluation_result = result
        logger.info("%r for %s: %s", target, dict(context.attributes), result)
        return EvaluationReport(
            target=context.attributes.to_dict(),
            item=item if isinstance(item, str) else repr(item),
            result=result,
            accept_result=context.accept_result,
            diagnostics=context.diagnostics,
        )

    def check_all(self, attributes: Mapping[str, Any]) -> dict[str, EvaluationResult]:
        """Evaluate every stored condition in a single pass."""
        context = self.new_context(attributes)
        return {c.id: context.evaluate(c) for c in self._store.conditions()}

    def select(
        self,
        attributes: Mapping[str, Any],
        items: Iterable[Any],
    ) -> list[Any]:
        """Return the items that apply to the configuration, in input order."""
        context = self.new_context(attributes)
        return context.filter_items(list(items))

    def _resolve(self, item: Evaluatable | str) -> Evaluatable:
        if not isinstance(item, str):
            return item
        condition = self._store.get(item)
        if condition is None:
            raise UnresolvedConditionReference(
                f"Unknown condition: {item}", details={"condition_id": item}
            )
        return condition
