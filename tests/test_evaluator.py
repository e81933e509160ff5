"""Tests for the ConditionEvaluator entry point and its reports."""
from __future__ import annotations

from typing import Any

import pytest

from pack_conditions.core.config import EvaluatorConfig
from pack_conditions.core.errors import (
    ConditionCycleDetected,
    ConditionNotFulfilled,
    IndeterminateResult,
    UnresolvedConditionReference,
)
from pack_conditions.core.interfaces import InMemoryConditionStore
from pack_conditions.core.types import EvaluationResult
from pack_conditions.engine.context import EvaluationContext
from pack_conditions.engine.diagnostics import EvaluationDiagnostic
from pack_conditions.evaluator import ConditionEvaluator, EvaluationReport
from pack_conditions.model.conditions import Condition, ConditionalItem
from pack_conditions.model.expressions import Expression
from pack_conditions.model.loader import load_conditions

R = EvaluationResult

F407 = {"Dvendor": "STMicroelectronics:13", "Dname": "STM32F407VG", "Tcompiler": "GCC"}
L476 = {"Dvendor": "STMicroelectronics:13", "Dname": "STM32L476RG", "Tcompiler": "ARMCC"}


@pytest.fixture
def store() -> InMemoryConditionStore:
    return load_conditions(
        {
            "conditions": [
                {
                    "id": "GCC",
                    "expressions": [{"role": "require", "attributes": {"Tcompiler": "GCC"}}],
                },
                {
                    "id": "STM32F4",
                    "expressions": [
                        {"role": "require", "attributes": {"Dname": "STM32F4*"}},
                    ],
                },
                {
                    "id": "STM32F4 GCC",
                    "expressions": [
                        {"role": "require", "condition": "STM32F4"},
                        {"role": "require", "condition": "GCC"},
                    ],
                },
                {
                    "id": "Components only",
                    "expressions": [
                        {"role": "require", "attributes": {"Cclass": "CMSIS"}},
                    ],
                },
            ]
        }
    )


@pytest.fixture
def evaluator(store: InMemoryConditionStore) -> ConditionEvaluator:
    return ConditionEvaluator(store=store)


# ===================================================================
# check
# ===================================================================

class TestCheck:

    def test_fulfilled_by_id(self, evaluator: ConditionEvaluator) -> None:
        report = evaluator.check(F407, "STM32F4 GCC")
        assert report.result == R.FULFILLED
        assert report.fulfilled
        assert report.item == "STM32F4 GCC"
        assert report.target == F407
        assert report.diagnostics == []
        report.raise_for_result()

    def test_failed_by_id(self, evaluator: ConditionEvaluator) -> None:
        report = evaluator.check(L476, "STM32F4 GCC")
        assert report.result == R.FAILED
        assert not report.fulfilled
        with pytest.raises(ConditionNotFulfilled) as exc_info:
            report.raise_for_result()
        assert exc_info.value.details == {"item": "STM32F4 GCC", "result": "failed"}

    def test_ignored_is_indeterminate(self, evaluator: ConditionEvaluator) -> None:
        report = evaluator.check(F407, "Components only")
        assert report.result == R.IGNORED
        with pytest.raises(IndeterminateResult):
            report.raise_for_result()

    def test_unknown_id(self, evaluator: ConditionEvaluator) -> None:
        with pytest.raises(UnresolvedConditionReference) as exc_info:
            evaluator.check(F407, "Missing")
        assert exc_info.value.details == {"condition_id": "Missing"}

    def test_item_object(self, evaluator: ConditionEvaluator) -> None:
        item = ConditionalItem("startup_stm32f407xx.s", condition=evaluator.store.get("STM32F4"))
        report = evaluator.check(F407, item)
        assert report.result == R.FULFILLED
        assert "startup_stm32f407xx.s" in report.item

    def test_cycle_raises_from_report(self) -> None:
        loop = Condition("Loop")
        loop.add(Expression.reference("require", loop))
        evaluator = ConditionEvaluator(store=InMemoryConditionStore([loop]))
        report = evaluator.check(F407, "Loop")
        assert report.result == R.ERROR
        assert [d.code for d in report.diagnostics] == [ConditionCycleDetected.code]
        with pytest.raises(ConditionCycleDetected) as exc_info:
            report.raise_for_result()
        assert exc_info.value.details["condition_id"] == "Loop"
        assert exc_info.value.details["result"] == "error"

    def test_error_without_diagnostic(self) -> None:
        report = EvaluationReport(target={}, item="x", result=R.ERROR)
        with pytest.raises(IndeterminateResult):
            report.raise_for_result()

    def test_accept_result_reported(self, store: InMemoryConditionStore) -> None:
        store.add(
            Condition(
                "F4 or F7",
                [
                    Expression.from_attributes("accept", {"Dname": "STM32F4*"}),
                    Expression.from_attributes("accept", {"Dname": "STM32F7*"}),
                ],
            )
        )
        report = ConditionEvaluator(store=store).check(F407, "F4 or F7")
        assert report.result == R.FULFILLED
        assert report.accept_result == R.FULFILLED

    def test_accept_result_cleared_on_error(self, store: InMemoryConditionStore) -> None:
        alternatives = Condition(
            "F4 or F7", [Expression.from_attributes("accept", {"Dname": "STM32F4*"})]
        )
        store.add(alternatives)
        store.add(
            Condition(
                "Broken",
                [
                    Expression.reference("require", alternatives),
                    Expression.reference("require", "Missing"),
                ],
            )
        )
        report = ConditionEvaluator(store=store).check(F407, "Broken")
        assert report.result == R.ERROR
        assert report.accept_result == R.UNDEFINED

    def test_fresh_context_per_call(self, evaluator: ConditionEvaluator) -> None:
        assert evaluator.check(F407, "STM32F4").result == R.FULFILLED
        assert evaluator.check(L476, "STM32F4").result == R.FAILED
        assert evaluator.check(F407, "STM32F4").result == R.FULFILLED

    def test_report_serialises(self, evaluator: ConditionEvaluator) -> None:
        data: dict[str, Any] = evaluator.check(F407, "GCC").model_dump(mode="json")
        assert data["result"] == "fulfilled"
        assert data["item"] == "GCC"


# ===================================================================
# check_all and select
# ===================================================================

class TestBulk:

    def test_check_all(self, evaluator: ConditionEvaluator) -> None:
        assert evaluator.check_all(L476) == {
            "GCC": R.FAILED,
            "STM32F4": R.FAILED,
            "STM32F4 GCC": R.FAILED,
            "Components only": R.IGNORED,
        }

    def test_check_all_empty_store(self) -> None:
        assert ConditionEvaluator().check_all(F407) == {}

    def test_select(self, evaluator: ConditionEvaluator) -> None:
        store = evaluator.store
        items = [
            ConditionalItem("startup_stm32f4xx.s", condition=store.get("STM32F4 GCC")),
            ConditionalItem("README.md"),
            ConditionalItem("startup_stm32l4xx.s", condition=Condition(
                "L4", [Expression.from_attributes("require", {"Dname": "STM32L4*"})]
            )),
        ]
        assert evaluator.select(F407, items) == [items[0], items[1]]
        assert evaluator.select(L476, iter(items)) == [items[1], items[2]]


# ===================================================================
# Configuration and matcher
# ===================================================================

class TestConfiguration:

    def test_new_context_carries_config(self) -> None:
        config = EvaluatorConfig(max_depth=8)
        context = ConditionEvaluator(config=config).new_context(F407)
        assert isinstance(context, EvaluationContext)
        assert context.config is config

    def test_case_insensitive(self, store: InMemoryConditionStore) -> None:
        evaluator = ConditionEvaluator(
            config=EvaluatorConfig(case_sensitive=False), store=store
        )
        assert evaluator.check({"Dname": "stm32f407vg"}, "STM32F4").result == R.FULFILLED

    def test_case_sensitive_by_default(self, evaluator: ConditionEvaluator) -> None:
        assert evaluator.check({"Dname": "stm32f407vg"}, "STM32F4").result == R.FAILED

    def test_custom_matcher(self, store: InMemoryConditionStore) -> None:
        class ExactMatcher:
            def matches(self, predicate, target) -> bool:  # noqa: ANN001
                return all(target.get(k) == v for k, v in predicate.items())

        evaluator = ConditionEvaluator(store=store, matcher=ExactMatcher())
        assert evaluator.check(F407, "STM32F4").result == R.FAILED
        assert evaluator.check(F407, "GCC").result == R.FULFILLED

    def test_depth_limit(self) -> None:
        chain = Condition("C3", [Expression.from_attributes("require", {"Dname": "*"})])
        store = InMemoryConditionStore([chain])
        for index in (2, 1, 0):
            chain = Condition(f"C{index}", [Expression.reference("require", chain)])
            store.add(chain)
        evaluator = ConditionEvaluator(config=EvaluatorConfig(max_depth=3), store=store)
        report = evaluator.check(F407, "C0")
        assert report.result == R.ERROR
        [diagnostic] = report.diagnostics
        assert isinstance(diagnostic, EvaluationDiagnostic)
        assert diagnostic.code == "PC-E201"

    def test_check_all_independent_of_registration_order(self) -> None:
        links = [Condition("C3", [Expression.from_attributes("require", {"Dname": "*"})])]
        for index in (2, 1, 0):
            links.append(Condition(f"C{index}", [Expression.reference("require", links[-1])]))
        config = EvaluatorConfig(max_depth=3)
        tail_first = ConditionEvaluator(config=config, store=InMemoryConditionStore(links))
        head_first = ConditionEvaluator(
            config=config, store=InMemoryConditionStore(list(reversed(links)))
        )
        expected = {"C3": R.FULFILLED, "C2": R.ERROR, "C1": R.ERROR, "C0": R.ERROR}
        assert tail_first.check_all(F407) == expected
        assert head_first.check_all(F407) == expected

    def test_config_is_frozen(self) -> None:
        config = EvaluatorConfig()
        with pytest.raises(ValueError):
            config.max_depth = 1  # type: ignore[misc]

    def test_config_rejects_zero_depth(self) -> None:
        with pytest.raises(ValueError):
            EvaluatorConfig(max_depth=0)


# ===================================================================
# load
# ===================================================================

class TestLoad:

    DATA = {
        "conditions": [
            {"id": "A", "expressions": [{"role": "require", "condition": "Missing"}]},
        ]
    }

    def test_strict_links_by_default(self) -> None:
        with pytest.raises(UnresolvedConditionReference):
            ConditionEvaluator().load(self.DATA)

    def test_lenient_links(self) -> None:
        evaluator = ConditionEvaluator(config=EvaluatorConfig(strict_links=False))
        store = evaluator.load(self.DATA)
        assert store is evaluator.store
        report = evaluator.check(F407, "A")
        assert report.result == R.ERROR
        assert report.diagnostics[0].code == UnresolvedConditionReference.code

    def test_requires_in_memory_store(self) -> None:
        class ReadOnlyStore:
            def get(self, condition_id: str) -> None:
                return None

            def add(self, condition: Condition) -> None:
                raise NotImplementedError

            def conditions(self) -> list[Condition]:
                return []

        with pytest.raises(TypeError):
            ConditionEvaluator(store=ReadOnlyStore()).load(self.DATA)
