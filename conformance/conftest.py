"""Shared fixtures for condition evaluation conformance tests.

Provides a small but realistic device family pack (STM32F4/STM32L4 with
GCC and Arm Compiler toolchain rules), the target configurations it is
checked against, and a factory for fresh evaluation contexts.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from pack_conditions.core.interfaces import InMemoryConditionStore
from pack_conditions.core.types import EvaluationResult
from pack_conditions.engine.context import EvaluationContext
from pack_conditions.model.loader import load_conditions

# ---------------------------------------------------------------------------
# Target configurations
# ---------------------------------------------------------------------------
STM32F407_GCC = {
    "Dvendor": "STMicroelectronics:13",
    "Dname": "STM32F407VG",
    "Dcore": "Cortex-M4",
    "Dfpu": "SP_FPU",
    "Tcompiler": "GCC",
}
STM32L476_ARMCC = {
    "Dvendor": "STMicroelectronics:13",
    "Dname": "STM32L476RG",
    "Dcore": "Cortex-M4",
    "Dfpu": "SP_FPU",
    "Tcompiler": "ARMCC",
}
LPC1768_GCC = {
    "Dvendor": "NXP:11",
    "Dname": "LPC1768",
    "Dcore": "Cortex-M3",
    "Dfpu": "NO_FPU",
    "Tcompiler": "GCC",
}


# ---------------------------------------------------------------------------
# Pack definitions
# ---------------------------------------------------------------------------
PACK_CONDITIONS: dict[str, Any] = {
    "conditions": [
        {
            "id": "GCC",
            "description": "GNU Arm Embedded toolchain",
            "expressions": [{"role": "require", "attributes": {"Tcompiler": "GCC"}}],
        },
        {
            "id": "ARMCC",
            "description": "Arm Compiler",
            "expressions": [{"role": "require", "attributes": {"Tcompiler": "ARMCC"}}],
        },
        {
            "id": "STM32F4",
            "expressions": [
                {"role": "require", "attributes": {"Dvendor": "STMicroelectronics:13"}},
                {"role": "require", "attributes": {"Dname": "STM32F4*"}},
            ],
        },
        {
            "id": "STM32L4",
            "expressions": [
                {"role": "require", "attributes": {"Dvendor": "STMicroelectronics:13"}},
                {"role": "require", "attributes": {"Dname": "STM32L4*"}},
            ],
        },
        {
            "id": "STM32 F4 or L4",
            "expressions": [
                {"role": "accept", "condition": "STM32F4"},
                {"role": "accept", "condition": "STM32L4"},
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
            "id": "Cortex-M FPU",
            "expressions": [
                {"role": "require", "attributes": {"Dcore": "Cortex-M4"}},
                {"role": "deny", "attributes": {"Dfpu": "NO_FPU"}},
            ],
        },
        {
            "id": "Not ARMCC",
            "expressions": [{"role": "deny", "condition": "ARMCC"}],
        },
        {
            "id": "CMSIS Core",
            "expressions": [
                {"role": "require", "attributes": {"Cclass": "CMSIS", "Cgroup": "CORE"}},
            ],
        },
        {
            "id": "STM32F4 CMSIS",
            "expressions": [
                {"role": "require", "condition": "STM32F4"},
                {"role": "require", "condition": "CMSIS Core"},
            ],
        },
    ]
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def pack_store() -> InMemoryConditionStore:
    return load_conditions(PACK_CONDITIONS)


@pytest.fixture()
def make_context() -> Callable[[Mapping[str, Any]], EvaluationContext]:
    """Factory for fresh contexts, one per evaluation pass."""

    def _factory(attributes: Mapping[str, Any] = STM32F407_GCC) -> EvaluationContext:
        return EvaluationContext(attributes)

    return _factory


@pytest.fixture()
def context() -> EvaluationContext:
    return EvaluationContext(STM32F407_GCC)


class CountingItem:
    """Evaluatable stub returning a fixed result and counting calls."""

    def __init__(self, result: EvaluationResult) -> None:
        self.result = result
        self.calls = 0

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        self.calls += 1
        return self.result


@pytest.fixture()
def counting_item() -> Callable[[EvaluationResult], CountingItem]:
    return CountingItem


@pytest.fixture()
def targets() -> dict[str, dict[str, str]]:
    return {
        "stm32f407_gcc": dict(STM32F407_GCC),
        "stm32l476_armcc": dict(STM32L476_ARMCC),
        "lpc1768_gcc": dict(LPC1768_GCC),
    }
