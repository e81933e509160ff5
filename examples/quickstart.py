#!/usr/bin/env python3
"""pack-conditions quickstart -- selecting pack files for a build.

Demonstrates the core workflow:

1. Load the conditions of a device family pack.
2. Create an evaluator over the loaded store.
3. Check single conditions for a device/toolchain configuration.
4. Select the pack files that apply to the configuration.
5. Inspect a failing check and the error it raises.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import logging

from pack_conditions import (
    ConditionalItem,
    ConditionEvaluator,
    ConditionsError,
    EvaluatorConfig,
)

PACK = {
    "conditions": [
        {
            "id": "GCC",
            "expressions": [{"role": "require", "attributes": {"Tcompiler": "GCC"}}],
        },
        {
            "id": "STM32F4",
            "expressions": [
                {"role": "require", "attributes": {"Dvendor": "STMicroelectronics:13"}},
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
            "id": "Hard float",
            "expressions": [
                {"role": "accept", "attributes": {"Dfpu": "SP_FPU"}},
                {"role": "accept", "attributes": {"Dfpu": "DP_FPU"}},
            ],
        },
    ]
}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # -- Step 1/2: Load the pack and create the evaluator --------------------
    evaluator = ConditionEvaluator(config=EvaluatorConfig(case_sensitive=False))
    store = evaluator.load(PACK)
    print(f"[1] Loaded {len(store)} conditions")

    # -- Step 3: Check a condition -------------------------------------------
    target = {
        "Dvendor": "STMicroelectronics:13",
        "Dname": "STM32F407VG",
        "Dcore": "Cortex-M4",
        "Dfpu": "SP_FPU",
        "Tcompiler": "GCC",
    }
    report = evaluator.check(target, "STM32F4 GCC")
    print(f"[2] STM32F4 GCC -> {report.result}")

    # -- Step 4: Select the files for the build ------------------------------
    files = [
        ConditionalItem("startup_stm32f407xx.s", store.get("STM32F4 GCC")),
        ConditionalItem("arm_cortexM4lf_math.a", store.get("Hard float")),
        ConditionalItem("system_stm32f4xx.c", store.get("STM32F4")),
        ConditionalItem("retarget_io.c"),
    ]
    selected = evaluator.select(target, files)
    print(f"[3] Selected files: {[f.name for f in selected]}")

    # -- Step 5: A configuration the pack does not support -------------------
    other = dict(target, Dname="LPC1768", Dvendor="NXP:11", Dfpu="NO_FPU")
    report = evaluator.check(other, "STM32F4 GCC")
    print(f"[4] LPC1768 -> {report.result}")
    try:
        report.raise_for_result()
    except ConditionsError as exc:
        print(f"    error: [{exc.code}] {exc.message}")


if __name__ == "__main__":
    main()
