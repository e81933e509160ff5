"""Condition graph model.

This subpackage provides the items walked by the evaluation engine:

* **Expression** -- an accept/require/deny node tagged with a domain
  (component, device, toolchain or reference).
* **Condition** -- a named rule made of expressions, evaluated as a unit.
* **ConditionalItem** -- an artifact guarded by a condition.
* **load_conditions** -- build and link a condition store from plain data.
"""
from __future__ import annotations

from pack_conditions.model.conditions import Condition, ConditionalItem
from pack_conditions.model.expressions import Expression, infer_domain
from pack_conditions.model.loader import (
    ConditionDefinition,
    ConditionsDocument,
    ExpressionDefinition,
    load_conditions,
)

__all__ = [
    "Condition",
    "ConditionDefinition",
    "ConditionalItem",
    "ConditionsDocument",
    "Expression",
    "ExpressionDefinition",
    "infer_domain",
    "load_conditions",
]
