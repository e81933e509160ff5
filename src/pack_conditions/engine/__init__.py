"""Condition evaluation engine.

* **EvaluationContext** -- evaluates items against one set of target
  attributes with a per-pass cache, a recursion guard and deny scoping.
* **EvaluationDiagnostic** -- the reason behind an ``ERROR`` result.
"""
from __future__ import annotations

from pack_conditions.engine.context import EvaluationContext
from pack_conditions.engine.diagnostics import EvaluationDiagnostic

__all__ = [
    "EvaluationContext",
    "EvaluationDiagnostic",
]
