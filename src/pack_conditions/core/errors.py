"""Condition evaluation error-code hierarchy.

Hierarchy
---------
::

    ConditionsError
    +-- ModelError        (PC-E1xx)
    +-- EvaluationError   (PC-E2xx)

Evaluation itself never raises for faults in the condition graph: it
returns :attr:`EvaluationResult.ERROR` and records a diagnostic carrying
one of the codes below.  The exceptions are raised at the boundaries --
while building or linking a condition graph, and when a consumer asks a
report to fail loudly via
:meth:`~pack_conditions.evaluator.EvaluationReport.raise_for_result`.

Usage
-----
Raise concrete subclasses directly::

    raise UnresolvedConditionReference("STM32F4 CMSIS")

Catch by category::

    try:
        ...
    except EvaluationError:
        # handles ConditionCycleDetected, EvaluationDepthExceeded, etc.
        ...
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class ConditionsError(Exception):
    """Base exception for all condition evaluation errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"PC-E200"``.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "PC-E000"
    message: str = "Unknown condition evaluation error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to a plain diagnostic mapping."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        if self.resolution:
            payload["resolution"] = self.resolution
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class ModelError(ConditionsError):
    """PC-E1xx -- Malformed or inconsistent condition graphs."""

    code = "PC-E1XX"


class EvaluationError(ConditionsError):
    """PC-E2xx -- Faults and negative verdicts surfaced after evaluation."""

    code = "PC-E2XX"


# ===================================================================
# PC-E1xx  Model Errors
# ===================================================================

class UnknownExpressionDomain(ModelError):
    """PC-E100 -- An expression's domain is not one of the known kinds."""

    code = "PC-E100"
    message = "Expression domain is not recognised"
    resolution = (
        "Use a component, device, toolchain or reference expression."
    )


class UnresolvedConditionReference(ModelError):
    """PC-E101 -- A reference expression names a condition that does not exist."""

    code = "PC-E101"
    message = "Referenced condition is not defined"
    resolution = "Define the referenced condition or fix the reference id."


class DuplicateCondition(ModelError):
    """PC-E102 -- Two conditions share the same id."""

    code = "PC-E102"
    message = "Condition id is already defined"
    resolution = "Give every condition a unique id."


class InvalidConditionDefinition(ModelError):
    """PC-E103 -- A condition or expression definition cannot be interpreted."""

    code = "PC-E103"
    message = "Condition definition is invalid"
    resolution = (
        "Each expression needs either a 'condition' reference or "
        "attributes from a single domain (D*/P*, T*, C*)."
    )


# ===================================================================
# PC-E2xx  Evaluation Errors
# ===================================================================

class ConditionCycleDetected(EvaluationError):
    """PC-E200 -- A condition is reachable from itself through references."""

    code = "PC-E200"
    message = "Condition references itself directly or transitively"
    resolution = "Break the reference cycle in the condition definitions."


class EvaluationDepthExceeded(EvaluationError):
    """PC-E201 -- The reference chain is deeper than the configured limit."""

    code = "PC-E201"
    message = "Condition reference chain exceeds the maximum evaluation depth"
    resolution = "Flatten the condition graph or raise EvaluatorConfig.max_depth."


class IndeterminateResult(EvaluationError):
    """PC-E202 -- Evaluation produced no information for the target."""

    code = "PC-E202"
    message = "Condition does not apply to the target attributes"
    resolution = "Check that the condition has device or toolchain expressions."


class ConditionNotFulfilled(EvaluationError):
    """PC-E203 -- The condition evaluated to a grade below FULFILLED."""

    code = "PC-E203"
    message = "Condition is not fulfilled for the target attributes"
    resolution = "Select a device or toolchain the condition accepts."


# ===================================================================
# Code -> class lookup
# ===================================================================

_CODE_MAP: dict[str, type[ConditionsError]] = {
    cls.code: cls
    for cls in [
        # E1xx
        UnknownExpressionDomain,
        UnresolvedConditionReference,
        DuplicateCondition,
        InvalidConditionDefinition,
        # E2xx
        ConditionCycleDetected,
        EvaluationDepthExceeded,
        IndeterminateResult,
        ConditionNotFulfilled,
    ]
}


def error_from_code(code: str, message: str | None = None) -> ConditionsError:
    """Instantiate the correct exception class for an error code.

    Parameters
    ----------
    code:
        An error code such as ``"PC-E200"``.
    message:
        Optional override for the default error message.

    Raises
    ------
    KeyError
        If *code* is not a recognised error code.
    """
    cls = _CODE_MAP[code]
    return cls(message) if message else cls()
