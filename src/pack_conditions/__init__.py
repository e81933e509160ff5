"""pack-conditions -- Condition evaluation for software pack descriptions.

Decides whether the conditions of a software pack (device, core and
toolchain compatibility rules built from accept/require/deny
expressions) are satisfied by a build configuration.

Layers
------
0. Core types, errors, config, interfaces (``pack_conditions.core``)
1. Condition graph model (:mod:`pack_conditions.model`)
2. Attribute matching (:mod:`pack_conditions.matching`)
3. Evaluation engine (:mod:`pack_conditions.engine`)
4. Consumer entry point (:mod:`pack_conditions.evaluator`)
"""
from __future__ import annotations

__version__ = "1.0.0a1"

# ---------------------------------------------------------------------------
# Layer 0 -- Core types, errors, config, interfaces
# ---------------------------------------------------------------------------
from pack_conditions.core.config import EvaluatorConfig
from pack_conditions.core.errors import (
    ConditionCycleDetected,
    ConditionNotFulfilled,
    ConditionsError,
    DuplicateCondition,
    EvaluationDepthExceeded,
    EvaluationError,
    IndeterminateResult,
    InvalidConditionDefinition,
    ModelError,
    UnknownExpressionDomain,
    UnresolvedConditionReference,
    error_from_code,
)
from pack_conditions.core.interfaces import (
    AttributeMatcher,
    ConditionStore,
    Evaluatable,
    InMemoryConditionStore,
)
from pack_conditions.core.types import (
    AttributeSet,
    EvaluationResult,
    ExpressionDomain,
    ExpressionRole,
)

# ---------------------------------------------------------------------------
# Layer 3 -- Evaluation engine
# ---------------------------------------------------------------------------
from pack_conditions.engine import EvaluationContext, EvaluationDiagnostic

# ---------------------------------------------------------------------------
# Layer 4 -- Consumer entry point
# ---------------------------------------------------------------------------
from pack_conditions.evaluator import ConditionEvaluator, EvaluationReport

# ---------------------------------------------------------------------------
# Layer 2 -- Attribute matching
# ---------------------------------------------------------------------------
from pack_conditions.matching import WildcardMatcher

# ---------------------------------------------------------------------------
# Layer 1 -- Condition graph model
# ---------------------------------------------------------------------------
from pack_conditions.model import (
    Condition,
    ConditionalItem,
    Expression,
    load_conditions,
)

__all__ = [
    # Meta
    "__version__",
    # Core types & enums
    "AttributeSet",
    "EvaluationResult",
    "ExpressionDomain",
    "ExpressionRole",
    # Config
    "EvaluatorConfig",
    # Interfaces
    "AttributeMatcher",
    "ConditionStore",
    "Evaluatable",
    "InMemoryConditionStore",
    # Error hierarchy
    "ConditionsError",
    "ModelError",
    "EvaluationError",
    "UnknownExpressionDomain",
    "UnresolvedConditionReference",
    "DuplicateCondition",
    "InvalidConditionDefinition",
    "ConditionCycleDetected",
    "EvaluationDepthExceeded",
    "IndeterminateResult",
    "ConditionNotFulfilled",
    "error_from_code",
    # Layer 1 -- Model
    "Condition",
    "ConditionalItem",
    "Expression",
    "load_conditions",
    # Layer 2 -- Matching
    "WildcardMatcher",
    # Layer 3 -- Engine
    "EvaluationContext",
    "EvaluationDiagnostic",
    # Layer 4 -- Consumer
    "ConditionEvaluator",
    "EvaluationReport",
]
