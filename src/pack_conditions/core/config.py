"""Evaluator configuration.

Defines the validated configuration model shared by the evaluation
context, the default attribute matcher and the condition store.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EvaluatorConfig(BaseModel):
    """Configuration for condition evaluation.

    All fields carry defaults suitable for evaluating pack conditions,
    so ``EvaluatorConfig()`` is a complete configuration.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    max_depth: int = Field(
        default=128,
        ge=1,
        description=(
            "Maximum nesting of evaluate() calls in one pass.  Deeper "
            "reference chains evaluate to ERROR instead of exhausting "
            "the interpreter stack."
        ),
    )
    case_sensitive: bool = Field(
        default=True,
        description="Whether wildcard attribute matching is case-sensitive.",
    )
    strict_links: bool = Field(
        default=True,
        description=(
            "When True, linking a condition store raises on references "
            "to unknown conditions; when False they are left unbound and "
            "evaluate to ERROR."
        ),
    )
