"""Build condition graphs from plain mappings.

The expected shape mirrors the ``<conditions>`` section of a pack
description, already converted to Python data::

    {
        "conditions": [
            {
                "id": "ARMCC",
                "description": "Arm Compiler",
                "expressions": [
                    {"role": "require", "attributes": {"Tcompiler": "ARMCC"}},
                ],
            },
            {
                "id": "STM32F4 ARMCC",
                "expressions": [
                    {"role": "require", "attributes": {"Dname": "STM32F4*"}},
                    {"role": "require", "condition": "ARMCC"},
                ],
            },
        ]
    }

Definitions are validated with Pydantic before any condition is built,
and the resulting store is linked so that reference expressions point
at their target condition objects.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from pack_conditions.core.errors import InvalidConditionDefinition
from pack_conditions.core.interfaces import InMemoryConditionStore
from pack_conditions.core.types import ExpressionRole
from pack_conditions.model.conditions import Condition
from pack_conditions.model.expressions import REFERENCE_ATTRIBUTE, Expression

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Definition models
# ---------------------------------------------------------------------------

class ExpressionDefinition(BaseModel):
    """One accept/require/deny entry of a condition definition."""

    model_config = ConfigDict(extra="forbid")

    role: ExpressionRole
    attributes: dict[str, str] = Field(default_factory=dict)
    condition: str | None = None

    @model_validator(mode="after")
    def _one_kind(self) -> ExpressionDefinition:
        if self.condition is not None and self.attributes:
            raise ValueError("use either 'condition' or 'attributes', not both")
        if self.condition is None and not self.attributes:
            raise ValueError("expression needs 'condition' or 'attributes'")
        return self

    def build(self) -> Expression:
        if self.condition is not None:
            return Expression.from_attributes(
                self.role, {REFERENCE_ATTRIBUTE: self.condition}
            )
        return Expression.from_attributes(self.role, self.attributes)


class ConditionDefinition(BaseModel):
    """A named condition definition."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    description: str = ""
    expressions: list[ExpressionDefinition] = Field(default_factory=list)

    def build(self) -> Condition:
        return Condition(
            id=self.id,
            description=self.description,
            expressions=[e.build() for e in self.expressions],
        )


class ConditionsDocument(BaseModel):
    """Top-level container of condition definitions."""

    model_config = ConfigDict(extra="forbid")

    conditions: list[ConditionDefinition] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_conditions(
    data: Mapping[str, Any],
    store: InMemoryConditionStore | None = None,
    *,
    strict: bool = True,
) -> InMemoryConditionStore:
    """Build, register and link the conditions described by *data*.

    Parameters
    ----------
    data:
        A mapping with a ``"conditions"`` list (see module docstring).
    store:
        Store to add the conditions to.  A new store is created when
        ``None``.
    strict:
        Passed to :meth:`InMemoryConditionStore.link`.

    Raises
    ------
    InvalidConditionDefinition
        If *data* does not validate or an expression's attributes do not
        belong to a single domain.
    DuplicateCondition
        If a condition id is defined twice.
    UnresolvedConditionReference
        If *strict* and a reference names an unknown condition.
    """
    try:
        document = ConditionsDocument.model_validate(data)
    except ValidationError as exc:
        raise InvalidConditionDefinition(
            f"Invalid condition definitions: {exc.error_count()} error(s)",
            details={"errors": exc.errors(include_url=False)},
        ) from exc

    store = store if store is not None else InMemoryConditionStore()
    for definition in document.conditions:
        store.add(definition.build())
    unresolved = store.link(strict=strict)
    logger.debug(
        "Loaded %d conditions (%d unresolved references)",
        len(document.conditions),
        len(unresolved),
    )
    return store
