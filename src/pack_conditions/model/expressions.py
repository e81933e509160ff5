"""Condition expressions.

An :class:`Expression` is a leaf or reference node inside a condition.
It is tagged with a :class:`~pack_conditions.core.types.ExpressionDomain`
(what it talks about) and an
:class:`~pack_conditions.core.types.ExpressionRole` (how its result is
folded into the enclosing condition).

Expressions compare by identity: two structurally equal expressions are
distinct items and are cached independently during a pass.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pack_conditions.core.errors import InvalidConditionDefinition
from pack_conditions.core.types import (
    AttributeSet,
    EvaluationResult,
    ExpressionDomain,
    ExpressionRole,
)

if TYPE_CHECKING:
    from pack_conditions.engine.context import EvaluationContext
    from pack_conditions.model.conditions import Condition

# ---------------------------------------------------------------------------
# Domain inference from attribute names
# ---------------------------------------------------------------------------

REFERENCE_ATTRIBUTE = "condition"

_PREFIX_DOMAINS: dict[str, ExpressionDomain] = {
    "D": ExpressionDomain.DEVICE,
    "P": ExpressionDomain.DEVICE,
    "T": ExpressionDomain.TOOLCHAIN,
    "C": ExpressionDomain.COMPONENT,
}


def infer_domain(attributes: Mapping[str, Any]) -> ExpressionDomain:
    """Infer the expression domain from its attribute names.

    Pack descriptions encode the domain in the attribute prefix:
    ``Dname``/``Dcore``/``Pname`` are device attributes, ``Tcompiler``
    is a toolchain attribute and ``Cclass``/``Cgroup`` are component
    attributes.  A ``condition`` attribute makes a reference.

    Raises
    ------
    InvalidConditionDefinition
        If *attributes* is empty, mixes domains, or contains a name with
        no known prefix.
    """
    if REFERENCE_ATTRIBUTE in attributes:
        if len(attributes) != 1:
            raise InvalidConditionDefinition(
                "A condition reference cannot carry other attributes",
                details={"attributes": sorted(attributes)},
            )
        return ExpressionDomain.REFERENCE
    if not attributes:
        raise InvalidConditionDefinition("Expression has no attributes")

    domains: set[ExpressionDomain] = set()
    for name in attributes:
        domain = _PREFIX_DOMAINS.get(name[:1])
        if domain is None:
            raise InvalidConditionDefinition(
                f"Attribute '{name}' does not belong to a known domain",
                details={"attribute": name},
            )
        domains.add(domain)
    if len(domains) > 1:
        raise InvalidConditionDefinition(
            "Expression mixes attributes from several domains",
            details={"domains": sorted(domains)},
        )
    return domains.pop()


# ---------------------------------------------------------------------------
# Expression
# ---------------------------------------------------------------------------

@dataclass(eq=False, slots=True)
class Expression:
    """A single accept/require/deny node of a condition.

    Attributes
    ----------
    role:
        Accept, require or deny.
    domain:
        Component, device, toolchain or reference.  Kept as a plain
        string-compatible value so that definitions from newer pack
        formats survive loading; unknown domains evaluate to ``ERROR``.
    attributes:
        The predicate matched against the target attributes (device and
        toolchain expressions only).
    condition_id:
        Id of the referenced condition (reference expressions only).
    condition:
        The referenced condition object, bound by
        :meth:`InMemoryConditionStore.link` or passed directly.
    """

    role: ExpressionRole
    domain: ExpressionDomain | str
    attributes: AttributeSet = field(default_factory=AttributeSet)
    condition_id: str | None = None
    condition: Condition | None = None

    @classmethod
    def from_attributes(
        cls,
        role: ExpressionRole | str,
        attributes: Mapping[str, Any],
    ) -> Expression:
        """Build an expression whose domain is inferred from *attributes*."""
        domain = infer_domain(attributes)
        if domain == ExpressionDomain.REFERENCE:
            return cls.reference(role, str(attributes[REFERENCE_ATTRIBUTE]))
        return cls(
            role=ExpressionRole(role),
            domain=domain,
            attributes=AttributeSet(attributes),
        )

    @classmethod
    def reference(
        cls,
        role: ExpressionRole | str,
        target: Condition | str,
    ) -> Expression:
        """Build a reference expression to *target* (a condition or its id)."""
        if isinstance(target, str):
            return cls(
                role=ExpressionRole(role),
                domain=ExpressionDomain.REFERENCE,
                condition_id=target,
            )
        return cls(
            role=ExpressionRole(role),
            domain=ExpressionDomain.REFERENCE,
            condition_id=target.id,
            condition=target,
        )

    @property
    def is_accept(self) -> bool:
        return self.role == ExpressionRole.ACCEPT

    @property
    def is_deny(self) -> bool:
        return self.role == ExpressionRole.DENY

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        return context.evaluate_expression(self)

    def __repr__(self) -> str:
        if self.domain == ExpressionDomain.REFERENCE:
            return f"Expression({self.role}, condition={self.condition_id!r})"
        return f"Expression({self.role}, {self.domain}, {self.attributes.to_dict()!r})"
