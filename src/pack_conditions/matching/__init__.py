"""Attribute matching for device and toolchain expressions.

* **WildcardMatcher** -- compares the attributes common to a predicate and
  the target, with ``*``/``?``/``[...]`` wildcards on either side.
* **wildcard_match** -- single-value wildcard comparison.
"""
from __future__ import annotations

from pack_conditions.matching.wildcards import (
    WildcardMatcher,
    has_wildcards,
    wildcard_match,
)

__all__ = [
    "WildcardMatcher",
    "has_wildcards",
    "wildcard_match",
]
