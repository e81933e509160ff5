"""Wildcard attribute matching.

Implements the default :class:`~pack_conditions.core.interfaces.AttributeMatcher`
used for device and toolchain expressions.

Matching rules:
* Only attributes present in *both* the predicate and the target are
  compared ("common attributes").  A predicate attribute the target does
  not define does not constrain the match.
* Values are compared with shell-style wildcards (``*``, ``?``, ``[...]``).
  Either side may hold the pattern, so a target of ``STM32F4*`` matches a
  predicate of ``STM32F407VG`` and vice versa.
* Compiled patterns are cached at module level.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from fnmatch import translate
from functools import lru_cache

logger = logging.getLogger(__name__)

_WILDCARD_CHARS = frozenset("*?[")

# ---------------------------------------------------------------------------
# Compiled pattern cache (module-level)
# ---------------------------------------------------------------------------

@lru_cache(maxsize=1024)
def _compile_wildcard(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    """Compile and cache a wildcard *pattern*."""
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(translate(pattern), flags)


def has_wildcards(value: str) -> bool:
    """Return ``True`` if *value* contains wildcard characters."""
    return any(c in _WILDCARD_CHARS for c in value)


def wildcard_match(pattern: str, value: str, *, case_sensitive: bool = True) -> bool:
    """Return ``True`` if *value* matches the wildcard *pattern*."""
    if not has_wildcards(pattern):
        if case_sensitive:
            return pattern == value
        return pattern.casefold() == value.casefold()
    return _compile_wildcard(pattern, case_sensitive).match(value) is not None


# ---------------------------------------------------------------------------
# WildcardMatcher
# ---------------------------------------------------------------------------

class WildcardMatcher:
    """Matches expression predicates against target attributes.

    Parameters
    ----------
    case_sensitive:
        If ``True`` (the default), attribute values must match exactly
        apart from wildcards.
    """

    def __init__(self, case_sensitive: bool = True) -> None:
        self._case_sensitive = case_sensitive

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def match_value(self, expected: str, actual: str) -> bool:
        """Match two attribute values, either of which may be a pattern."""
        return wildcard_match(
            expected, actual, case_sensitive=self._case_sensitive
        ) or wildcard_match(
            actual, expected, case_sensitive=self._case_sensitive
        )

    def matches(
        self, predicate: Mapping[str, str], target: Mapping[str, str]
    ) -> bool:
        """Return ``True`` if every common attribute of *predicate* matches *target*."""
        for name, expected in predicate.items():
            if name not in target:
                continue
            if not self.match_value(expected, target[name]):
                logger.debug(
                    "Attribute %s mismatch: %r vs %r", name, expected, target[name]
                )
                return False
        return True

    @staticmethod
    def clear_cache() -> None:
        """Clear the compiled pattern cache."""
        _compile_wildcard.cache_clear()
