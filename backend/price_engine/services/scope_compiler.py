"""
Scope flag compiler.

Pure function: compile_derived_flags(rules, intents) -> frozenset of flags.

Pass 1 fires every rule whose ``if_any_intents`` names a true intent.
Pass 2 re-scans all rules until none adds a flag: a rule fires when
``if_any_flags`` intersects the current set or ``if_all_flags`` is fully
contained in it. The set only grows and is bounded by the flags the rules
can set, so the loop terminates.
"""

from collections.abc import Iterable, Mapping

import structlog

from price_engine.constants import SCOPE_RULES
from price_engine.models.catalog import ScopeRule

logger = structlog.get_logger(__name__)


def _fires_on_flags(rule: ScopeRule, flags: set[str]) -> bool:
    if rule.if_any_flags and any(flag in flags for flag in rule.if_any_flags):
        return True
    if rule.if_all_flags is not None and all(flag in flags for flag in rule.if_all_flags):
        return True
    return False


def compile_derived_flags(
    rules: Iterable[ScopeRule] | None,
    intents: Mapping[str, bool],
) -> frozenset[str]:
    """
    Expand user intents into the closed set of derived scope flags.

    Args:
        rules: Scope rules; None uses the built-in catalog rules.
        intents: Intent id -> active.

    Returns:
        The smallest flag set that no rule can extend further.
    """
    rule_list = list(SCOPE_RULES if rules is None else rules)
    flags: set[str] = set()

    for rule in rule_list:
        if rule.if_any_intents and any(intents.get(i, False) for i in rule.if_any_intents):
            flags.update(rule.set_flags)

    vocabulary = {flag for rule in rule_list for flag in rule.set_flags}
    passes = 0
    changed = True
    # Each productive pass adds at least one flag from the vocabulary
    while changed and passes <= len(vocabulary):
        changed = False
        passes += 1
        for rule in rule_list:
            if not _fires_on_flags(rule, flags):
                continue
            before = len(flags)
            flags.update(rule.set_flags)
            if len(flags) != before:
                changed = True

    logger.debug("scope_flags_compiled", flag_count=len(flags), passes=passes)
    return frozenset(flags)


def is_fixpoint(rules: Iterable[ScopeRule], flags: Iterable[str]) -> bool:
    """True when no flag-triggered rule can add anything to ``flags``."""
    current = set(flags)
    for rule in rules:
        if _fires_on_flags(rule, current) and not set(rule.set_flags) <= current:
            return False
    return True
