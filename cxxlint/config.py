from __future__ import annotations

"""
Analyzer configuration: which rules run and at what severity, plus the default
rule registry.

RuleConfig only describes choices; it never holds rule objects. The registry is
built by build_default_registry() and handed to the engine explicitly, so tests
can run the engine with any subset of rules.
"""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from cxxlint.findings.models import Severity
from cxxlint.rules.c_style_cast import CStyleCastRule
from cxxlint.rules.console_output import ConsoleOutputRule
from cxxlint.rules.magic_numbers import MagicNumbersRule
from cxxlint.rules.manual_delete import ManualDeleteRule
from cxxlint.rules.registry import RuleRegistry
from cxxlint.rules.smart_pointers import PreferSmartPointersRule
from cxxlint.rules.throw_statement import ThrowStatementRule
from cxxlint.rules.todo_comments import TodoCommentsRule

logger = logging.getLogger(__name__)


class RuleConfig(BaseModel):
    """
    Per-run rule selection.

    enabled_rules=None means every registered rule; disabled_rules is applied
    after it. severity_overrides replaces a rule's default severity.
    """

    enabled_rules: Optional[frozenset[str]] = None
    disabled_rules: frozenset[str] = frozenset()
    severity_overrides: dict[str, Severity] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def is_enabled(self, rule_id: str) -> bool:
        if rule_id in self.disabled_rules:
            return False
        return self.enabled_rules is None or rule_id in self.enabled_rules

    def severity_for(self, rule_id: str, default: Severity) -> Severity:
        return self.severity_overrides.get(rule_id, default)

    def referenced_rule_ids(self) -> set[str]:
        """Every rule id this configuration mentions."""
        ids = set(self.disabled_rules) | set(self.severity_overrides)
        if self.enabled_rules is not None:
            ids |= self.enabled_rules
        return ids

    def fingerprint(self) -> tuple:
        """Hashable, order-independent identity of this configuration."""
        return (
            None if self.enabled_rules is None else tuple(sorted(self.enabled_rules)),
            tuple(sorted(self.disabled_rules)),
            tuple(sorted((k, v.value) for k, v in self.severity_overrides.items())),
        )


def parse_severity_overrides(items: Iterable[str]) -> dict[str, Severity]:
    """
    Parse `rule_id=level` strings (as given on the command line).

    Raises:
        ValueError: for a malformed item or an unknown severity level.
    """
    overrides: dict[str, Severity] = {}
    for item in items:
        rule_id, sep, level = item.partition("=")
        rule_id, level = rule_id.strip(), level.strip().lower()
        if not sep or not rule_id or not level:
            raise ValueError(f"Expected RULE=LEVEL, got: {item!r}")
        try:
            overrides[rule_id] = Severity(level)
        except ValueError:
            choices = ", ".join(s.value for s in Severity)
            raise ValueError(f"Unknown severity {level!r} for {rule_id} (choose from {choices})") from None
    return overrides


def build_default_registry() -> RuleRegistry:
    """
    Return a new registry holding every built-in rule.

    Each call builds a fresh registry; there is no shared global one.
    """
    registry = RuleRegistry()
    for rule in (
        PreferSmartPointersRule(),
        ManualDeleteRule(),
        MagicNumbersRule(),
        ConsoleOutputRule(),
        CStyleCastRule(),
        ThrowStatementRule(),
        TodoCommentsRule(),
    ):
        registry.add(rule)
    logger.debug("Built default registry with %d rule(s)", len(registry))
    return registry


def get_default_config() -> RuleConfig:
    """Configuration with every rule enabled at its default severity."""
    return RuleConfig()
