# Rule registry: an explicit, constructed collection of rules keyed by unique id.
# The engine receives a registry value; nothing here is module-level state.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding
from cxxlint.rules.base import Matcher, Rule, RuleDescriptor

if TYPE_CHECKING:
    from cxxlint.config import RuleConfig

logger = logging.getLogger(__name__)


class DuplicateRuleError(ValueError):
    """Raised when a rule id is registered twice in the same registry."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule '{rule_id}' is already registered")
        self.rule_id = rule_id


@dataclass(frozen=True)
class RegisteredRule:
    """A descriptor paired with the matcher that implements it."""

    descriptor: RuleDescriptor
    matcher: Matcher

    @property
    def id(self) -> str:
        return self.descriptor.id

    def run(self, unit: SourceUnit) -> list[Finding]:
        return list(self.matcher(unit))


class RuleRegistry:
    """Ordered set of rules. Registration order is the order active_rules() returns."""

    def __init__(self) -> None:
        self._rules: dict[str, RegisteredRule] = {}

    def register(self, descriptor: RuleDescriptor, matcher: Matcher) -> RegisteredRule:
        """
        Add a rule under descriptor.id.

        Raises:
            DuplicateRuleError: if the id is already registered.
        """
        if descriptor.id in self._rules:
            raise DuplicateRuleError(descriptor.id)
        entry = RegisteredRule(descriptor=descriptor, matcher=matcher)
        self._rules[descriptor.id] = entry
        logger.debug("Registered rule %s (%s)", descriptor.id, descriptor.title)
        return entry

    def add(self, rule: Rule) -> RegisteredRule:
        """Register a Rule object under its own descriptor."""
        return self.register(rule.descriptor, rule.run)

    def get(self, rule_id: str) -> Optional[RegisteredRule]:
        return self._rules.get(rule_id)

    def descriptors(self) -> list[RuleDescriptor]:
        return [entry.descriptor for entry in self._rules.values()]

    def active_rules(self, config: Optional[RuleConfig] = None) -> list[RegisteredRule]:
        """
        Return the rules that should run under config, in registration order.

        With no config every rule is active. An always_on rule is kept when an
        enabled_rules list omits it, but an explicit disable removes it. Ids the
        config mentions but the registry does not know are logged and otherwise
        ignored.
        """
        if config is None:
            return list(self._rules.values())

        unknown = sorted(config.referenced_rule_ids() - self._rules.keys())
        if unknown:
            logger.warning("Configuration references unknown rule id(s): %s", ", ".join(unknown))

        return [
            entry
            for entry in self._rules.values()
            if entry.id not in config.disabled_rules
            and (entry.descriptor.always_on or config.is_enabled(entry.id))
        ]

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[RegisteredRule]:
        return iter(self._rules.values())
