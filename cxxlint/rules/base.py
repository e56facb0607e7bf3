# Rule interface: the descriptor every rule registers under and the abstract base
# class the built-in rules implement. A rule is a pure function over one SourceUnit.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Location, Severity
from cxxlint.lexer import Token

# Anything that maps a unit to findings can be registered, not only Rule subclasses.
Matcher = Callable[[SourceUnit], Iterable[Finding]]


class RuleDescriptor(BaseModel):
    """
    Static description of a rule, registered once and never changed.

    weight multiplies the rule's score deduction. An always_on rule runs even
    when an enabled_rules list leaves it out; only disabled_rules turns it off.
    """

    id: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    title: str
    default_severity: Severity = Severity.WARNING
    suggestion: Optional[str] = None
    weight: float = Field(default=1.0, gt=0)
    always_on: bool = False

    model_config = {"frozen": True}


class Rule(ABC):
    """
    Abstract base class for the built-in detectors.

    Subclasses must define:
    - descriptor: RuleDescriptor with id, title, default severity, remediation hint
    - run(unit) -> list[Finding], analyzing one unit

    run() must not raise for odd token shapes; when in doubt it skips the
    occurrence. The engine calls run() once per unit, possibly from a worker thread.
    """

    descriptor: RuleDescriptor

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def name(self) -> str:
        return self.descriptor.title

    @abstractmethod
    def run(self, unit: SourceUnit) -> list[Finding]:
        """
        Analyze one unit and return any findings.

        Args:
            unit: Text, tokens and structure of one source input.

        Returns:
            One Finding per detected occurrence, each located at a real token.
            An empty list if nothing was found.
        """
        ...

    def __call__(self, unit: SourceUnit) -> list[Finding]:
        return self.run(unit)

    def finding(self, unit: SourceUnit, token: Token, message: str) -> Finding:
        """Build a Finding for this rule located at token."""
        snippet = unit.line_text(token.line).strip() or None
        return Finding(
            rule_id=self.id,
            message=message,
            location=Location(line=token.line, column=token.column, path=unit.path, snippet=snippet),
            severity=self.descriptor.default_severity,
        )
