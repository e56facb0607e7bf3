# Exception throw detection: flags every `throw` expression

from __future__ import annotations

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.rules.base import Rule, RuleDescriptor


class ThrowStatementRule(Rule):
    """Flags `throw`, whatever is thrown; a dynamic exception specification `f() throw()` is skipped."""

    descriptor = RuleDescriptor(
        id="throw_statement",
        title="Throw statement",
        default_severity=Severity.WARNING,
        suggestion="Make sure exceptions are allowed here, or report the failure through a return value.",
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        view = unit.structure
        for i, tok in enumerate(view.tokens):
            if not tok.is_keyword("throw") or view.in_preprocessor(i):
                continue
            prev = view.token(i - 1)
            nxt = view.token(i + 1)
            if (
                nxt is not None
                and nxt.is_symbol("(")
                and prev is not None
                and (
                    (prev.is_symbol(")") and not view.closes_control_condition(i - 1))
                    or prev.is_keyword("const", "volatile")
                )
            ):
                continue
            findings.append(self.finding(unit, tok, "Exception thrown with 'throw'."))
        return findings
