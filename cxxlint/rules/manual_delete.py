# Manual deallocation detection: flags `delete` / `delete[]` outside destructor bodies

from __future__ import annotations

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.rules.base import Rule, RuleDescriptor
from cxxlint.structure import SCOPE_DESTRUCTOR


class ManualDeleteRule(Rule):
    """
    Flags each `delete` expression that is not inside a destructor body.

    `= delete` (deleted functions) and `operator delete` declarations are not
    deallocations and are skipped.
    """

    descriptor = RuleDescriptor(
        id="manual_delete",
        title="Manual delete",
        default_severity=Severity.WARNING,
        suggestion=(
            "Let an owning type (std::unique_ptr, std::vector) release the memory, "
            "or confine the delete to the owning class's destructor."
        ),
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        view = unit.structure
        for i, tok in enumerate(view.tokens):
            if not tok.is_keyword("delete") or view.in_preprocessor(i):
                continue
            prev = view.token(i - 1)
            if prev is not None and (prev.is_symbol("=") or prev.is_keyword("operator")):
                continue
            if view.in_scope(i, SCOPE_DESTRUCTOR):
                continue
            nxt = view.token(i + 1)
            form = "delete[]" if nxt is not None and nxt.is_symbol("[") else "delete"
            findings.append(
                self.finding(
                    unit,
                    tok,
                    f"Manual '{form}' outside a destructor; prefer RAII ownership.",
                )
            )
        return findings
