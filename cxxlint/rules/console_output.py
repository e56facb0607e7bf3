# Console stream usage detection: flags std::cout / std::cerr (and friends) used with <<

from __future__ import annotations

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.rules.base import Rule, RuleDescriptor

STREAM_OBJECTS = frozenset({"cout", "cerr", "clog", "wcout", "wcerr", "wclog"})


class ConsoleOutputRule(Rule):
    """
    Flags a standard output/error stream object that is the left operand of `<<`.

    Accepts `cout`, `std::cout` and `::std::cout`; a member named `cout`
    (`obj.cout`, `ptr->cout`) or a name qualified by another namespace is not
    the standard stream.
    """

    descriptor = RuleDescriptor(
        id="cout_cerr_usage",
        title="Console stream output",
        default_severity=Severity.STYLE,
        suggestion="Route diagnostics through the project's logging facility instead of writing to the console.",
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        view = unit.structure
        for i, tok in enumerate(view.tokens):
            if not tok.is_identifier(*STREAM_OBJECTS):
                continue
            nxt = view.token(i + 1)
            if nxt is None or not nxt.is_symbol("<<"):
                continue

            start = i
            prev = view.token(i - 1)
            if prev is not None and prev.is_symbol("::"):
                qualifier = view.token(i - 2)
                if qualifier is None or not qualifier.is_identifier("std"):
                    continue
                start = i - 2
                leading = view.token(i - 3)
                if leading is not None and leading.is_symbol("::"):
                    owner = view.token(i - 4)
                    if owner is None or not (owner.is_identifier() or owner.is_symbol(">")):
                        start = i - 3
            elif prev is not None and prev.is_symbol(".", "->"):
                continue

            findings.append(
                self.finding(
                    unit,
                    view.tokens[start],
                    f"Direct console output through std::{tok.lexeme}; use a logging facility.",
                )
            )
        return findings
