# TODO/FIXME annotation: reports comments that carry an unresolved work marker.
# Informational and on unless explicitly disabled; it looks only at comment tokens.

from __future__ import annotations

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.rules.base import Rule, RuleDescriptor

MARKERS = ("TODO", "FIXME")
_MAX_EXCERPT = 80


def _excerpt(comment: str, offset: int) -> str:
    """Comment text from offset to the end of that line, without closing delimiter."""
    text = comment[offset:].split("\n", 1)[0].rstrip()
    if text.endswith("*/"):
        text = text[:-2].rstrip()
    if len(text) > _MAX_EXCERPT:
        text = text[: _MAX_EXCERPT - 3] + "..."
    return text


class TodoCommentsRule(Rule):
    """One info finding per comment containing TODO or FIXME, located at the comment."""

    descriptor = RuleDescriptor(
        id="todo_fixme",
        title="TODO/FIXME marker",
        default_severity=Severity.INFO,
        suggestion="Resolve the note or move it to the issue tracker.",
        always_on=True,
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        for comment in unit.comments:
            hits = [(comment.lexeme.find(m), m) for m in MARKERS if m in comment.lexeme]
            if not hits:
                continue
            offset, marker = min(hits)
            findings.append(
                self.finding(
                    unit,
                    comment,
                    f"{marker} comment: {_excerpt(comment.lexeme, offset)}",
                )
            )
        return findings
