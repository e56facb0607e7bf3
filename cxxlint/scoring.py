# Code quality score: turn a unit's diagnostics into a 0-10 score, rating and summary.

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel

from cxxlint.findings.models import Diagnostic, Severity

MAX_SCORE = 10.0

# Points deducted per diagnostic, before the rule weight is applied.
BASE_SCORE_IMPACT: dict[Severity, float] = {
    Severity.ERROR: 3.0,
    Severity.WARNING: 1.5,
    Severity.INFO: 0.4,
    Severity.STYLE: 0.2,
}

LARGE_UNIT_LINES = 200
SMALL_UNIT_LINES = 50
MAX_LENIENCY = 0.3
SMALL_UNIT_FACTOR = 0.9

RATINGS: tuple[tuple[float, str], ...] = (
    (9.0, "Excellent"),
    (7.5, "Good"),
    (6.0, "Fair"),
    (4.0, "Poor"),
)


class ScoreBreakdown(BaseModel):
    errors: int = 0
    warnings: int = 0
    info_issues: int = 0
    style_issues: int = 0
    error_deduction: float = 0.0
    warning_deduction: float = 0.0
    info_deduction: float = 0.0
    style_deduction: float = 0.0
    size_bonus: float = 0.0

    @property
    def total_deduction(self) -> float:
        return self.error_deduction + self.warning_deduction + self.info_deduction + self.style_deduction


class CodeScore(BaseModel):
    overall_score: float
    max_score: float = MAX_SCORE
    total_issues: int
    breakdown: ScoreBreakdown
    rating: str
    summary: str


def score_impact(severity: Severity, weight: float = 1.0) -> float:
    """Points one diagnostic of this severity deducts (always >= 0)."""
    return BASE_SCORE_IMPACT[severity] * weight


def compute_score(
    diagnostics: Sequence[Diagnostic],
    line_count: int,
    weights: Optional[Mapping[str, float]] = None,
) -> CodeScore:
    """
    Score one unit.

    Larger units get some leniency on info/style issues, very small units
    get slightly stricter treatment.

    Args:
        diagnostics: The unit's diagnostics (severity overrides already applied).
        line_count: Number of lines in the unit's source text.
        weights: Optional per-rule weight multipliers (default 1.0).
    """
    weights = weights or {}
    breakdown = ScoreBreakdown()
    for diag in diagnostics:
        impact = score_impact(diag.severity, weights.get(diag.rule_id, 1.0))
        if diag.severity is Severity.ERROR:
            breakdown.errors += 1
            breakdown.error_deduction += impact
        elif diag.severity is Severity.WARNING:
            breakdown.warnings += 1
            breakdown.warning_deduction += impact
        elif diag.severity is Severity.INFO:
            breakdown.info_issues += 1
            breakdown.info_deduction += impact
        else:
            breakdown.style_issues += 1
            breakdown.style_deduction += impact

    if line_count > LARGE_UNIT_LINES:
        leniency = min((line_count - LARGE_UNIT_LINES) / 1000.0, MAX_LENIENCY)
        breakdown.size_bonus = leniency * (breakdown.info_deduction + breakdown.style_deduction)
        size_factor = 1.0 + leniency
    elif line_count < SMALL_UNIT_LINES:
        size_factor = SMALL_UNIT_FACTOR
    else:
        size_factor = 1.0

    overall = max(MAX_SCORE - breakdown.total_deduction / size_factor, 0.0)
    rounded = math.floor(overall * 10.0 + 0.5) / 10.0
    rating, summary = rate(rounded, breakdown)
    return CodeScore(
        overall_score=rounded,
        total_issues=len(diagnostics),
        breakdown=breakdown,
        rating=rating,
        summary=summary,
    )


def rate(score: float, breakdown: ScoreBreakdown) -> tuple[str, str]:
    """Rating label and one-line summary for a score."""
    rating = next((label for threshold, label in RATINGS if score >= threshold), "Critical")

    if breakdown.errors > 0:
        summary = f"Code has {breakdown.errors} critical errors that need immediate attention"
    elif breakdown.warnings > 5:
        summary = "Multiple warnings detected - consider addressing them"
    elif breakdown.info_issues > 10:
        summary = "Many minor issues found - good opportunity for cleanup"
    elif score >= 9.0:
        summary = "Excellent code quality with minimal issues"
    elif score >= 7.5:
        summary = "Good code quality with room for minor improvements"
    else:
        summary = "Code needs improvement in several areas"
    return rating, summary
