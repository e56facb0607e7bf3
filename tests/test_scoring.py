"""Tests for cxxlint.scoring: deductions, size factor, ratings and summaries."""

import pytest

from cxxlint.findings.models import Diagnostic, Location, Severity
from cxxlint.scoring import MAX_SCORE, compute_score, rate, score_impact, ScoreBreakdown


def _diag(severity: Severity, rule_id: str = "some_rule") -> Diagnostic:
    return Diagnostic(
        rule_id=rule_id,
        message="m",
        location=Location(line=1, column=1),
        severity=severity,
    )


def test_no_diagnostics_scores_full_marks():
    """No diagnostics score 10 and rate Excellent."""
    score = compute_score([], line_count=100)
    assert score.overall_score == MAX_SCORE
    assert score.total_issues == 0
    assert score.rating == "Excellent"
    assert score.summary == "Excellent code quality with minimal issues"


def test_score_impacts():
    """Each severity has its fixed deduction."""
    assert score_impact(Severity.ERROR) == 3.0
    assert score_impact(Severity.WARNING) == 1.5
    assert score_impact(Severity.INFO) == 0.4
    assert score_impact(Severity.STYLE) == 0.2
    assert score_impact(Severity.WARNING, weight=2.0) == 3.0


def test_breakdown_counts_and_deductions():
    """The breakdown counts and sums deductions per severity."""
    diagnostics = [
        _diag(Severity.ERROR),
        _diag(Severity.WARNING),
        _diag(Severity.WARNING),
        _diag(Severity.INFO),
        _diag(Severity.STYLE),
    ]
    score = compute_score(diagnostics, line_count=100)
    b = score.breakdown
    assert (b.errors, b.warnings, b.info_issues, b.style_issues) == (1, 2, 1, 1)
    assert b.error_deduction == pytest.approx(3.0)
    assert b.warning_deduction == pytest.approx(3.0)
    assert b.total_deduction == pytest.approx(6.6)
    assert score.overall_score == pytest.approx(3.4)
    assert score.rating == "Critical"
    assert score.summary == "Code has 1 critical errors that need immediate attention"


def test_rule_weights_scale_deduction():
    """A rule weight multiplies its deduction."""
    diagnostics = [_diag(Severity.WARNING, "heavy_rule")]
    score = compute_score(diagnostics, line_count=100, weights={"heavy_rule": 2.0})
    assert score.overall_score == pytest.approx(7.0)


def test_small_unit_is_stricter():
    """Units under 50 lines are scored more strictly."""
    diagnostics = [_diag(Severity.WARNING)]
    small = compute_score(diagnostics, line_count=10)
    medium = compute_score(diagnostics, line_count=100)
    assert medium.overall_score == pytest.approx(8.5)
    # 10 - 1.5 / 0.9 = 8.333...
    assert small.overall_score == pytest.approx(8.3)


def test_large_unit_gets_leniency():
    """Units over 200 lines get some leniency."""
    diagnostics = [_diag(Severity.STYLE)] * 10
    score = compute_score(diagnostics, line_count=400)
    # leniency 0.2: 10 - 2.0 / 1.2
    assert score.overall_score == pytest.approx(8.3)
    assert score.breakdown.size_bonus == pytest.approx(0.4)


def test_leniency_is_capped():
    """Leniency stops growing past the cap."""
    diagnostics = [_diag(Severity.INFO)] * 5
    score = compute_score(diagnostics, line_count=5000)
    # capped at 0.3: 10 - 2.0 / 1.3 = 8.46
    assert score.overall_score == pytest.approx(8.5)


def test_score_never_negative():
    """Heavy deductions bottom out at zero."""
    score = compute_score([_diag(Severity.ERROR)] * 10, line_count=100)
    assert score.overall_score == 0.0
    assert score.rating == "Critical"


@pytest.mark.parametrize(
    "value, rating",
    [(10.0, "Excellent"), (9.0, "Excellent"), (8.9, "Good"), (7.5, "Good"), (6.0, "Fair"), (4.0, "Poor"), (3.9, "Critical")],
)
def test_rating_bands(value, rating):
    """Scores map onto the rating bands."""
    assert rate(value, ScoreBreakdown())[0] == rating


def test_summary_priorities():
    """Errors, then warnings, then info counts pick the summary."""
    assert rate(9.5, ScoreBreakdown(warnings=6))[1] == "Multiple warnings detected - consider addressing them"
    assert rate(9.5, ScoreBreakdown(info_issues=11))[1] == "Many minor issues found - good opportunity for cleanup"
    assert rate(8.0, ScoreBreakdown())[1] == "Good code quality with room for minor improvements"
    assert rate(5.0, ScoreBreakdown())[1] == "Code needs improvement in several areas"
