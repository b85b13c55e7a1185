from verity.agents.risk_assessment_agent import RiskAssessmentAgent
from verity.core.config import Settings
from verity.schemas.analysis import (
    Deviation,
    DeviationLevel,
    Recommendation,
    Violation,
    ViolationCategory,
)

agent = RiskAssessmentAgent()


def violation(severity, category=ViolationCategory.LEGAL, label="Restraint of Trade", offset=0):
    return Violation(
        id=f"rule-{offset}",
        type=label.lower().replace(" ", "_"),
        label=label,
        category=category,
        clause_text="clause",
        offset=offset,
        severity=severity,
    )


def deviation(severity):
    return Deviation(
        type="payment_days",
        type_label="Payment Terms",
        found_value=50.0,
        fair_value=30.0,
        unit="days",
        severity=severity,
        level=DeviationLevel.WARNING,
    )


def test_no_findings_is_safe_to_sign():
    assessment = agent.aggregate([], [])

    assert assessment.risk_score == 0
    assert assessment.recommendation == Recommendation.SIGN
    assert assessment.critical_issues == []


def test_catastrophic_violation_sets_score_floor():
    assessment = agent.aggregate([violation(90)], [])

    assert assessment.risk_score == 85
    assert assessment.recommendation == Recommendation.REJECT
    assert assessment.legal_violations == 1


def test_floor_holds_among_minor_findings():
    violations = [violation(95)] + [violation(10, ViolationCategory.UNFAIR, "Minor", i + 1) for i in range(8)]

    assert agent.calculate_overall_risk(violations, [deviation(5)]) >= 85


def test_any_deviation_means_negotiate():
    assessment = agent.aggregate([], [deviation(20)])

    assert assessment.risk_score == 8
    assert assessment.recommendation == Recommendation.NEGOTIATE


def test_mild_unfair_term_can_be_signed():
    assessment = agent.aggregate([violation(30, ViolationCategory.UNFAIR, "Jurisdiction Issue")], [])

    assert assessment.risk_score == 13
    assert assessment.recommendation == Recommendation.SIGN
    assert assessment.unfair_terms == 1


def test_severe_legal_violation_rejects_regardless_of_score():
    assessment = agent.aggregate([violation(85, label="Unlimited Liability")], [])

    assert assessment.risk_score == 54
    assert assessment.recommendation == Recommendation.REJECT


def test_many_findings_scale_the_score():
    violations = [violation(80, offset=i) for i in range(10)]

    assert agent.calculate_overall_risk(violations, []) == 72
    assert agent.recommend(72, violations, []) == Recommendation.REJECT


def test_score_is_bounded():
    violations = [violation(100, offset=i) for i in range(20)]
    deviations = [deviation(100) for _ in range(20)]

    assert agent.calculate_overall_risk(violations, deviations) == 100


def test_critical_issues_deduplicated_in_severity_order():
    violations = [
        violation(75, ViolationCategory.UNFAIR, "Unfair Termination", 1),
        violation(95, label="Restraint of Trade", offset=2),
        violation(92, label="Restraint of Trade", offset=3),
        violation(60, ViolationCategory.UNFAIR, "Unfair Payment", 4),
    ]

    assert agent.critical_issues(violations) == ["Restraint of Trade", "Unfair Termination"]


def test_thresholds_come_from_settings():
    lenient = RiskAssessmentAgent(Settings(NEGOTIATE_SCORE=50))

    assert lenient.recommend(40, [], []) == Recommendation.SIGN
    assert agent.recommend(40, [], []) == Recommendation.NEGOTIATE


def test_risk_bands():
    assert agent.classify_risk(0)["level"] == "low"
    assert agent.classify_risk(30)["level"] == "low"
    assert agent.classify_risk(45)["level"] == "moderate"
    assert agent.classify_risk(65)["level"] == "high"
    assert agent.classify_risk(95)["label"] == "Critical Risk"


def test_assessment_carries_its_band():
    assessment = agent.aggregate([violation(90)], [])

    assert assessment.risk_level == "critical"
    assert assessment.risk_label == "Critical Risk"
    assert "Do not sign" in assessment.risk_summary
