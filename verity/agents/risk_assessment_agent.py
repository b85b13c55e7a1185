import logging
from typing import List, Optional

from verity.core.config import Settings, settings as default_settings
from verity.schemas.analysis import (
    Deviation,
    Recommendation,
    RiskAssessment,
    Violation,
    ViolationCategory,
)

logger = logging.getLogger(__name__)

# (ceiling, level, label, summary), checked in order
RISK_CLASSES = (
    (30, "low", "Low Risk",
     "This contract appears generally safe to sign. Review highlighted items for your own due diligence."),
    (50, "moderate", "Moderate Risk",
     "Some concerning terms found. Review carefully and consider requesting modifications to flagged clauses."),
    (70, "high", "High Risk",
     "Multiple risky terms detected. We strongly recommend negotiating changes before signing."),
    (100, "critical", "Critical Risk",
     "This contract contains potentially void clauses and highly unfair terms. Do not sign as-is."),
)


class RiskAssessmentAgent:
    """Agent for reducing violations and deviations to one risk verdict."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the risk assessment agent."""
        self.settings = settings or default_settings

    def aggregate(self, violations: List[Violation], deviations: List[Deviation]) -> RiskAssessment:
        """Calculate the overall risk score, tier and critical issues.

        Args:
            violations: Detected violations
            deviations: Deviations from fair standards

        Returns:
            Risk assessment for the document
        """
        risk_score = self.calculate_overall_risk(violations, deviations)
        recommendation = self.recommend(risk_score, violations, deviations)
        critical_issues = self.critical_issues(violations)
        risk_class = self.classify_risk(risk_score)

        legal_violations = sum(1 for v in violations if v.category == ViolationCategory.LEGAL)
        unfair_terms = sum(1 for v in violations if v.category == ViolationCategory.UNFAIR)

        logger.info(f"Risk score {risk_score} ({recommendation.value}) from "
                    f"{len(violations)} violations and {len(deviations)} deviations")

        return RiskAssessment(
            risk_score=risk_score,
            recommendation=recommendation,
            critical_issues=critical_issues,
            legal_violations=legal_violations,
            unfair_terms=unfair_terms,
            risk_level=risk_class["level"],
            risk_label=risk_class["label"],
            risk_summary=risk_class["summary"],
        )

    def calculate_overall_risk(self, violations: List[Violation], deviations: List[Deviation]) -> int:
        """Weighted risk score in [0, 100].

        Legal violations are weighted higher than unfair terms and
        deviations. More findings scale the score up to a fixed factor. A
        single catastrophic violation keeps the score at or above the
        critical floor however many minor findings surround it.
        """
        s = self.settings
        if not violations and not deviations:
            return 0

        legal = [v.severity for v in violations if v.category == ViolationCategory.LEGAL]
        unfair = [v.severity for v in violations if v.category == ViolationCategory.UNFAIR]
        unfair.extend(d.severity for d in deviations)

        legal_score = sum(legal) / len(legal) if legal else 0.0
        unfair_score = sum(unfair) / len(unfair) if unfair else 0.0

        findings = len(violations) + len(deviations)
        count_factor = min(s.COUNT_FACTOR_CAP, 1 + findings * s.COUNT_FACTOR_STEP)

        base_score = legal_score * s.LEGAL_WEIGHT + unfair_score * s.UNFAIR_WEIGHT
        score = max(0, min(100, round(base_score * count_factor)))

        if any(v.severity >= s.CRITICAL_SEVERITY for v in violations):
            score = max(score, s.CRITICAL_SCORE_FLOOR)

        return score

    def recommend(
        self,
        risk_score: int,
        violations: List[Violation],
        deviations: List[Deviation],
    ) -> Recommendation:
        """Pick the sign / negotiate / reject tier."""
        s = self.settings
        severe_legal = any(
            v.category == ViolationCategory.LEGAL and v.severity >= s.REJECT_LEGAL_SEVERITY
            for v in violations
        )
        if risk_score >= s.REJECT_SCORE or severe_legal:
            return Recommendation.REJECT
        if risk_score >= s.NEGOTIATE_SCORE or deviations:
            return Recommendation.NEGOTIATE
        return Recommendation.SIGN

    def critical_issues(self, violations: List[Violation]) -> List[str]:
        """Labels of severe violations, deduplicated, most severe first."""
        issues: List[str] = []
        for violation in sorted(violations, key=lambda v: -v.severity):
            if violation.severity >= self.settings.CRITICAL_ISSUE_SEVERITY and violation.label not in issues:
                issues.append(violation.label)
        return issues

    @staticmethod
    def classify_risk(score: int) -> dict:
        """Map a risk score to a level, label and summary sentence."""
        for ceiling, level, label, summary in RISK_CLASSES:
            if score <= ceiling:
                return {"level": level, "label": label, "summary": summary}
        _, level, label, summary = RISK_CLASSES[-1]
        return {"level": level, "label": label, "summary": summary}
