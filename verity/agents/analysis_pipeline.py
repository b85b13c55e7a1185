import time
import logging
from typing import Optional

from verity.agents.deviation_agent import DeviationAgent
from verity.agents.enrichment_agent import EnrichmentAgent
from verity.agents.redaction_agent import RedactionAgent
from verity.agents.risk_assessment_agent import RiskAssessmentAgent
from verity.agents.violation_detection_agent import ViolationDetectionAgent
from verity.core.config import Settings, settings as default_settings
from verity.rules.library import RuleLibrary, get_rule_library
from verity.schemas.analysis import AnalysisResult, DocumentInfo, RedactionSummary

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Runs redaction, detection, comparison and aggregation over one document."""

    def __init__(
        self,
        library: Optional[RuleLibrary] = None,
        settings: Optional[Settings] = None,
        enrichment_agent: Optional[EnrichmentAgent] = None,
    ):
        self.library = library or get_rule_library()
        self.settings = settings or default_settings
        self.redaction_agent = RedactionAgent()
        self.violation_detection_agent = ViolationDetectionAgent(self.library, self.settings)
        self.deviation_agent = DeviationAgent(self.library)
        self.risk_assessment_agent = RiskAssessmentAgent(self.settings)
        self.enrichment_agent = enrichment_agent

    def run(
        self,
        text: Optional[str],
        document_info: Optional[DocumentInfo] = None,
        template: Optional[str] = None,
        enrich: bool = False,
    ) -> AnalysisResult:
        """Analyze plain contract text.

        Args:
            text: Extracted contract text, before redaction
            document_info: Metadata from the upstream extractor
            template: Fair template to compare against
            enrich: Whether to request the model-generated analysis

        Returns:
            Analysis result, not yet stamped by the result cache
        """
        start_time = time.perf_counter()
        text = text if isinstance(text, str) else ""
        document_info = document_info or DocumentInfo(word_count=len(text.split()))
        logger.info(f"Analyzing {document_info.filename} ({document_info.word_count} words)")

        # Step 1: Strip personal data
        redaction = self.redaction_agent.redact(text)
        redacted_text = redaction.redacted_text

        # Step 2: Rule-based detection
        violations = self.violation_detection_agent.detect(redacted_text)

        # Step 3: Optional model analysis
        model_analysis = None
        if enrich and self.enrichment_agent is not None and redacted_text.strip():
            model_analysis = self.enrichment_agent.analyze(redacted_text)
            if model_analysis is not None:
                violations = self.enrichment_agent.merge_violations(violations, model_analysis, redacted_text)
            else:
                logger.warning("Model analysis unavailable, keeping rule-based result")

        # Step 4: Fair-standard comparison
        deviations = self.deviation_agent.compare_deviations(
            redacted_text,
            {v.type for v in violations},
            violations=violations,
            template=template,
        )

        # Step 5: Aggregate
        assessment = self.risk_assessment_agent.aggregate(violations, deviations)

        elapsed_ms = round((time.perf_counter() - start_time) * 1000)
        logger.info(f"Analysis finished in {elapsed_ms} ms")

        return AnalysisResult(
            violations=violations,
            deviations=deviations,
            risk_score=assessment.risk_score,
            recommendation=assessment.recommendation,
            critical_issues=assessment.critical_issues,
            legal_violations=assessment.legal_violations,
            unfair_terms=assessment.unfair_terms,
            risk_level=assessment.risk_level,
            risk_label=assessment.risk_label,
            risk_summary=assessment.risk_summary,
            analysis_time_ms=elapsed_ms,
            document_info=document_info,
            redaction=RedactionSummary(
                redacted_count=redaction.redacted_count,
                redacted_types=redaction.redacted_types,
            ),
            model_analysis=model_analysis,
            model_available=model_analysis is not None,
        )
