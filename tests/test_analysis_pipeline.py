import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from verity.agents.analysis_pipeline import AnalysisPipeline
from verity.agents.enrichment_agent import EnrichmentAgent
from verity.schemas.analysis import DocumentInfo, Recommendation, ViolationSource

CONTRACT = (
    "Contact the Consultant at dev@example.com. "
    "The Consultant shall not compete with the Company. "
    "Payment shall be made within 90 days of invoice. "
    "All work product belongs to the Company forever."
)

MODEL_OUTPUT = {
    "violations": [
        {
            "type": "section27",
            "clause_text": "The Consultant shall not compete with the Company",
            "severity": 95,
            "section": "Section 27, Indian Contract Act, 1872",
            "case_law": None,
            "explanation": "Non-competes are void in India.",
            "fair_alternative": "Remove it.",
        },
        {
            "type": "ipOverreach",
            "clause_text": "All work product belongs to the Company forever",
            "severity": 78,
            "section": "Section 18, Copyright Act, 1957",
            "case_law": None,
            "explanation": "Ownership should pass only on payment.",
            "fair_alternative": "IP transfers upon full payment.",
        },
    ],
    "overall_score": 88,
    "recommendation": "reject",
    "summary": "Do not sign as written.",
    "critical_issues": ["Restraint of Trade"],
}


def enrichment(*responses):
    return EnrichmentAgent(llm=FakeListChatModel(responses=list(responses)))


def test_rule_based_analysis():
    result = AnalysisPipeline().run(CONTRACT, DocumentInfo(pages=1, word_count=30, filename="nda.pdf"))

    assert [v.type for v in result.violations] == ["section27", "paymentTerms"]
    assert result.recommendation == Recommendation.REJECT
    assert result.risk_score >= 85
    assert result.critical_issues == ["Restraint of Trade"]
    assert result.risk_level == "critical"
    assert result.redaction.redacted_count == 1
    assert result.redaction.redacted_types == ["email"]
    assert result.document_info.filename == "nda.pdf"
    assert result.model_analysis is None
    assert not result.model_available
    assert result.timestamp is None


def test_personal_data_never_reaches_findings():
    result = AnalysisPipeline().run("Email a@b.com if the Client may terminate immediately.")

    assert result.violations
    assert all("a@b.com" not in (v.context or "") for v in result.violations)


def test_empty_document():
    result = AnalysisPipeline().run("")

    assert result.violations == []
    assert result.deviations == []
    assert result.risk_score == 0
    assert result.recommendation == Recommendation.SIGN


def test_enrichment_merges_new_model_findings():
    pipeline = AnalysisPipeline(enrichment_agent=enrichment(json.dumps(MODEL_OUTPUT)))

    result = pipeline.run(CONTRACT, enrich=True)

    assert result.model_available
    assert result.model_analysis.summary == "Do not sign as written."
    model_findings = [v for v in result.violations if v.source == ViolationSource.MODEL]
    assert [v.type for v in model_findings] == ["ipOverreach"]
    assert model_findings[0].label == "IP Overreach"
    assert [v.severity for v in result.violations] == sorted((v.severity for v in result.violations), reverse=True)


def test_enrichment_is_skipped_unless_requested():
    pipeline = AnalysisPipeline(enrichment_agent=enrichment(json.dumps(MODEL_OUTPUT)))

    result = pipeline.run(CONTRACT)

    assert not result.model_available
    assert all(v.source == ViolationSource.RULE for v in result.violations)


def test_unparseable_model_output_keeps_rule_result():
    pipeline = AnalysisPipeline(enrichment_agent=enrichment("I cannot help with that."))

    result = pipeline.run(CONTRACT, enrich=True)

    assert not result.model_available
    assert [v.type for v in result.violations] == ["section27", "paymentTerms"]


def test_parse_tolerates_surrounding_text():
    analysis = EnrichmentAgent.parse("Here is the analysis:\n" + json.dumps(MODEL_OUTPUT) + "\nThanks")

    assert analysis.overall_score == 88
    assert len(analysis.violations) == 2


def test_parse_rejects_missing_violations():
    with pytest.raises(ValueError):
        EnrichmentAgent.parse(json.dumps({"overall_score": 10}))
