import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from verity.agents.drafting_agent import DraftingAgent, format_issues
from verity.agents.outcome_agent import OutcomePredictionAgent
from verity.core.llm import parse_json_object
from verity.schemas.drafting import (
    ClauseIssue,
    EmailRequest,
    EmailTone,
    Outcome,
    OutcomeRequest,
    PredictionSource,
)

NON_COMPETE = ClauseIssue(
    type="section27",
    clause_text="The Consultant shall not work for any competitor for two years.",
    severity=95,
    section="Section 27, Indian Contract Act, 1872",
    explanation="Post-termination restraints are void.",
)

EMAIL = json.dumps({
    "subject": "Contract review: proposed changes",
    "body": "Dear Client,\n\nI noticed the non-compete in Section 4.\n\nRegards,\n[YOUR NAME]",
})


def drafting(*responses):
    return DraftingAgent(llm=FakeListChatModel(responses=list(responses)))


def test_email_is_drafted_with_sender_name():
    email = drafting(EMAIL).draft_email(EmailRequest(violations=[NON_COMPETE], sender_name="Asha Rao"))

    assert email.subject == "Contract review: proposed changes"
    assert email.body.endswith("Asha Rao")
    assert "[YOUR NAME]" not in email.body
    assert email.tone == EmailTone.POLITE


def test_placeholder_is_kept_without_sender_name():
    email = drafting(f"Here you go:\n{EMAIL}").draft_email(
        EmailRequest(violations=[NON_COMPETE], tone=EmailTone.FIRM)
    )

    assert "[YOUR NAME]" in email.body
    assert email.tone == EmailTone.FIRM


def test_tone_selects_the_system_prompt():
    agent = drafting(EMAIL)
    values = {"sender_name": "A", "recipient": "B", "tone": "FIRM", "issues": "1. x"}

    firm = agent.email_prompts[EmailTone.FIRM].format_messages(**values)[0].content
    polite = agent.email_prompts[EmailTone.POLITE].format_messages(**values)[0].content

    assert "firm, assertive" in firm
    assert "diplomatic" in polite
    assert '"subject"' in firm


def test_email_without_body_is_rejected():
    with pytest.raises(ValueError):
        drafting(json.dumps({"subject": "Hi"})).draft_email(EmailRequest(violations=[NON_COMPETE]))


def test_email_that_is_not_json_is_rejected():
    with pytest.raises(ValueError):
        drafting("I cannot help with that.").draft_email(EmailRequest(violations=[NON_COMPETE]))


def test_issues_are_numbered_and_truncated():
    long_clause = NON_COMPETE.model_copy(update={"clause_text": "x" * 300})
    listed = format_issues([NON_COMPETE, long_clause])

    assert listed.startswith("1. section27 (Severity: 95/100)")
    assert "\n\n2. section27" in listed
    assert "x" * 200 + "..." in listed
    assert "x" * 201 not in listed


def test_contract_fix_returns_model_text():
    fixed = drafting("  [REMOVED: non-compete]\n[ADDED: Non-Solicitation]  ").fix_contract(
        "The Consultant shall not compete.", [NON_COMPETE]
    )

    assert fixed == "[REMOVED: non-compete]\n[ADDED: Non-Solicitation]"


def test_empty_contract_fix_is_rejected():
    with pytest.raises(ValueError):
        drafting("   ").fix_contract("The Consultant shall not compete.", [])


def test_reference_prediction_without_model():
    response = OutcomePredictionAgent(None).predict(
        OutcomeRequest(clause_text=NON_COMPETE.clause_text, violation_type="section27")
    )

    assert response.source == PredictionSource.REFERENCE
    assert response.prediction.outcome == Outcome.VOID
    assert response.prediction.confidence_score == 94
    assert response.prediction.key_precedent.year == 2006


def test_reference_prediction_for_other_clauses():
    prediction = OutcomePredictionAgent.reference_prediction("paymentTerms")

    assert prediction.outcome == Outcome.RISKY
    assert prediction.court_path == ["District Court", "High Court"]
    assert prediction.legal_costs.currency == "INR"


def test_model_prediction_is_used_when_valid():
    answer = {
        "outcome": "VALID",
        "confidence_score": 81,
        "court_path": ["Civil Court"],
        "timeline": "6-9 months",
        "legal_costs": {"min": 50000, "max": 120000, "currency": "INR"},
        "settlement_estimation": "20-30% of claim value",
        "key_precedent": {"case_name": "Niranjan Shankar Golikari v. Century Spinning", "year": 1967,
                          "ruling_summary": "Restraints during employment are valid."},
        "risk_profile": {"repeat_offender": False, "judge_view": "Enforceable while engaged."},
    }
    agent = OutcomePredictionAgent(FakeListChatModel(responses=[json.dumps(answer)]))

    response = agent.predict(OutcomeRequest(clause_text="No moonlighting during the term.", violation_type="section27"))

    assert response.source == PredictionSource.MODEL
    assert response.prediction.outcome == Outcome.VALID
    assert response.prediction.confidence_score == 81


def test_unusable_model_prediction_falls_back():
    agent = OutcomePredictionAgent(FakeListChatModel(responses=['{"outcome": "MAYBE"}']))

    response = agent.predict(OutcomeRequest(clause_text="Pay within 90 days.", violation_type="paymentTerms"))

    assert response.source == PredictionSource.REFERENCE
    assert response.prediction.outcome == Outcome.RISKY


def test_parse_json_object():
    assert parse_json_object('{"a": 1}') == {"a": 1}
    assert parse_json_object('Sure!\n```json\n{"a": {"b": 2}}\n```') == {"a": {"b": 2}}
    with pytest.raises(ValueError):
        parse_json_object("[1, 2]")
    with pytest.raises(ValueError):
        parse_json_object("no json here")
    with pytest.raises(ValueError):
        parse_json_object(None)
