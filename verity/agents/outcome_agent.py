import logging
from typing import Optional
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from verity.core.config import settings
from verity.core.llm import GroqChatModel, llm_available, parse_json_object
from verity.schemas.drafting import (
    KeyPrecedent,
    LegalCosts,
    Outcome,
    OutcomePrediction,
    OutcomeRequest,
    OutcomeResponse,
    PredictionSource,
    RiskProfile,
)

logger = logging.getLogger(__name__)

RESTRAINT_MARKERS = ("section27", "non-compete", "noncompete", "restraint")

PREDICTION_PROMPT = """You are a Senior Indian High Court Judge with 30 years of experience in Contract Law.
Analyze the following contract clause and predict the legal outcome if challenged in an Indian court.

Reason through the Indian Contract Act, 1872 (especially Sections 23, 27, 73 and 74) and leading Supreme Court precedents.

Return ONLY valid JSON (no markdown) with exactly these keys:
{{
  "outcome": "VOID" | "VALID" | "RISKY",
  "confidence_score": 0-100,
  "court_path": ["Court 1", "Court 2"],
  "timeline": "e.g. 18-24 months",
  "legal_costs": {{ "min": number, "max": number, "currency": "INR" }},
  "settlement_estimation": "short percentage range of claim value",
  "key_precedent": {{ "case_name": "...", "year": number, "ruling_summary": "..." }},
  "risk_profile": {{ "repeat_offender": boolean, "judge_view": "one sentence" }}
}}"""

REFERENCE_PREDICTIONS = {
    "restraint": OutcomePrediction(
        outcome=Outcome.VOID,
        confidence_score=94,
        court_path=["Labour Court", "Bombay High Court", "Supreme Court"],
        timeline="18-24 months",
        legal_costs=LegalCosts(min=300000, max=800000),
        settlement_estimation="60-70% of claim value",
        key_precedent=KeyPrecedent(
            case_name="Percept D'Mark (India) Pvt. Ltd. v. Zaheer Khan",
            year=2006,
            ruling_summary="Post-termination restraints are void under Section 27, "
                           "irrespective of reasonableness.",
        ),
        risk_profile=RiskProfile(
            repeat_offender=False,
            judge_view="A post-termination restraint on trade cannot be enforced in India.",
        ),
    ),
    "default": OutcomePrediction(
        outcome=Outcome.RISKY,
        confidence_score=72,
        court_path=["District Court", "High Court"],
        timeline="12-18 months",
        legal_costs=LegalCosts(min=150000, max=500000),
        settlement_estimation="40-55% of claim value",
        key_precedent=KeyPrecedent(
            case_name="Central Inland Water Transport Corp. v. Brojo Nath Ganguly",
            year=1986,
            ruling_summary="Unconscionable terms in contracts between unequal parties "
                           "are opposed to public policy under Section 23.",
        ),
        risk_profile=RiskProfile(
            repeat_offender=False,
            judge_view="The clause is open to challenge as one-sided; the outcome turns on the facts.",
        ),
    ),
}


class OutcomePredictionAgent:
    """Agent for predicting how an Indian court would treat a clause."""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        """Initialize the outcome prediction agent.

        Args:
            llm: Chat model, or None to answer from reference predictions only
        """
        self.llm = llm
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", PREDICTION_PROMPT),
            ("user", "CLAUSE TYPE: {violation_type}\n\nCLAUSE TEXT:\n\"{clause_text}\"")
        ])

    @classmethod
    def from_settings(cls) -> "OutcomePredictionAgent":
        if not llm_available():
            return cls(None)
        return cls(GroqChatModel(max_tokens=settings.PREDICTION_MAX_TOKENS))

    @staticmethod
    def reference_prediction(violation_type: str) -> OutcomePrediction:
        """Canned prediction for a clause type."""
        lowered = violation_type.lower()
        key = "restraint" if any(marker in lowered for marker in RESTRAINT_MARKERS) else "default"
        return REFERENCE_PREDICTIONS[key].model_copy(deep=True)

    def predict(self, request: OutcomeRequest) -> OutcomeResponse:
        """Predict the litigation outlook of a clause.

        Model failures fall back to the reference prediction for the
        clause type.

        Args:
            request: Clause text and its violation type

        Returns:
            Prediction and whether it came from the model or the references
        """
        if self.llm is None:
            return OutcomeResponse(
                prediction=self.reference_prediction(request.violation_type),
                source=PredictionSource.REFERENCE,
            )

        try:
            chain = self.prompt | self.llm
            response = chain.invoke({
                "violation_type": request.violation_type,
                "clause_text": request.clause_text,
            })
            prediction = OutcomePrediction.model_validate(parse_json_object(response.content))
            return OutcomeResponse(prediction=prediction, source=PredictionSource.MODEL)

        except (ValueError, ValidationError) as e:
            logger.warning(f"Unusable outcome prediction, using reference: {str(e)}")
        except Exception as e:
            logger.error(f"Outcome prediction failed, using reference: {str(e)}")

        return OutcomeResponse(
            prediction=self.reference_prediction(request.violation_type),
            source=PredictionSource.REFERENCE,
        )
