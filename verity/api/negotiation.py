from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from verity.schemas.analysis import ErrorResponse
from verity.schemas.drafting import EmailRequest, NegotiationEmail, OutcomeRequest, OutcomeResponse
from verity.schemas.negotiation import NegotiationRequest, NegotiationResponse
from verity.agents.drafting_agent import DraftingAgent
from verity.agents.negotiation_agent import NegotiationAgent
from verity.agents.outcome_agent import OutcomePredictionAgent
from verity.core.llm import GroqCompletionService, llm_available

router = APIRouter()
logger = logging.getLogger(__name__)

# Without an API key every turn gets the fallback reply
negotiation_agent = NegotiationAgent(GroqCompletionService() if llm_available() else None)
drafting_agent = DraftingAgent() if llm_available() else None
outcome_agent = OutcomePredictionAgent.from_settings()


def get_negotiation_agent() -> NegotiationAgent:
    return negotiation_agent


def get_drafting_agent() -> Optional[DraftingAgent]:
    return drafting_agent


def get_outcome_agent() -> OutcomePredictionAgent:
    return outcome_agent


@router.post("/simulate", response_model=NegotiationResponse)
def simulate_negotiation(
    request: NegotiationRequest,
    agent: NegotiationAgent = Depends(get_negotiation_agent),
):
    """Play the counterparty's next turn in a negotiation rehearsal.

    Completion failures never surface as errors: the reply falls back to a
    clarifying question and the negotiation stays open.
    """
    reply = agent.run_turn(request)
    return NegotiationResponse(response=reply.response, should_end=reply.should_end)


@router.post(
    "/email",
    response_model=NegotiationEmail,
    responses={
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def draft_negotiation_email(
    request: EmailRequest,
    agent: Optional[DraftingAgent] = Depends(get_drafting_agent),
):
    """Draft a polite or firm email asking to renegotiate flagged clauses."""
    if agent is None:
        raise HTTPException(status_code=503, detail="Email drafting requires GROQ_API_KEY")
    try:
        return agent.draft_email(request)

    except ValueError as e:
        logger.warning(f"Unusable email draft: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Model returned an unusable email: {str(e)}")
    except Exception as e:
        logger.error(f"Error drafting email: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error drafting email: {str(e)}")


@router.post("/predict", response_model=OutcomeResponse, responses={500: {"model": ErrorResponse}})
def predict_outcome(
    request: OutcomeRequest,
    agent: OutcomePredictionAgent = Depends(get_outcome_agent),
):
    """Predict how an Indian court would treat a clause if challenged."""
    try:
        return agent.predict(request)

    except Exception as e:
        logger.error(f"Error predicting outcome: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error predicting outcome: {str(e)}")
