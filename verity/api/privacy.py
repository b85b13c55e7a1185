from fastapi import APIRouter, HTTPException
import logging

from verity.schemas.analysis import PIICheckResponse, RedactionResult, TextPayload
from verity.agents.redaction_agent import RedactionAgent

router = APIRouter()
logger = logging.getLogger(__name__)

redaction_agent = RedactionAgent()


@router.post("/redact", response_model=RedactionResult)
async def redact_text(payload: TextPayload):
    """Redact personal data from text before it is shared."""
    try:
        return redaction_agent.redact(payload.text)
    except Exception as e:
        logger.error(f"Error redacting text: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error redacting text: {str(e)}")


@router.post("/check", response_model=PIICheckResponse)
async def check_text(payload: TextPayload):
    """Report which kinds of personal data a text contains."""
    if not redaction_agent.contains_pii(payload.text):
        return PIICheckResponse(contains_pii=False)
    return PIICheckResponse(contains_pii=True, types=redaction_agent.detect_types(payload.text))
