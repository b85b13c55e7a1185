from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


class EmailTone(str, Enum):
    """Register of a negotiation email."""
    POLITE = "polite"
    FIRM = "firm"


class ClauseIssue(BaseModel):
    """A flagged clause passed to the drafting tools."""
    type: str
    clause_text: str
    severity: int = Field(default=50, ge=0, le=100)
    section: Optional[str] = None
    explanation: str = ""
    fair_alternative: str = ""


class EmailRequest(BaseModel):
    """Request body for drafting a negotiation email."""
    violations: List[ClauseIssue] = Field(min_length=1)
    tone: EmailTone = EmailTone.POLITE
    sender_name: Optional[str] = None
    recipient_role: Optional[str] = None


class NegotiationEmail(BaseModel):
    subject: str
    body: str
    tone: EmailTone


class FixRequest(BaseModel):
    """Request body for rewriting a contract into fair terms."""
    contract_text: str = Field(min_length=1)
    violations: List[ClauseIssue] = []


class Outcome(str, Enum):
    """Predicted court view of a clause."""
    VOID = "VOID"
    VALID = "VALID"
    RISKY = "RISKY"


class PredictionSource(str, Enum):
    MODEL = "model"
    REFERENCE = "reference"


class OutcomeRequest(BaseModel):
    """Request body for predicting how a court would treat a clause."""
    clause_text: str = Field(min_length=1)
    violation_type: str = Field(min_length=1)


class LegalCosts(BaseModel):
    min: int
    max: int
    currency: str = "INR"


class KeyPrecedent(BaseModel):
    case_name: str
    year: int
    ruling_summary: str


class RiskProfile(BaseModel):
    repeat_offender: bool = False
    judge_view: str = ""


class OutcomePrediction(BaseModel):
    """Litigation outlook for one clause."""
    outcome: Outcome
    confidence_score: int = Field(ge=0, le=100)
    court_path: List[str] = []
    timeline: str
    legal_costs: LegalCosts
    settlement_estimation: str
    key_precedent: KeyPrecedent
    risk_profile: RiskProfile = Field(default_factory=RiskProfile)


class OutcomeResponse(BaseModel):
    prediction: OutcomePrediction
    source: PredictionSource
