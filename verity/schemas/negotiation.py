from pydantic import BaseModel, Field
from typing import List
from enum import Enum


class Difficulty(str, Enum):
    """Counterparty personas, in increasing order of resistance."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TurnRole(str, Enum):
    """Speaker of a negotiation turn."""
    USER = "user"
    COUNTERPARTY = "counterparty"


class NegotiationState(str, Enum):
    """States of the negotiation state machine."""
    AWAITING_TURN = "awaiting_turn"
    RESPONDED = "responded"
    ENDED = "ended"


class NegotiationTurn(BaseModel):
    """One message in a negotiation transcript."""
    role: TurnRole
    content: str


class NegotiationSession(BaseModel):
    """Ephemeral negotiation over a single violation."""
    difficulty: Difficulty = Difficulty.MEDIUM
    violation_type: str
    violation_context: str
    transcript: List[NegotiationTurn] = []
    state: NegotiationState = NegotiationState.AWAITING_TURN

    @property
    def ended(self) -> bool:
        return self.state == NegotiationState.ENDED


class NegotiationReply(BaseModel):
    """The counterparty's reply to one turn."""
    response: str
    should_end: bool = False


class NegotiationRequest(BaseModel):
    """Request body for a stateless negotiation turn."""
    messages: List[NegotiationTurn] = []
    difficulty: Difficulty = Difficulty.MEDIUM
    violation_type: str = Field(min_length=1)
    violation_context: str = ""


class NegotiationResponse(BaseModel):
    """Response body for a negotiation turn."""
    response: str
    should_end: bool
