import re
import logging
from typing import Optional

from verity.core.config import Settings, settings as default_settings
from verity.core.llm import CompletionService
from verity.schemas.negotiation import (
    Difficulty,
    NegotiationReply,
    NegotiationRequest,
    NegotiationSession,
    NegotiationState,
    NegotiationTurn,
    TurnRole,
)

logger = logging.getLogger(__name__)

PERSONAS = {
    Difficulty.EASY: (
        "You are Mr. Sharma, an understanding and reasonable client. You are open to discussion and "
        "willing to negotiate fair terms. You ask clarifying questions and generally want to find a "
        "solution that works for both parties. Be warm and collaborative."
    ),
    Difficulty.MEDIUM: (
        "You are Ms. Kapoor, a skeptical but professional client. You require justification for any "
        "changes and want to see legal citations or industry standards. You are not immediately "
        "convinced but can be persuaded with good arguments. Push back moderately but fairly."
    ),
    Difficulty.HARD: (
        "You are Mr. Reddy, a tough and impatient client. You use \"take it or leave it\" tactics and "
        "insist that \"everyone signs this contract.\" Create time pressure and resist changes. Only "
        "concede if the freelancer makes very strong legal arguments with specific citations."
    ),
}

RULES = """RULES:
- Keep responses short (2-3 sentences max)
- Stay in character based on difficulty
- React to what the freelancer says
- If they make good legal arguments, acknowledge them appropriately for your difficulty level
- After 3-4 exchanges, start moving toward a resolution

Respond as the client would, in first person."""

RESOLUTION_PATTERN = re.compile(
    r"\b(?:agree[sd]?|deal|accepted|fine|okay we can|let's proceed)\b", re.IGNORECASE
)

STALLING_REPLY = "Let me think about that..."
FALLBACK_REPLY = "I need to think about this. Can you elaborate on your position?"
CLOSING_REPLY = "I think we've covered everything we can on this clause."


class NegotiationAgent:
    """Turn-based simulator of a counterparty negotiating one clause.

    Each call to :meth:`advance` moves a session from AWAITING_TURN through
    one completion call to RESPONDED, and then back to AWAITING_TURN or on
    to ENDED.
    """

    def __init__(self, completion: Optional[CompletionService], settings: Optional[Settings] = None):
        """Initialize the negotiation agent.

        Args:
            completion: Language-model capability; None means unavailable
            settings: Turn limit and other knobs
        """
        self.completion = completion
        self.settings = settings or default_settings

    @staticmethod
    def start(violation_type: str, violation_context: str,
              difficulty: Difficulty = Difficulty.MEDIUM) -> NegotiationSession:
        """Open a negotiation over one violation."""
        return NegotiationSession(
            difficulty=difficulty,
            violation_type=violation_type,
            violation_context=violation_context,
        )

    @staticmethod
    def build_system_prompt(session: NegotiationSession) -> str:
        return (
            f"{PERSONAS[session.difficulty]}\n\n"
            f"You are negotiating about this contract clause type: {session.violation_type}\n"
            f"The specific clause text is: \"{session.violation_context}\"\n\n"
            f"{RULES}"
        )

    def should_end(self, turns: int, response: str) -> bool:
        """Heuristic end-of-negotiation check, not semantic understanding.

        Args:
            turns: Transcript length including the reply
            response: The counterparty reply
        """
        return (
            turns >= self.settings.NEGOTIATION_MAX_TURNS
            or bool(RESOLUTION_PATTERN.search(response))
        )

    def advance(self, session: NegotiationSession, user_text: Optional[str] = None) -> NegotiationReply:
        """Play one counterparty turn.

        Args:
            session: Session to advance, updated in place
            user_text: The freelancer's message, appended before the call

        Returns:
            The counterparty's reply and whether the session has ended
        """
        if session.ended:
            return NegotiationReply(response=CLOSING_REPLY, should_end=True)

        if user_text:
            session.transcript.append(NegotiationTurn(role=TurnRole.USER, content=user_text))

        try:
            if self.completion is None:
                raise RuntimeError("Completion service not configured")
            text = self.completion.complete(self.build_system_prompt(session), list(session.transcript))
            response = text.strip() if isinstance(text, str) and text.strip() else STALLING_REPLY
            ended = self.should_end(len(session.transcript) + 1, response)
        except Exception as e:
            logger.error(f"Negotiation simulation error: {str(e)}")
            response, ended = FALLBACK_REPLY, False

        session.state = NegotiationState.RESPONDED
        session.transcript.append(NegotiationTurn(role=TurnRole.COUNTERPARTY, content=response))
        session.state = NegotiationState.ENDED if ended else NegotiationState.AWAITING_TURN

        return NegotiationReply(response=response, should_end=ended)

    def run_turn(self, request: NegotiationRequest) -> NegotiationReply:
        """Stateless turn: rebuild the session from the request transcript."""
        session = NegotiationSession(
            difficulty=request.difficulty,
            violation_type=request.violation_type,
            violation_context=request.violation_context,
            transcript=list(request.messages),
        )
        return self.advance(session)
