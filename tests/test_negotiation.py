from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from verity.agents.negotiation_agent import (
    CLOSING_REPLY,
    FALLBACK_REPLY,
    STALLING_REPLY,
    NegotiationAgent,
)
from verity.core.llm import CompletionService, GroqCompletionService
from verity.schemas.negotiation import (
    Difficulty,
    NegotiationRequest,
    NegotiationState,
    NegotiationTurn,
    TurnRole,
)


class StubCompletion(CompletionService):
    def __init__(self, reply="Why should I change that clause?"):
        self.reply = reply
        self.calls = []

    def complete(self, system, transcript):
        self.calls.append((system, list(transcript)))
        return self.reply


class FailingCompletion(CompletionService):
    def complete(self, system, transcript):
        raise TimeoutError("model timed out")


def turns(count):
    roles = [TurnRole.USER, TurnRole.COUNTERPARTY]
    return [NegotiationTurn(role=roles[i % 2], content=f"message {i}") for i in range(count)]


def request(count, difficulty=Difficulty.MEDIUM):
    return NegotiationRequest(
        messages=turns(count),
        difficulty=difficulty,
        violation_type="section27",
        violation_context="The Consultant shall not work for any competitor for two years.",
    )


def test_reply_keeps_negotiation_open():
    reply = NegotiationAgent(StubCompletion()).run_turn(request(1))

    assert reply.response == "Why should I change that clause?"
    assert not reply.should_end


def test_turn_limit_ends_negotiation():
    agent = NegotiationAgent(StubCompletion())

    assert not agent.run_turn(request(3)).should_end
    assert agent.run_turn(request(5)).should_end


def test_resolution_keyword_ends_negotiation():
    reply = NegotiationAgent(StubCompletion("Okay, I agree to remove the non-compete.")).run_turn(request(1))

    assert reply.should_end


def test_completion_failure_falls_back_without_ending():
    reply = NegotiationAgent(FailingCompletion()).run_turn(request(5))

    assert reply.response == FALLBACK_REPLY
    assert not reply.should_end


def test_missing_completion_service_falls_back():
    reply = NegotiationAgent(None).run_turn(request(1))

    assert reply.response == FALLBACK_REPLY
    assert not reply.should_end


def test_empty_completion_stalls():
    reply = NegotiationAgent(StubCompletion("   ")).run_turn(request(1))

    assert reply.response == STALLING_REPLY
    assert not reply.should_end


def test_system_prompt_uses_persona_and_clause():
    completion = StubCompletion()
    NegotiationAgent(completion).run_turn(request(1, Difficulty.HARD))

    system, transcript = completion.calls[0]
    assert "Mr. Reddy" in system
    assert "section27" in system
    assert "shall not work for any competitor" in system
    assert len(transcript) == 1


def test_personas_differ_by_difficulty():
    prompts = {
        difficulty: NegotiationAgent.build_system_prompt(
            NegotiationAgent.start("termination", "may terminate immediately", difficulty)
        )
        for difficulty in Difficulty
    }

    assert "Mr. Sharma" in prompts[Difficulty.EASY]
    assert "Ms. Kapoor" in prompts[Difficulty.MEDIUM]
    assert "Mr. Reddy" in prompts[Difficulty.HARD]


def test_session_ends_within_turn_limit():
    agent = NegotiationAgent(StubCompletion())
    session = agent.start("paymentTerms", "Payment within 90 days of invoice.")

    replies = [agent.advance(session, f"Point {i}") for i in range(3)]

    assert [r.should_end for r in replies] == [False, False, True]
    assert session.state == NegotiationState.ENDED
    assert len(session.transcript) == 6
    assert session.transcript[-1].role == TurnRole.COUNTERPARTY


def test_ended_session_does_not_call_the_model():
    completion = StubCompletion("That is a deal.")
    agent = NegotiationAgent(completion)
    session = agent.start("jurisdiction", "Governing law of the State of California")

    assert agent.advance(session, "Indian law, please.").should_end

    reply = agent.advance(session, "One more thing")
    assert reply.response == CLOSING_REPLY
    assert reply.should_end
    assert len(completion.calls) == 1


def test_transcript_maps_to_chat_messages():
    messages = GroqCompletionService.to_messages("system prompt", turns(3))

    assert isinstance(messages[0], SystemMessage)
    assert [type(m) for m in messages[1:]] == [HumanMessage, AIMessage, HumanMessage]
    assert messages[2].content == "message 1"


def test_resolution_words_inside_other_words_do_not_end():
    agent = NegotiationAgent(None)

    assert not agent.should_end(2, "I disagree with that.")
    assert not agent.should_end(2, "Let me define the scope first.")
    assert not agent.should_end(2, "That would be an ideal outcome for me.")
    assert agent.should_end(2, "Agreed, send me the revised draft.")
    assert agent.should_end(2, "Fine. Let's proceed.")
