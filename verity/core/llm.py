import re
import json
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, AIMessage, HumanMessage, SystemMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from groq import Groq
from verity.core.config import settings
from verity.schemas.negotiation import NegotiationTurn, TurnRole

JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class GroqChatModel(BaseChatModel):
    """Custom LLM class for Groq integration."""

    client: Any = None
    model_name: str = settings.LLM_MODEL
    temperature: float = settings.LLM_TEMPERATURE
    max_tokens: int = settings.LLM_MAX_TOKENS
    top_p: float = 0.9
    timeout: float = settings.LLM_TIMEOUT

    def __init__(self, **kwargs):
        """Initialize the Groq chat model."""
        super().__init__(**kwargs)
        if self.client is None:
            self.client = Groq(api_key=settings.GROQ_API_KEY, timeout=self.timeout)

    def _convert_messages_to_prompt(self, messages: List[BaseMessage]) -> List[dict]:
        """Convert messages to Groq chat format.

        Args:
            messages: List of messages

        Returns:
            List of message dictionaries in Groq format
        """
        groq_messages = []
        for message in messages:
            if isinstance(message, SystemMessage):
                role = "system"
            elif isinstance(message, HumanMessage):
                role = "user"
            elif isinstance(message, AIMessage):
                role = "assistant"
            else:
                role = "user"

            groq_messages.append({
                "role": role,
                "content": message.content
            })
        return groq_messages

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Generate a response using Groq.

        The first choice carrying non-empty text becomes the generation;
        an empty string is returned when no choice has text.

        Args:
            messages: List of messages
            stop: Optional stop sequences
            run_manager: Optional run manager
            **kwargs: Additional arguments

        Returns:
            ChatResult containing the generated response
        """
        try:
            groq_messages = self._convert_messages_to_prompt(messages)

            completion = self.client.chat.completions.create(
                model=self.model_name,
                messages=groq_messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                top_p=self.top_p,
                stream=False,
                stop=stop,
            )

            text = ""
            for choice in completion.choices or []:
                content = getattr(choice.message, "content", None)
                if isinstance(content, str) and content.strip():
                    text = content
                    break

            message = AIMessage(content=text)
            gen = ChatGeneration(message=message)

            return ChatResult(generations=[gen])

        except Exception as e:
            raise ValueError(f"Error in Groq chat completion: {str(e)}")

    @property
    def _llm_type(self) -> str:
        """Return the type of LLM."""
        return "groq"


class CompletionService(ABC):
    """Capability that turns a system framing plus a transcript into text."""

    @abstractmethod
    def complete(self, system: str, transcript: Sequence[NegotiationTurn]) -> Optional[str]:
        """Return the model's reply, or None when it produced no text."""


class GroqCompletionService(CompletionService):
    """Completion service backed by :class:`GroqChatModel`."""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        self.llm = llm or GroqChatModel(
            model_name=settings.NEGOTIATION_MODEL,
            temperature=settings.NEGOTIATION_TEMPERATURE,
            max_tokens=settings.NEGOTIATION_MAX_TOKENS,
            timeout=settings.NEGOTIATION_TIMEOUT,
        )

    @staticmethod
    def to_messages(system: str, transcript: Sequence[NegotiationTurn]) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=system)]
        for turn in transcript:
            if turn.role == TurnRole.USER:
                messages.append(HumanMessage(content=turn.content))
            else:
                messages.append(AIMessage(content=turn.content))
        return messages

    def complete(self, system: str, transcript: Sequence[NegotiationTurn]) -> Optional[str]:
        response = self.llm.invoke(self.to_messages(system, transcript))
        content = response.content
        if isinstance(content, list):
            # Content blocks: take the first text block
            for block in content:
                if isinstance(block, str) and block.strip():
                    return block
                if isinstance(block, dict) and block.get("type") == "text" and block.get("text"):
                    return block["text"]
            return None
        return content or None


def llm_available() -> bool:
    """Whether a Groq API key is configured."""
    return bool(settings.GROQ_API_KEY)


def parse_json_object(content: Any) -> dict:
    """Parse a JSON object from model output, tolerating text around it."""
    try:
        data = json.loads(content)
    except (TypeError, json.JSONDecodeError):
        match = JSON_OBJECT.search(content if isinstance(content, str) else "")
        if not match:
            raise ValueError("Could not parse model response as JSON")
        data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Model response is not a JSON object")
    return data
