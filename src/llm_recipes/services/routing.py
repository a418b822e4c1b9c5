"""Routing between a cheap greeting classifier and a RAG-backed chat bot.

Greetings are detected by a small, fast model and answered with a canned
reply; only real questions reach the more expensive chat bot.
"""

from typing import Protocol

from llm_recipes.core.logging import get_logger
from llm_recipes.providers.base import BaseLLMProvider
from llm_recipes.services.assistant import Assistant

logger = get_logger(__name__)

EMPTY_MESSAGE_REPLY = "Hello! Do you have any questions about our dental services?"
GREETING_REPLY = "Hello! Welcome to Miles of Smiles, how can we help you?"

GREETING_TEMPLATE = "Answer only true or false: is the following text a greeting? {{it}}"
CHAT_BOT_SYSTEM_MESSAGE = (
    "You are the customer service assistant of Miles of Smiles dental clinic. "
    "Answer strictly based on the retrieved business information, be professional, "
    "friendly and concise, and never make up information that was not provided."
)


class GreetingExpert(Protocol):
    def is_greeting(self, text: str) -> bool: ...


class ChatBot(Protocol):
    def reply(self, user_message: str) -> str: ...


class GreetingRouter:
    """Sends greetings to a canned reply and everything else to the chat bot."""

    def __init__(self, greeting_expert: GreetingExpert, chat_bot: ChatBot) -> None:
        self.greeting_expert = greeting_expert
        self.chat_bot = chat_bot

    def handle(self, user_message: str) -> str:
        """Answer one user message.

        Blank input gets a prompt to ask something and consults neither
        collaborator. The chat bot receives the trimmed message.
        """
        text = user_message.strip()
        if not text:
            return EMPTY_MESSAGE_REPLY

        is_greeting = self.greeting_expert.is_greeting(text)
        logger.info("message_routed", greeting=is_greeting)
        if is_greeting:
            return GREETING_REPLY
        return self.chat_bot.reply(text)


class AssistantGreetingExpert:
    """``GreetingExpert`` backed by a yes/no question to an assistant."""

    def __init__(self, assistant: Assistant) -> None:
        self.assistant = assistant

    @classmethod
    def from_provider(cls, provider: BaseLLMProvider) -> "AssistantGreetingExpert":
        """Build an expert with a deterministic (temperature 0) assistant."""
        return cls(Assistant(provider, user_template=GREETING_TEMPLATE, temperature=0.0))

    def is_greeting(self, text: str) -> bool:
        return self.assistant.chat_as(bool, text)


class AssistantChatBot:
    """``ChatBot`` that forwards to an assistant."""

    def __init__(self, assistant: Assistant) -> None:
        self.assistant = assistant

    def reply(self, user_message: str) -> str:
        return self.assistant.chat(user_message)
