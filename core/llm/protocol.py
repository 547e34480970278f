"""Conversation assistant protocol and configuration dataclasses.

The wizard treats assistant output as opaque text; only the session decides
what to do when a call fails.
"""

from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

from core.catalog.models import KnowledgeBase, Persona, Tool

ContentKind = Literal["backstory", "systemPrompt"]


@dataclass
class AssistantConfig:
    """Assistant settings (from config/settings.yaml `assistant` section)."""

    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 2000
    base_url: str | None = None
    api_key: str | None = None
    timeout: float = 60.0


@dataclass(frozen=True)
class ChatContext:
    """What the assistant knows about the session when it is asked something."""

    agent_name: str = ""
    display_name: str = ""
    goal: str = ""
    persona: Persona | None = None
    tools: tuple[Tool, ...] = field(default_factory=tuple)
    knowledge_bases: tuple[KnowledgeBase, ...] = field(default_factory=tuple)
    current_step: str = ""


@runtime_checkable
class ConversationAssistant(Protocol):
    """Contract for the text-generation collaborator. Failures raise GenerationFailed."""

    async def reply(self, message: str, context: ChatContext) -> str:
        """Conversational reply to a wizard instruction or user message."""
        ...

    async def generate_backstory(
        self, goal: str, persona: Persona, tools: list[Tool]
    ) -> str: ...

    async def generate_system_prompt(
        self,
        goal: str,
        persona: Persona,
        tools: list[Tool],
        knowledge_bases: list[KnowledgeBase],
    ) -> str: ...

    async def refine(
        self,
        kind: ContentKind,
        current: str,
        feedback: str,
        context: ChatContext,
    ) -> str:
        """Revise current text according to free-text feedback."""
        ...

    def reset(self) -> None:
        """Forget conversation history."""
        ...
