"""WizardSession: binds the state machine to the catalog provider and the conversation assistant.

External calls are awaited before any state mutation. Once close() is called,
pending calls are cancelled and late results are discarded (SessionClosed).
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import Literal, TypeVar

from core.catalog.provider import CatalogProvider
from core.errors import GenerationFailed, InvalidState, SessionClosed
from core.llm.fallback import BASIC_MODE_PROMPTS, BASIC_MODE_WELCOME, REPLY_FALLBACK
from core.llm.protocol import ConversationAssistant
from wizard.constants import WizardStep
from wizard.content import GeneratedContent, generate_content, refine_content
from wizard.document import AgentDocument
from wizard.intent import DEFAULT_ACCEPT_PHRASES, ContentIntent
from wizard.machine import WizardMachine

logger = logging.getLogger(__name__)

T = TypeVar("T")

MessageKind = Literal["text", "component-selection", "content-preview", "yaml-preview"]

_WELCOME_INSTRUCTION = (
    "Start a friendly, welcoming conversation with the user to help them build an Agent CRD. "
    "Introduce yourself as the Agent Builder Wizard assistant, explain that you'll guide them "
    "through creating a Kubernetes Agent configuration, and ask for their agent's name with examples."
)

_REFINE_HINT = (
    "Review them below. You can ask me to refine them:\n"
    '- "Add more emphasis on data security"\n'
    '- "Make the tone more formal"\n'
    '- "Include HIPAA compliance guidelines"\n\n'
    'Or type "looks good" when you\'re ready to proceed.'
)


@dataclass(frozen=True)
class ChatMessage:
    """One transcript entry."""

    role: Literal["bot", "user"]
    content: str
    kind: MessageKind = "text"
    created_at: float = field(default_factory=time.time)


class WizardSession:
    """One user's pass through the builder. Owns its machine; nothing is shared across sessions."""

    def __init__(
        self,
        provider: CatalogProvider,
        assistant: ConversationAssistant | None = None,
        accept_phrases: Sequence[str] = DEFAULT_ACCEPT_PHRASES,
    ) -> None:
        self._provider = provider
        self._assistant = assistant
        self._accept_phrases = tuple(accept_phrases)
        self.machine = WizardMachine(accept_phrases=self._accept_phrases)
        self._transcript: list[ChatMessage] = []
        self._pending: set[asyncio.Task] = set()
        self._closed = False

    @property
    def transcript(self) -> list[ChatMessage]:
        return list(self._transcript)

    @property
    def basic_mode(self) -> bool:
        return self._assistant is None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def content(self) -> GeneratedContent:
        s = self.machine.selection
        return GeneratedContent(s.generated_backstory, s.generated_system_prompt, "unchanged")

    async def start(self) -> ChatMessage:
        """Load the catalog and greet. CatalogUnavailable leaves the machine at welcome."""
        catalog = await self._await(self._provider.load())
        self.machine.load_catalog(catalog)
        if self._assistant is None:
            return self._bot(BASIC_MODE_WELCOME)
        return await self._say(_WELCOME_INSTRUCTION, basic_key="")

    async def retry_start(self) -> ChatMessage:
        """Retry affordance after CatalogUnavailable: drop cached data and load again."""
        self._provider.clear_cache()
        return await self.start()

    async def submit_text(self, text: str) -> ChatMessage:
        """Free-text input: identity answers, content feedback, or general conversation."""
        self._user(text)
        step = self.machine.step
        if step == WizardStep.IDENTITY:
            return await self._submit_identity(text)
        if step == WizardStep.CONTENT_GENERATION:
            return await self._handle_feedback(text)
        return await self._say(text, basic_key=step.value)

    async def choose_persona(self, component_id: str) -> ChatMessage:
        persona = self.machine.choose_persona(component_id)
        return await self._say(
            f'The user selected the "{persona.display_name}" persona ({persona.description}). '
            "Acknowledge their choice positively and guide them to select an LLM profile. "
            "Explain briefly what LLM profiles control (thinking style, precision vs creativity).",
            basic_key="llm",
            suffix="\n\nPlease select an LLM profile below:",
            kind="component-selection",
        )

    async def choose_llm_profile(self, component_id: str) -> ChatMessage:
        profile = self.machine.choose_llm_profile(component_id)
        return await self._say(
            f'The user selected "{profile.display_name}" (temperature: {profile.temperature}). '
            "Acknowledge their choice and explain they can now select tools (agent capabilities). "
            "Mention they can select multiple and that required servers will be auto-included.",
            basic_key="tools",
            suffix="\n\nSelect tools below (multi-select):",
            kind="component-selection",
        )

    async def choose_tools(self, component_ids: Sequence[str]) -> ChatMessage:
        self.machine.choose_tools(component_ids)
        s = self.machine.selection
        names = ", ".join(t.display_name for t in s.tools)
        return await self._say(
            f"The user selected {len(s.tools)} tools: {names}. The system automatically included "
            f"{len(s.auto_included_servers)} required MCP server(s). Acknowledge this positively "
            "and explain knowledge bases (RAG sources for context). Ask if they want to add any "
            "knowledge bases (optional).",
            basic_key="knowledge-bases",
            suffix="\n\nSelect knowledge bases below (optional):",
            kind="component-selection",
        )

    async def choose_knowledge_bases(self, component_ids: Sequence[str]) -> ChatMessage:
        """Set knowledge bases, then generate backstory and system prompt."""
        self.machine.choose_knowledge_bases(component_ids)
        return await self.generate_content()

    async def generate_content(self) -> ChatMessage:
        """Generate both texts and commit them together."""
        s = self.machine.selection
        persona = s.persona
        if persona is None:
            raise InvalidState("Choose a persona before generating content")
        result = await self._await(
            generate_content(
                self._assistant, s.goal, persona, list(s.tools), list(s.knowledge_bases)
            )
        )
        self.machine.commit_content(result.backstory, result.system_prompt)
        if result.source == "assistant":
            text = f"I've generated your agent's backstory and system prompt using AI!\n\n{_REFINE_HINT}"
        elif self._assistant is None:
            text = (
                "OpenAI API not configured. Using template-based generation.\n\n"
                'Review the content below. Type "looks good" to proceed to the final preview.'
            )
        else:
            text = (
                "I couldn't reach the assistant, so I used template-based content.\n\n"
                f"{_REFINE_HINT}"
            )
        return self._bot(text, kind="content-preview")

    def regenerate(self) -> AgentDocument:
        """Explicit regenerate from preview."""
        return self.machine.regenerate()

    def complete(self) -> None:
        self.machine.complete()

    def close(self) -> None:
        """Abandon the session: cancel pending external calls; their results are discarded."""
        self._closed = True
        for task in list(self._pending):
            task.cancel()
        logger.info("Session closed at step %s", self.machine.step.value)

    def reset(self) -> None:
        """Start over with an empty selection (catalog kept)."""
        self.machine.reset()
        self._transcript.clear()
        if self._assistant is not None:
            self._assistant.reset()

    async def _submit_identity(self, text: str) -> ChatMessage:
        field_name = self.machine.submit_identity(text)
        value = text.strip()
        if field_name == "agent_name":
            return await self._say(
                f'User wants to name their agent: "{value}". '
                "Ask for a human-friendly display name with an example.",
                basic_key="display_name",
            )
        if field_name == "display_name":
            return await self._say(
                f'User set display name as: "{value}". '
                "Now ask them to describe the agent's primary goal in one sentence.",
                basic_key="goal",
            )
        return await self._say(
            f'User set goal as: "{value}". Now guide them to select a persona from the available '
            "options. Be encouraging about their progress.",
            basic_key="persona",
            suffix="\n\nPlease select a persona below:",
            kind="component-selection",
        )

    async def _handle_feedback(self, text: str) -> ChatMessage:
        if self.machine.classify(text) == ContentIntent.ACCEPT:
            document = self.machine.accept_content()
            s = self.machine.selection
            message = await self._say(
                f'The agent configuration is complete! Congratulate the user on completing the '
                f'wizard. Mention that their agent "{s.display_name}" with goal "{s.goal}" is ready. '
                "Encourage them to download or deploy the YAML.",
                basic_key="preview",
                kind="yaml-preview",
            )
            logger.info("Document assembled for %s", document.name)
            return message

        if self._assistant is None:
            return self._bot(
                'OpenAI API not configured for refinements. Type "looks good" to proceed with current content.'
            )
        refined = await self._await(
            refine_content(
                self._assistant,
                self.content,
                text,
                self.machine.selection.context(self.machine.step.value),
            )
        )
        if refined.source == "unchanged":
            return self._bot(
                "I encountered an error refining the content. Please try again or type "
                '"looks good" to proceed with current content.'
            )
        self.machine.commit_content(refined.backstory, refined.system_prompt)
        return self._bot(
            "I've refined the content based on your feedback. Check the updated backstory and "
            'system prompt below.\n\nNeed more changes? Just let me know! Otherwise, type "looks good" to proceed.',
            kind="content-preview",
        )

    async def _say(
        self,
        instruction: str,
        basic_key: str,
        suffix: str = "",
        kind: MessageKind = "text",
    ) -> ChatMessage:
        """Bot message from the assistant, or the basic-mode text when it is absent/failing."""
        if self._assistant is None:
            text = BASIC_MODE_PROMPTS.get(basic_key, "")
            return self._bot(text + suffix if text else suffix.strip(), kind=kind)
        context = self.machine.selection.context(self.machine.step.value)
        try:
            text = await self._await(self._assistant.reply(instruction, context))
        except GenerationFailed as e:
            logger.warning("Assistant reply failed: %s", e)
            text = REPLY_FALLBACK
        return self._bot(text + suffix, kind=kind)

    async def _await(self, aw: Awaitable[T]) -> T:
        """Await an external call as a cancelable task; discard the result if the session closed."""
        if self._closed:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise SessionClosed("Session is closed")
        task = asyncio.ensure_future(aw)
        self._pending.add(task)
        try:
            result = await task
        except asyncio.CancelledError:
            if self._closed:
                raise SessionClosed("Session closed while waiting") from None
            raise
        finally:
            self._pending.discard(task)
        if self._closed:
            raise SessionClosed("Session closed while waiting")
        return result

    def _bot(self, content: str, kind: MessageKind = "text") -> ChatMessage:
        msg = ChatMessage(role="bot", content=content, kind=kind)
        self._transcript.append(msg)
        return msg

    def _user(self, content: str) -> ChatMessage:
        msg = ChatMessage(role="user", content=content)
        self._transcript.append(msg)
        return msg
