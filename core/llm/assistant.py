"""OpenAI-compatible conversation assistant (OpenAI, OpenRouter, LM Studio, ...).

Uses the Chat Completions API. Every API failure is raised as GenerationFailed;
the wizard session decides on fallbacks.
"""

import logging
from typing import Any, Callable

from openai import AsyncOpenAI, OpenAIError

from core.catalog.models import KnowledgeBase, Persona, Tool
from core.errors import GenerationFailed
from core.llm.fallback import REPLY_FALLBACK
from core.llm.prompts import format_context, render_prompt
from core.llm.protocol import AssistantConfig, ChatContext, ContentKind

logger = logging.getLogger(__name__)

_PLACEHOLDER_KEYS = {"your-api-key-here"}

_BACKSTORY_SYSTEM = "You are an expert at writing compelling agent backstories."
_SYSTEM_PROMPT_SYSTEM = (
    "You are an expert at writing effective AI system prompts for enterprise agents."
)
_REFINE_SYSTEM = (
    "You are an expert at refining and improving agent configurations based on user feedback."
)


class OpenAIAssistant:
    """ConversationAssistant backed by an AsyncOpenAI client. Keeps per-session chat history."""

    def __init__(self, config: AssistantConfig, client: AsyncOpenAI | None = None) -> None:
        self._config = config
        self._client = client or AsyncOpenAI(
            base_url=config.base_url,
            api_key=config.api_key or "not-required",
            timeout=config.timeout,
        )
        self._history: list[dict[str, str]] = []

    @property
    def history(self) -> list[dict[str, str]]:
        return list(self._history)

    def reset(self) -> None:
        self._history.clear()

    async def reply(self, message: str, context: ChatContext) -> str:
        messages = [
            {"role": "system", "content": render_prompt("wizard_system")},
            {"role": "system", "content": format_context(context)},
            *self._history,
            {"role": "user", "content": message},
        ]
        text = await self._complete(
            messages,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )
        response = text or REPLY_FALLBACK
        self._history.append({"role": "user", "content": message})
        self._history.append({"role": "assistant", "content": response})
        return response

    async def generate_backstory(
        self, goal: str, persona: Persona, tools: list[Tool]
    ) -> str:
        prompt = render_prompt("backstory", goal=goal, persona=persona, tools=tools)
        text = await self._complete(
            [
                {"role": "system", "content": _BACKSTORY_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            temperature=0.8,
            max_tokens=300,
        )
        if not text:
            raise GenerationFailed("Empty backstory from assistant")
        return text

    async def generate_system_prompt(
        self,
        goal: str,
        persona: Persona,
        tools: list[Tool],
        knowledge_bases: list[KnowledgeBase],
    ) -> str:
        tpl = persona.persona_template or {}
        prompt = render_prompt(
            "system_prompt",
            goal=goal,
            persona=persona,
            persona_tone=tpl.get("tone") or persona.tone,
            tools=tools,
            knowledge_bases=knowledge_bases,
        )
        text = await self._complete(
            [
                {"role": "system", "content": _SYSTEM_PROMPT_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=800,
        )
        if not text:
            raise GenerationFailed("Empty system prompt from assistant")
        return text

    async def refine(
        self,
        kind: ContentKind,
        current: str,
        feedback: str,
        context: ChatContext,
    ) -> str:
        prompt = render_prompt(
            "refine", kind=kind, current=current, feedback=feedback, ctx=context
        )
        text = await self._complete(
            [
                {"role": "system", "content": _REFINE_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=300 if kind == "backstory" else 800,
        )
        return text or current

    async def _complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self._config.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.warning("Assistant call failed: %s", e)
            raise GenerationFailed(str(e)) from e
        if not completion.choices:
            return ""
        content = completion.choices[0].message.content
        return (content or "").strip()


def is_usable_key(api_key: str | None) -> bool:
    return bool(api_key) and api_key not in _PLACEHOLDER_KEYS


def assistant_config_from_settings(
    settings: dict[str, Any],
    secrets_getter: Callable[[str], str | None],
) -> AssistantConfig:
    """Build AssistantConfig from the `assistant` section. Key: literal, then secret lookup."""
    cfg = settings.get("assistant") or {}
    api_key = cfg.get("api_key_literal")
    if not api_key and cfg.get("api_key_secret"):
        api_key = secrets_getter(str(cfg["api_key_secret"]))
    return AssistantConfig(
        model=str(cfg.get("model", "gpt-4o-mini")),
        temperature=float(cfg.get("temperature", 0.7)),
        max_tokens=int(cfg.get("max_tokens", 2000)),
        base_url=cfg.get("base_url"),
        api_key=api_key,
        timeout=float(cfg.get("timeout", 60.0)),
    )


def build_assistant(
    settings: dict[str, Any],
    secrets_getter: Callable[[str], str | None],
) -> OpenAIAssistant | None:
    """Return an assistant, or None when no usable API key is configured (basic mode)."""
    config = assistant_config_from_settings(settings, secrets_getter)
    if not is_usable_key(config.api_key):
        logger.info("Assistant not configured; running in basic mode")
        return None
    return OpenAIAssistant(config)
