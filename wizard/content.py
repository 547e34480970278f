"""Backstory and system prompt generation/refinement.

The two texts are one unit: they are produced concurrently and returned as a
pair, so the caller commits both or neither. Assistant failures never escape
from here; they degrade to deterministic text (generation) or to the current
pair (refinement). When one call of the pair fails, the other is cancelled
before this module returns.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Literal

from core.catalog.models import KnowledgeBase, Persona, Tool
from core.errors import GenerationFailed
from core.llm.fallback import fallback_backstory, fallback_system_prompt
from core.llm.protocol import ChatContext, ConversationAssistant

logger = logging.getLogger(__name__)

ContentSource = Literal["assistant", "fallback", "unchanged"]


@dataclass(frozen=True)
class GeneratedContent:
    backstory: str
    system_prompt: str
    source: ContentSource


def fallback_content(goal: str, persona: Persona) -> GeneratedContent:
    return GeneratedContent(
        backstory=fallback_backstory(goal, persona),
        system_prompt=fallback_system_prompt(goal, persona),
        source="fallback",
    )


async def _run_pair(first: Awaitable[str], second: Awaitable[str]) -> tuple[str, str]:
    """Await both calls. If either fails (or we are cancelled), cancel the survivor first."""
    tasks = [asyncio.ensure_future(first), asyncio.ensure_future(second)]
    try:
        a, b = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return a, b


async def generate_content(
    assistant: ConversationAssistant | None,
    goal: str,
    persona: Persona,
    tools: list[Tool],
    knowledge_bases: list[KnowledgeBase],
) -> GeneratedContent:
    """Generate both texts concurrently. Any failure => both texts from the fallback templates."""
    if assistant is None:
        return fallback_content(goal, persona)
    try:
        backstory, system_prompt = await _run_pair(
            assistant.generate_backstory(goal, persona, tools),
            assistant.generate_system_prompt(goal, persona, tools, knowledge_bases),
        )
    except GenerationFailed as e:
        logger.warning("Content generation failed, using templates: %s", e)
        return fallback_content(goal, persona)
    return GeneratedContent(backstory, system_prompt, source="assistant")


async def refine_content(
    assistant: ConversationAssistant,
    current: GeneratedContent,
    feedback: str,
    context: ChatContext,
) -> GeneratedContent:
    """Refine both texts concurrently. Any failure => current pair returned unchanged."""
    try:
        backstory, system_prompt = await _run_pair(
            assistant.refine("backstory", current.backstory, feedback, context),
            assistant.refine("systemPrompt", current.system_prompt, feedback, context),
        )
    except GenerationFailed as e:
        logger.warning("Content refinement failed, keeping current text: %s", e)
        return GeneratedContent(current.backstory, current.system_prompt, "unchanged")
    return GeneratedContent(backstory, system_prompt, source="assistant")
