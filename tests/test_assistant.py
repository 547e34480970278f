"""Tests for the OpenAI-backed conversation assistant (client mocked)."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from core.catalog.models import CatalogIndex
from core.errors import GenerationFailed
from core.llm.assistant import (
    OpenAIAssistant,
    assistant_config_from_settings,
    build_assistant,
    is_usable_key,
)
from core.llm.fallback import REPLY_FALLBACK
from core.llm.prompts import format_context, render_prompt
from core.llm.protocol import AssistantConfig, ChatContext, ConversationAssistant


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client(*contents: str | None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        side_effect=[_completion(c) for c in contents]
    )
    return client


def _sent(client: MagicMock, call: int = 0) -> dict[str, Any]:
    return client.chat.completions.create.await_args_list[call].kwargs


class TestReply:
    @pytest.mark.asyncio
    async def test_reply_includes_context_and_history(self) -> None:
        client = _client("Hi there", "Second answer")
        assistant = OpenAIAssistant(AssistantConfig(model="m"), client=client)
        ctx = ChatContext(agent_name="billing-bot", current_step="identity")

        assert await assistant.reply("hello", ctx) == "Hi there"
        await assistant.reply("again", ctx)

        kwargs = _sent(client, 1)
        assert kwargs["model"] == "m"
        messages = kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert "Agent Name: billing-bot" in messages[1]["content"]
        assert [m["content"] for m in messages[2:]] == ["hello", "Hi there", "again"]
        assert len(assistant.history) == 4

    @pytest.mark.asyncio
    async def test_empty_reply_uses_fallback_text(self) -> None:
        assistant = OpenAIAssistant(AssistantConfig(), client=_client(""))
        assert await assistant.reply("hello", ChatContext()) == REPLY_FALLBACK

    @pytest.mark.asyncio
    async def test_api_error_raises_generation_failed(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=OpenAIError("rate limited"))
        assistant = OpenAIAssistant(AssistantConfig(), client=client)
        with pytest.raises(GenerationFailed, match="rate limited"):
            await assistant.reply("hello", ChatContext())
        assert assistant.history == []

    @pytest.mark.asyncio
    async def test_reset_clears_history(self) -> None:
        assistant = OpenAIAssistant(AssistantConfig(), client=_client("ok"))
        await assistant.reply("hello", ChatContext())
        assistant.reset()
        assert assistant.history == []

    def test_satisfies_protocol(self) -> None:
        assistant = OpenAIAssistant(AssistantConfig(), client=MagicMock())
        assert isinstance(assistant, ConversationAssistant)


class TestGeneration:
    @pytest.mark.asyncio
    async def test_backstory(self, catalog: CatalogIndex) -> None:
        client = _client("  I am a seasoned analyst.  ")
        assistant = OpenAIAssistant(AssistantConfig(), client=client)
        persona = catalog.persona("finance-analyst")
        assert persona is not None
        tools = [t for t in catalog.components.tools[:2]]
        text = await assistant.generate_backstory("reconcile accounts", persona, tools)
        assert text == "I am a seasoned analyst."
        kwargs = _sent(client)
        assert kwargs["temperature"] == 0.8
        assert kwargs["max_tokens"] == 300
        assert "Invoice Lookup, Ledger Post" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_system_prompt(self, catalog: CatalogIndex) -> None:
        client = _client("You are a FinanceAgent.")
        assistant = OpenAIAssistant(AssistantConfig(), client=client)
        persona = catalog.persona("finance-analyst")
        assert persona is not None
        kbs = list(catalog.components.knowledge_bases)
        await assistant.generate_system_prompt("goal", persona, [], kbs)
        prompt = _sent(client)["messages"][1]["content"]
        assert "**Agent Type**: FinanceAgent" in prompt
        assert "No tools configured" in prompt
        assert "- Finance Policies: Knowledge source" in prompt
        assert _sent(client)["max_tokens"] == 800

    @pytest.mark.asyncio
    async def test_empty_generation_fails(self, catalog: CatalogIndex) -> None:
        assistant = OpenAIAssistant(AssistantConfig(), client=_client(None))
        persona = catalog.persona("bare")
        assert persona is not None
        with pytest.raises(GenerationFailed):
            await assistant.generate_backstory("goal", persona, [])

    @pytest.mark.asyncio
    async def test_no_choices_fails(self, catalog: CatalogIndex) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))
        assistant = OpenAIAssistant(AssistantConfig(), client=client)
        persona = catalog.persona("bare")
        assert persona is not None
        with pytest.raises(GenerationFailed):
            await assistant.generate_system_prompt("goal", persona, [], [])

    @pytest.mark.asyncio
    async def test_refine_empty_keeps_current(self) -> None:
        client = _client("")
        assistant = OpenAIAssistant(AssistantConfig(), client=client)
        text = await assistant.refine("systemPrompt", "current", "shorter", ChatContext())
        assert text == "current"
        assert _sent(client)["max_tokens"] == 800
        assert "**Current systemPrompt**" in _sent(client)["messages"][1]["content"]


class TestPrompts:
    def test_empty_context(self) -> None:
        assert format_context(ChatContext()) == "Current context:\nNo context available yet"

    def test_wizard_system_prompt_renders(self) -> None:
        assert "Kubernetes Agent" in render_prompt("wizard_system")


class TestConfig:
    @pytest.mark.parametrize("key", [None, "", "your-api-key-here"])
    def test_unusable_keys(self, key: str | None) -> None:
        assert not is_usable_key(key)

    def test_literal_key_wins(self) -> None:
        getter = MagicMock(return_value="from-secret")
        cfg = assistant_config_from_settings(
            {"assistant": {"api_key_literal": "lit", "api_key_secret": "OPENAI_API_KEY"}},
            getter,
        )
        assert cfg.api_key == "lit"
        getter.assert_not_called()

    def test_secret_lookup(self) -> None:
        cfg = assistant_config_from_settings(
            {"assistant": {"api_key_secret": "OPENAI_API_KEY", "model": "gpt-x"}},
            lambda name: "sk-123" if name == "OPENAI_API_KEY" else None,
        )
        assert cfg.api_key == "sk-123"
        assert cfg.model == "gpt-x"

    def test_build_without_key_is_basic_mode(self) -> None:
        settings = {"assistant": {"api_key_secret": "OPENAI_API_KEY"}}
        assert build_assistant(settings, lambda _: None) is None
        assert build_assistant(settings, lambda _: "your-api-key-here") is None

    def test_build_with_key(self) -> None:
        settings = {"assistant": {"api_key_secret": "OPENAI_API_KEY"}}
        assert isinstance(build_assistant(settings, lambda _: "sk-real"), OpenAIAssistant)
