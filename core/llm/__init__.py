"""Conversation assistant: protocol, OpenAI-compatible implementation, deterministic fallbacks."""

from core.llm.assistant import (
    OpenAIAssistant,
    assistant_config_from_settings,
    build_assistant,
    is_usable_key,
)
from core.llm.protocol import (
    AssistantConfig,
    ChatContext,
    ContentKind,
    ConversationAssistant,
)

__all__ = [
    "AssistantConfig",
    "ChatContext",
    "ContentKind",
    "ConversationAssistant",
    "OpenAIAssistant",
    "assistant_config_from_settings",
    "build_assistant",
    "is_usable_key",
]
