"""Deterministic text used when the assistant is unavailable or fails.

Derived only from persona and goal fields; no external call.
"""

from core.catalog.models import Persona

BASIC_MODE_WELCOME = (
    "OpenAI API not configured. Using basic mode.\n\n"
    "Welcome to the Agent Builder Wizard! Let's create your agent.\n\n"
    "What would you like to name your agent? (e.g., 'patient-care-coordinator')"
)

REPLY_FALLBACK = (
    "I apologize, but I encountered an error. "
    "Please try again or check your API key configuration."
)

# Basic-mode prompts for each identity field and selection step
BASIC_MODE_PROMPTS: dict[str, str] = {
    "display_name": "Great! Now give your agent a human-friendly display name (e.g., 'Patient Care Coordinator').",
    "goal": "Describe your agent's primary goal in one sentence.",
    "persona": "Please select a persona.",
    "llm": "Please select an LLM profile.",
    "tools": "Select tools (multi-select). Required MCP servers are included automatically.",
    "knowledge-bases": "Select knowledge bases (optional).",
    "preview": "Your agent configuration is ready. Save or copy the YAML below.",
}


def fallback_backstory(goal: str, persona: Persona) -> str:
    return (
        f"I am an experienced {persona.display_name.lower()} with expertise in "
        f"{persona.domain.lower()}. My communication style is {persona.tone.lower()}, "
        f"and I specialize in helping teams achieve their goals through {goal.lower()}."
    )


def fallback_system_prompt(goal: str, persona: Persona) -> str:
    tpl = persona.persona_template or {}
    agent_type = persona.agent_type or "Agent"
    tone = tpl.get("tone") or persona.tone
    topics = ", ".join(persona.topics) or "general tasks"
    return (
        f"You are a {agent_type} responsible for {goal}\n\n"
        "Your primary responsibilities include:\n"
        "- Execute tasks aligned with the defined goal\n"
        f"- Maintain {tone} communication style\n"
        "- Leverage available tools and knowledge bases effectively\n\n"
        f"Focus areas: {topics}"
    )
