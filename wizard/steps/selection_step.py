"""Component selection steps: persona, LLM profile, tools, knowledge bases."""

import questionary
from questionary import Choice

from core.errors import InvalidState, NotFound
from wizard.session import WizardSession
from wizard.ui import STYLE, show


def _label(name: str, detail: str) -> str:
    return f"{name} ({detail})" if detail else name


async def run_persona_step(session: WizardSession) -> bool:
    """Single-select persona. Returns False if user cancelled."""
    catalog = session.machine.require_catalog()
    choices = [
        Choice(_label(p.display_name, p.domain), p.id) for p in catalog.components.personas
    ]
    selected = await questionary.select(
        "Choose a persona:", choices=choices, style=STYLE
    ).ask_async()
    if selected is None:
        return False
    show(await session.choose_persona(selected))
    return True


async def run_llm_step(session: WizardSession) -> bool:
    """Single-select LLM profile. Returns False if user cancelled."""
    catalog = session.machine.require_catalog()
    choices = [
        Choice(_label(p.display_name, f"temp: {p.temperature}"), p.id)
        for p in catalog.components.llm_profiles
    ]
    selected = await questionary.select(
        "Choose an LLM profile:", choices=choices, style=STYLE
    ).ask_async()
    if selected is None:
        return False
    show(await session.choose_llm_profile(selected))
    return True


async def run_tools_step(session: WizardSession) -> bool:
    """Multi-select tools; re-asks until at least one is chosen. Returns False if cancelled."""
    catalog = session.machine.require_catalog()
    choices = [
        Choice(_label(t.display_name, t.category), t.id) for t in catalog.components.tools
    ]
    while True:
        selected = await questionary.checkbox(
            "Select tools:", choices=choices, style=STYLE
        ).ask_async()
        if selected is None:
            return False
        try:
            message = await session.choose_tools(selected)
        except (InvalidState, NotFound) as e:
            print(f"{e}.\n")
            continue
        servers = session.machine.selection.auto_included_servers
        if servers:
            names = ", ".join(s.display_name for s in servers)
            print(f"Auto-included MCP servers: {names}")
        show(message)
        return True


async def run_knowledge_base_step(session: WizardSession) -> bool:
    """Optional multi-select; also triggers content generation. Returns False if cancelled."""
    catalog = session.machine.require_catalog()
    if not catalog.components.knowledge_bases:
        show(await session.choose_knowledge_bases([]))
        return True
    choices = [
        Choice(_label(kb.display_name, kb.type), kb.id)
        for kb in catalog.components.knowledge_bases
    ]
    selected = await questionary.checkbox(
        "Select knowledge bases (optional):", choices=choices, style=STYLE
    ).ask_async()
    if selected is None:
        return False
    print("Generating backstory and system prompt...")
    show(await session.choose_knowledge_bases(selected))
    return True
