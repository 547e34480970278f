"""Render assistant prompts from Jinja2 templates in core/llm/templates/."""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from core.llm.protocol import ChatContext

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(_TEMPLATES_DIR),
    autoescape=select_autoescape(enabled_extensions=()),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def render_prompt(name: str, **template_vars: Any) -> str:
    """Render templates/<name>.jinja2, stripped."""
    return _env.get_template(f"{name}.jinja2").render(**template_vars).strip()


def format_context(ctx: ChatContext) -> str:
    """Context block sent as a second system message with every reply."""
    parts: list[str] = []
    if ctx.agent_name:
        parts.append(f"Agent Name: {ctx.agent_name}")
    if ctx.display_name:
        parts.append(f"Display Name: {ctx.display_name}")
    if ctx.goal:
        parts.append(f"Goal: {ctx.goal}")
    if ctx.persona:
        parts.append(f"Persona: {ctx.persona.display_name}")
    if ctx.tools:
        parts.append(f"Selected Tools: {', '.join(t.display_name for t in ctx.tools)}")
    if ctx.knowledge_bases:
        names = ", ".join(kb.display_name for kb in ctx.knowledge_bases)
        parts.append(f"Knowledge Bases: {names}")
    if ctx.current_step:
        parts.append(f"Current Step: {ctx.current_step}")
    body = "\n".join(parts) if parts else "No context available yet"
    return f"Current context:\n{body}"
