"""Interactive wizard steps."""

from wizard.steps.content_step import run_content_step
from wizard.steps.identity_step import run_identity_step
from wizard.steps.preview_step import run_preview_step
from wizard.steps.selection_step import (
    run_knowledge_base_step,
    run_llm_step,
    run_persona_step,
    run_tools_step,
)

__all__ = [
    "run_content_step",
    "run_identity_step",
    "run_knowledge_base_step",
    "run_llm_step",
    "run_persona_step",
    "run_preview_step",
    "run_tools_step",
]
