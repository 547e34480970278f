"""Wizard steps and process exit codes."""

from enum import StrEnum


class WizardStep(StrEnum):
    """Steps of the builder flow, in strict order."""

    WELCOME = "welcome"
    IDENTITY = "identity"
    PERSONA = "persona"
    LLM = "llm"
    TOOLS = "tools"
    KNOWLEDGE_BASES = "knowledge-bases"
    CONTENT_GENERATION = "content-generation"
    PREVIEW = "preview"
    COMPLETE = "complete"

    @property
    def index(self) -> int:
        return STEP_ORDER.index(self)


STEP_ORDER: tuple[WizardStep, ...] = tuple(WizardStep)

WIZARD_SUCCESS = 0  # Document assembled (and optionally saved)
WIZARD_QUIT = 1  # User cancelled (Ctrl+C or empty answer)
WIZARD_CATALOG_UNAVAILABLE = 2  # Catalog could not be loaded, user gave up retrying
