"""Wizard state machine: owns the SelectionState and the current step.

Every operation checks its step first, then its input, and only then mutates.
A failing operation leaves both the selection and the step untouched.
Steps only move forward; a committed selection cannot be overwritten once
the flow has moved past its step.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Callable, TypeVar

from core.catalog.models import CatalogIndex, ComponentRecord, LLMProfile, Persona
from core.errors import InvalidState, NotFound
from wizard.assembler import assemble
from wizard.constants import WizardStep
from wizard.document import AgentDocument
from wizard.intent import DEFAULT_ACCEPT_PHRASES, ContentIntent, classify_feedback
from wizard.resolver import resolve_required_servers
from wizard.state import IDENTITY_FIELDS, SelectionState

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ComponentRecord)


class WizardMachine:
    """Drives one builder session: welcome -> identity -> ... -> preview -> complete."""

    def __init__(
        self,
        catalog: CatalogIndex | None = None,
        accept_phrases: Sequence[str] = DEFAULT_ACCEPT_PHRASES,
    ) -> None:
        self._catalog: CatalogIndex | None = None
        self._accept_phrases = tuple(accept_phrases)
        self._state = SelectionState()
        self._step = WizardStep.WELCOME
        self._history: list[WizardStep] = [WizardStep.WELCOME]
        if catalog is not None:
            self.load_catalog(catalog)

    @property
    def step(self) -> WizardStep:
        return self._step

    @property
    def selection(self) -> SelectionState:
        """Current selection. Read-only by contract: mutate through machine operations."""
        return self._state

    @property
    def catalog(self) -> CatalogIndex | None:
        return self._catalog

    def require_catalog(self) -> CatalogIndex:
        """The loaded catalog; InvalidState before a successful load."""
        if self._catalog is None:
            raise InvalidState("Catalog not loaded")
        return self._catalog

    @property
    def history(self) -> tuple[WizardStep, ...]:
        """Steps entered so far, in order."""
        return tuple(self._history)

    # welcome

    def load_catalog(self, catalog: CatalogIndex) -> None:
        """Attach a loaded catalog and leave the welcome step."""
        self._require(WizardStep.WELCOME, "load the catalog")
        self._catalog = catalog
        self._advance(WizardStep.IDENTITY)

    # identity

    def set_identity(self, field: str, value: str) -> None:
        """Set one identity field. Fields are taken in order: agent_name, display_name, goal."""
        self._require(WizardStep.IDENTITY, "set identity")
        if field not in IDENTITY_FIELDS:
            raise InvalidState(f"Unknown identity field {field!r}")
        cleaned = (value or "").strip()
        if not cleaned:
            raise InvalidState(f"{field} cannot be empty")
        expected = self._state.next_identity_field()
        if field != expected:
            if getattr(self._state, field):
                raise InvalidState(f"{field} is already set")
            raise InvalidState(f"{expected} must be set before {field}")
        setattr(self._state, field, cleaned)
        logger.info("Identity %s set", field)
        if self._state.next_identity_field() is None:
            self._advance(WizardStep.PERSONA)

    def submit_identity(self, value: str) -> str:
        """Set the next unset identity field. Returns the field name that was set."""
        self._require(WizardStep.IDENTITY, "set identity")
        field = self._state.next_identity_field()
        if field is None:
            raise InvalidState("Identity is already complete")
        self.set_identity(field, value)
        return field

    # selections

    def choose_persona(self, component_id: str) -> Persona:
        self._require(WizardStep.PERSONA, "choose a persona")
        persona = self._lookup("persona", component_id, self.require_catalog().persona)
        self._state.persona = persona
        self._advance(WizardStep.LLM)
        return persona

    def choose_llm_profile(self, component_id: str) -> LLMProfile:
        self._require(WizardStep.LLM, "choose an LLM profile")
        profile = self._lookup(
            "llm profile", component_id, self.require_catalog().llm_profile
        )
        self._state.llm_profile = profile
        self._advance(WizardStep.TOOLS)
        return profile

    def choose_tools(self, component_ids: Sequence[str]) -> None:
        """Replace the tool set and recompute auto-included servers. At least one tool required."""
        self._require(WizardStep.TOOLS, "choose tools")
        if not component_ids:
            raise InvalidState("Select at least one tool")
        catalog = self.require_catalog()
        tools = _unique_by_urn(
            self._lookup("tool", cid, catalog.tool) for cid in component_ids
        )
        self._state.tools = tools
        self._recompute_servers()
        self._advance(WizardStep.KNOWLEDGE_BASES)

    def choose_knowledge_bases(self, component_ids: Sequence[str]) -> None:
        """Set knowledge bases. Empty selection is valid."""
        self._require(WizardStep.KNOWLEDGE_BASES, "choose knowledge bases")
        catalog = self.require_catalog()
        self._state.knowledge_bases = _unique_by_urn(
            self._lookup("knowledge base", cid, catalog.knowledge_base)
            for cid in component_ids
        )
        self._advance(WizardStep.CONTENT_GENERATION)

    # content generation

    def commit_content(self, backstory: str, system_prompt: str) -> None:
        """Write backstory and system prompt together. Repeatable during refinement."""
        self._require(WizardStep.CONTENT_GENERATION, "update generated content")
        self._state.generated_backstory = backstory
        self._state.generated_system_prompt = system_prompt

    def classify(self, text: str) -> ContentIntent:
        return classify_feedback(text, self._accept_phrases)

    def accept_content(self, now: datetime | None = None) -> AgentDocument:
        """Assemble the document and move to preview."""
        self._require(WizardStep.CONTENT_GENERATION, "accept generated content")
        document = assemble(self._state, now=now)
        self._state.final_document = document
        self._advance(WizardStep.PREVIEW)
        return document

    # preview

    def regenerate(self, now: datetime | None = None) -> AgentDocument:
        """Explicitly replace the final document with a freshly assembled one."""
        self._require(WizardStep.PREVIEW, "regenerate the document")
        document = assemble(self._state, now=now)
        self._state.final_document = document
        logger.info("Document regenerated for %s", self._state.agent_name)
        return document

    def complete(self) -> None:
        self._require(WizardStep.PREVIEW, "complete the wizard")
        self._advance(WizardStep.COMPLETE)

    def reset(self) -> None:
        """Discard the selection and restart after welcome (catalog is kept)."""
        self._state = SelectionState()
        start = WizardStep.IDENTITY if self._catalog is not None else WizardStep.WELCOME
        self._step = start
        self._history = [start]

    # internals

    def _require(self, step: WizardStep, action: str) -> None:
        if self._step != step:
            raise InvalidState(
                f"Cannot {action} in step {self._step.value!r} (expected {step.value!r})"
            )

    def _advance(self, step: WizardStep) -> None:
        if step.index <= self._step.index:
            raise InvalidState(f"Step {self._step.value!r} cannot move to {step.value!r}")
        logger.info("Wizard step %s -> %s", self._step.value, step.value)
        self._step = step
        self._history.append(step)

    def _recompute_servers(self) -> None:
        catalog = self.require_catalog()
        self._state.auto_included_servers = resolve_required_servers(
            self._state.tools, catalog.components.mcp_servers
        )
        logger.info(
            "Resolved %d server(s) for %d tool(s)",
            len(self._state.auto_included_servers),
            len(self._state.tools),
        )

    @staticmethod
    def _lookup(kind: str, component_id: str, finder: Callable[[str], R | None]) -> R:
        record = finder(component_id)
        if record is None:
            raise NotFound(kind, component_id)
        return record


def _unique_by_urn(records: Iterable[R]) -> list[R]:
    """First occurrence wins. Records without a URN are keyed by id."""
    out: list[R] = []
    seen: set[str] = set()
    for r in records:
        key = r.urn or f"id:{r.id}"
        if key not in seen:
            seen.add(key)
            out.append(r)
    return out
