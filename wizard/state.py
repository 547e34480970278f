"""Selection state collected during the builder wizard."""

from dataclasses import dataclass, field

from core.catalog.models import KnowledgeBase, LLMProfile, MCPServer, Persona, Tool
from core.llm.protocol import ChatContext
from wizard.document import AgentDocument

IDENTITY_FIELDS = ("agent_name", "display_name", "goal")


@dataclass
class SelectionState:
    """Mutable record of what the user has chosen so far. Owned by WizardMachine."""

    agent_name: str = ""
    display_name: str = ""
    goal: str = ""
    persona: Persona | None = None
    llm_profile: LLMProfile | None = None
    tools: list[Tool] = field(default_factory=list)
    knowledge_bases: list[KnowledgeBase] = field(default_factory=list)
    # Derived from tools; recomputed wholesale by the machine, never set directly
    auto_included_servers: list[MCPServer] = field(default_factory=list)
    generated_backstory: str = ""
    generated_system_prompt: str = ""
    final_document: AgentDocument | None = None

    def next_identity_field(self) -> str | None:
        """First identity field still unset, or None when all three are set."""
        for name in IDENTITY_FIELDS:
            if not getattr(self, name):
                return name
        return None

    def context(self, step: str) -> ChatContext:
        """Snapshot passed to the conversation assistant."""
        return ChatContext(
            agent_name=self.agent_name,
            display_name=self.display_name,
            goal=self.goal,
            persona=self.persona,
            tools=tuple(self.tools),
            knowledge_bases=tuple(self.knowledge_bases),
            current_step=step,
        )
