"""Catalog records: Pydantic models for catalog-index.json and resolved templates.

Catalog JSON is camelCase; fields are snake_case with camelCase aliases.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ComponentRecord(_CatalogModel):
    """Fields shared by every component kind."""

    id: str
    file: str
    urn: str = ""
    display_name: str
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    # Populated by CatalogProvider after the template pass
    template: dict[str, Any] | None = None

    def _template_section(self, key: str) -> dict[str, Any] | None:
        if not self.template:
            return None
        section = self.template.get(key)
        return section if isinstance(section, dict) else None


class MCPServer(ComponentRecord):
    category: str = ""


class Tool(ComponentRecord):
    depends_on_server: str = ""
    category: str = ""

    @property
    def tool_template(self) -> dict[str, Any] | None:
        return self._template_section("toolTemplate")


class KnowledgeBase(ComponentRecord):
    type: str = ""
    category: str = ""

    @property
    def kb_template(self) -> dict[str, Any] | None:
        return self._template_section("kbTemplate")


class LLMProfile(ComponentRecord):
    temperature: float = 0.7
    use_case: str = ""

    @property
    def llm_template(self) -> dict[str, Any] | None:
        return self._template_section("llmTemplate")


class Persona(ComponentRecord):
    domain: str = ""
    tone: str = ""

    @property
    def persona_template(self) -> dict[str, Any] | None:
        return self._template_section("personaTemplate")

    @property
    def agent_type(self) -> str | None:
        tpl = self.persona_template or {}
        value = tpl.get("agentType")
        return str(value) if value else None

    @property
    def topics(self) -> list[str]:
        tpl = self.persona_template or {}
        return [str(t) for t in tpl.get("topics") or []]


class CatalogComponents(_CatalogModel):
    """Per-kind component lists in catalog declaration order."""

    mcp_servers: list[MCPServer] = Field(default_factory=list)
    tools: list[Tool] = Field(default_factory=list)
    knowledge_bases: list[KnowledgeBase] = Field(default_factory=list)
    llm_profiles: list[LLMProfile] = Field(default_factory=list)
    personas: list[Persona] = Field(default_factory=list)


class CatalogIndex(_CatalogModel):
    """Root of catalog-index.json."""

    version: str = ""
    last_updated: str = ""
    description: str = ""
    components: CatalogComponents = Field(default_factory=CatalogComponents)
    statistics: dict[str, int] = Field(default_factory=dict)

    def persona(self, component_id: str) -> Persona | None:
        return next((p for p in self.components.personas if p.id == component_id), None)

    def llm_profile(self, component_id: str) -> LLMProfile | None:
        return next(
            (p for p in self.components.llm_profiles if p.id == component_id), None
        )

    def tool(self, component_id: str) -> Tool | None:
        return next((t for t in self.components.tools if t.id == component_id), None)

    def knowledge_base(self, component_id: str) -> KnowledgeBase | None:
        return next(
            (kb for kb in self.components.knowledge_bases if kb.id == component_id),
            None,
        )

    def integrity_problems(self) -> list[str]:
        """Tool -> server references that do not resolve. Empty when consistent."""
        server_urns = {s.urn for s in self.components.mcp_servers}
        problems: list[str] = []
        for tool in self.components.tools:
            if tool.depends_on_server and tool.depends_on_server not in server_urns:
                problems.append(
                    f"Tool {tool.id!r} depends on unknown server {tool.depends_on_server!r}"
                )
        return problems
