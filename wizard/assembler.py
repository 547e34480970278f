"""Assemble the Agent custom resource from a completed selection.

Pure transform over in-memory records: no network or disk I/O. Given identical
selection and timestamp, output is identical (golden-file friendly).
"""

import copy
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from core.errors import IncompleteSelection
from wizard import policies
from wizard.document import AgentDocument
from wizard.state import SelectionState

API_VERSION = "agents.enterprise.com/v1alpha9"
SCHEMA_VERSION = "v1alpha9"
KIND = "Agent"
NAMESPACE = "agent-workspace"
AGENT_VERSION = "1.0.0"
FALLBACK_ROLE = "Agent"


def agent_urn(agent_name: str) -> str:
    return f"urn:enterprise:agent:{agent_name}:v1"


def format_timestamp(ts: datetime) -> str:
    """RFC 3339 UTC with millisecond precision and Z suffix."""
    utc = ts.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _BlockBuilder:
    """Ordered mapping that only takes blocks whose guard holds."""

    def __init__(self) -> None:
        self._blocks: dict[str, Any] = {}

    def add(self, key: str, value: Any) -> "_BlockBuilder":
        self._blocks[key] = value
        return self

    def add_if(
        self, guard: bool, key: str, value: Callable[[], Any]
    ) -> "_BlockBuilder":
        if guard:
            self._blocks[key] = value()
        return self

    def build(self) -> dict[str, Any]:
        return dict(self._blocks)


def assemble(selection: SelectionState, now: datetime | None = None) -> AgentDocument:
    """Build the Agent document. Raises IncompleteSelection without persona and LLM profile."""
    persona = selection.persona
    llm_profile = selection.llm_profile
    if persona is None or llm_profile is None:
        missing = [
            name
            for name, value in (("persona", persona), ("llmProfile", llm_profile))
            if value is None
        ]
        raise IncompleteSelection(f"Cannot assemble without {', '.join(missing)}")

    stamp = format_timestamp(now or datetime.now(timezone.utc))
    persona_tpl = persona.persona_template
    llm_tpl = llm_profile.llm_template
    servers = selection.auto_included_servers
    tools = selection.tools
    kbs = selection.knowledge_bases

    spec = (
        _BlockBuilder()
        .add("schemaVersion", SCHEMA_VERSION)
        .add(
            "identity",
            {
                "urn": agent_urn(selection.agent_name),
                "displayName": selection.display_name,
                "version": AGENT_VERSION,
                "createdAt": stamp,
                "updatedAt": stamp,
            },
        )
        .add("context", {"environment": "dev", "lifecycle": "dev"})
        .add(
            "ownership",
            {
                "organization": "Enterprise",
                "team": "Agent Development",
                "user": "agent-builder",
            },
        )
        .add("role", persona.agent_type or FALLBACK_ROLE)
        .add("goal", selection.goal)
        .add("backstory", selection.generated_backstory)
        .add("systemPrompt", selection.generated_system_prompt)
        .add_if(persona_tpl is not None, "persona", lambda: _copy(persona_tpl))
        .add_if(llm_tpl is not None, "llm", lambda: _copy(llm_tpl))
        .add_if(
            bool(servers),
            "mcpServers",
            lambda: [_copy(s.template) for s in servers],
        )
        .add_if(bool(tools), "tools", lambda: [_copy(t.tool_template) for t in tools])
        .add_if(
            bool(kbs),
            "knowledgeBases",
            lambda: [_copy(kb.kb_template) for kb in kbs],
        )
        .add("behavior", policies.default_behavior())
        .add_if(bool(kbs), "rag", policies.default_rag)
        .add("security", policies.default_security())
        .add("ops", policies.default_ops())
        .add("telemetry", policies.default_telemetry())
        .build()
    )

    return AgentDocument(
        {
            "apiVersion": API_VERSION,
            "kind": KIND,
            "metadata": {"name": selection.agent_name, "namespace": NAMESPACE},
            "spec": spec,
            "status": {
                "phase": "Pending",
                "conditions": [
                    {
                        "type": "Ready",
                        "status": "Unknown",
                        "lastTransitionTime": stamp,
                        "reason": "AgentCreated",
                        "message": "Agent has been created and is pending deployment",
                    }
                ],
            },
        }
    )


def _copy(value: Any) -> Any:
    """Deep copy of a template body; the document never aliases catalog records."""
    return copy.deepcopy(value)
