"""Tests for Agent document assembly and YAML output."""

from datetime import datetime, timedelta, timezone

import pytest
import yaml

from core.catalog.models import CatalogIndex
from core.errors import IncompleteSelection
from wizard.assembler import (
    API_VERSION,
    FALLBACK_ROLE,
    NAMESPACE,
    agent_urn,
    assemble,
    format_timestamp,
)
from wizard.document import AgentDocument
from wizard.resolver import resolve_required_servers
from wizard.state import SelectionState

NOW = datetime(2025, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)


def _selection(
    catalog: CatalogIndex,
    persona: str = "finance-analyst",
    tools: tuple[str, ...] = ("invoice-lookup",),
    kbs: tuple[str, ...] = (),
) -> SelectionState:
    state = SelectionState(
        agent_name="billing-bot",
        display_name="Billing Bot",
        goal="Answer invoice questions",
        persona=catalog.persona(persona),
        llm_profile=catalog.llm_profile("precise"),
        tools=[t for t in (catalog.tool(i) for i in tools) if t is not None],
        knowledge_bases=[k for k in (catalog.knowledge_base(i) for i in kbs) if k is not None],
        generated_backstory="Ten years reconciling ledgers.",
        generated_system_prompt="You are a FinanceAgent.",
    )
    state.auto_included_servers = resolve_required_servers(
        state.tools, catalog.components.mcp_servers
    )
    return state


class TestTimestamps:
    def test_millisecond_utc_with_z(self) -> None:
        assert format_timestamp(NOW) == "2025-03-01T12:30:45.123Z"

    def test_converts_offset_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        ts = datetime(2025, 3, 1, 14, 0, 0, tzinfo=plus_two)
        assert format_timestamp(ts) == "2025-03-01T12:00:00.000Z"


class TestAssemble:
    def test_billing_bot_document(self, catalog: CatalogIndex) -> None:
        """Tools without knowledge bases: no kb or rag blocks, one server."""
        doc = assemble(_selection(catalog), now=NOW)
        data = doc.to_dict()
        assert data["apiVersion"] == API_VERSION
        assert data["kind"] == "Agent"
        assert data["metadata"] == {"name": "billing-bot", "namespace": NAMESPACE}
        spec = data["spec"]
        assert spec["identity"]["urn"] == "urn:enterprise:agent:billing-bot:v1"
        assert spec["identity"]["createdAt"] == spec["identity"]["updatedAt"]
        assert spec["role"] == "FinanceAgent"
        assert spec["goal"] == "Answer invoice questions"
        assert spec["backstory"] == "Ten years reconciling ledgers."
        assert spec["llm"]["model"] == "gpt-4o"
        assert [s["url"] for s in spec["mcpServers"]] == ["https://erp.enterprise.com/mcp"]
        assert [t["name"] for t in spec["tools"]] == ["invoice_lookup"]
        assert "knowledgeBases" not in spec
        assert "rag" not in spec
        assert data["status"]["phase"] == "Pending"
        condition = data["status"]["conditions"][0]
        assert condition["type"] == "Ready"
        assert condition["reason"] == "AgentCreated"
        assert condition["lastTransitionTime"] == "2025-03-01T12:30:45.123Z"

    def test_key_order(self, catalog: CatalogIndex) -> None:
        doc = assemble(_selection(catalog, kbs=("policies-kb",)), now=NOW)
        data = doc.to_dict()
        assert list(data) == ["apiVersion", "kind", "metadata", "spec", "status"]
        assert list(data["spec"]) == [
            "schemaVersion",
            "identity",
            "context",
            "ownership",
            "role",
            "goal",
            "backstory",
            "systemPrompt",
            "persona",
            "llm",
            "mcpServers",
            "tools",
            "knowledgeBases",
            "behavior",
            "rag",
            "security",
            "ops",
            "telemetry",
        ]

    def test_knowledge_bases_bring_rag(self, catalog: CatalogIndex) -> None:
        doc = assemble(_selection(catalog, kbs=("policies-kb",)), now=NOW)
        assert doc.get("spec.knowledgeBases")[0]["type"] == "AzureAISearch"
        assert doc.get("spec.rag.embedding.model") == "text-embedding-3-large"

    def test_no_tools_omits_tools_and_servers(self, catalog: CatalogIndex) -> None:
        doc = assemble(_selection(catalog, tools=()), now=NOW)
        assert not doc.has("spec.tools")
        assert not doc.has("spec.mcpServers")

    def test_persona_without_template(self, catalog: CatalogIndex) -> None:
        doc = assemble(_selection(catalog, persona="bare"), now=NOW)
        assert doc.get("spec.role") == FALLBACK_ROLE
        assert not doc.has("spec.persona")

    def test_missing_persona(self, catalog: CatalogIndex) -> None:
        state = _selection(catalog)
        state.persona = None
        with pytest.raises(IncompleteSelection, match="persona"):
            assemble(state, now=NOW)

    def test_missing_llm_profile(self, catalog: CatalogIndex) -> None:
        state = _selection(catalog)
        state.llm_profile = None
        with pytest.raises(IncompleteSelection, match="llmProfile"):
            assemble(state, now=NOW)

    def test_idempotent_for_same_timestamp(self, catalog: CatalogIndex) -> None:
        state = _selection(catalog, kbs=("policies-kb",))
        assert assemble(state, now=NOW).to_yaml() == assemble(state, now=NOW).to_yaml()

    def test_only_timestamps_differ_between_runs(self, catalog: CatalogIndex) -> None:
        state = _selection(catalog)
        a = assemble(state, now=NOW).to_dict()
        b = assemble(state, now=NOW + timedelta(minutes=5)).to_dict()
        for d in (a, b):
            d["spec"]["identity"].pop("createdAt")
            d["spec"]["identity"].pop("updatedAt")
            d["status"]["conditions"][0].pop("lastTransitionTime")
        assert a == b

    def test_document_does_not_alias_catalog(self, catalog: CatalogIndex) -> None:
        state = _selection(catalog)
        doc = assemble(state, now=NOW)
        data = doc.to_dict()
        data["spec"]["tools"][0]["name"] = "mutated"
        tool = catalog.tool("invoice-lookup")
        assert tool is not None and tool.tool_template is not None
        assert tool.tool_template["name"] == "invoice_lookup"
        assert doc.get("spec.tools")[0]["name"] == "invoice_lookup"

    def test_agent_urn(self) -> None:
        assert agent_urn("x") == "urn:enterprise:agent:x:v1"


class TestDocumentYaml:
    def test_yaml_round_trips_and_keeps_order(self, catalog: CatalogIndex) -> None:
        doc = assemble(_selection(catalog, kbs=("policies-kb",)), now=NOW)
        text = doc.to_yaml()
        assert text.startswith("apiVersion: agents.enterprise.com/v1alpha9\nkind: Agent\n")
        assert yaml.safe_load(text) == doc.to_dict()

    def test_no_anchors_for_shared_objects(self) -> None:
        shared = {"a": 1}
        doc = AgentDocument({"metadata": {"name": "n"}, "x": shared, "y": shared})
        text = doc.to_yaml()
        assert "&" not in text
        assert "*" not in text

    def test_long_lines_not_wrapped(self) -> None:
        long = "word " * 60
        doc = AgentDocument({"spec": {"systemPrompt": long.strip()}})
        assert long.strip() in doc.to_yaml()

    def test_get_default_and_copy(self) -> None:
        doc = AgentDocument({"spec": {"tools": [{"name": "t"}]}})
        assert doc.get("spec.missing", "dflt") == "dflt"
        doc.get("spec.tools").append({"name": "extra"})
        assert len(doc.get("spec.tools")) == 1
        assert doc.name == ""
