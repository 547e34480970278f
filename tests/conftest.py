"""Shared catalog fixtures: a small component library in catalog-index.json shape."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from core.catalog.models import CatalogIndex

INDEX: dict[str, Any] = {
    "version": "1.2.0",
    "lastUpdated": "2025-01-15",
    "description": "Test component library",
    "components": {
        "mcpServers": [
            {
                "id": "erp-server",
                "file": "mcp-servers/erp.yaml",
                "urn": "urn:server:erp",
                "displayName": "ERP Server",
                "category": "finance",
                "tags": ["erp"],
            },
            {
                "id": "crm-server",
                "file": "mcp-servers/crm.yaml",
                "urn": "urn:server:crm",
                "displayName": "CRM Server",
                "category": "sales",
                "tags": [],
            },
        ],
        "tools": [
            {
                "id": "invoice-lookup",
                "file": "tools/invoice-lookup.yaml",
                "urn": "urn:tool:invoice-lookup",
                "displayName": "Invoice Lookup",
                "dependsOnServer": "urn:server:erp",
                "category": "finance",
                "tags": [],
                "description": "Find invoices by number",
            },
            {
                "id": "ledger-post",
                "file": "tools/ledger-post.yaml",
                "urn": "urn:tool:ledger-post",
                "displayName": "Ledger Post",
                "dependsOnServer": "urn:server:erp",
                "category": "finance",
                "tags": [],
            },
            {
                "id": "contact-search",
                "file": "tools/contact-search.yaml",
                "urn": "urn:tool:contact-search",
                "displayName": "Contact Search",
                "dependsOnServer": "urn:server:crm",
                "category": "sales",
                "tags": [],
            },
            {
                "id": "calculator",
                "file": "tools/calculator.yaml",
                "urn": "urn:tool:calculator",
                "displayName": "Calculator",
                "dependsOnServer": "",
                "category": "utility",
                "tags": [],
            },
        ],
        "knowledgeBases": [
            {
                "id": "policies-kb",
                "file": "knowledge-bases/policies.yaml",
                "urn": "urn:kb:policies",
                "displayName": "Finance Policies",
                "type": "AzureAISearch",
                "category": "finance",
                "tags": [],
            }
        ],
        "llmProfiles": [
            {
                "id": "precise",
                "file": "llm-profiles/precise.yaml",
                "displayName": "Precise",
                "temperature": 0.1,
                "useCase": "analysis",
                "tags": [],
            }
        ],
        "personas": [
            {
                "id": "finance-analyst",
                "file": "personas/finance-analyst.yaml",
                "displayName": "Finance Analyst",
                "domain": "Finance",
                "tone": "Precise",
                "tags": [],
                "description": "Reconciles accounts",
            },
            {
                "id": "bare",
                "file": "personas/bare.yaml",
                "displayName": "Bare Persona",
                "domain": "General",
                "tone": "Neutral",
                "tags": [],
            },
        ],
    },
    "statistics": {"totalComponents": 10, "mcpServers": 2, "tools": 4},
}

TEMPLATES: dict[str, dict[str, Any]] = {
    "mcp-servers/erp.yaml": {
        "identity": {"urn": "urn:server:erp", "displayName": "ERP Server"},
        "url": "https://erp.enterprise.com/mcp",
        "protocol": "streamable-http",
        "authentication": {"type": "oauth2"},
    },
    "mcp-servers/crm.yaml": {
        "identity": {"urn": "urn:server:crm", "displayName": "CRM Server"},
        "url": "https://crm.enterprise.com/mcp",
        "protocol": "sse",
        "authentication": {"type": "apiKey"},
    },
    "tools/invoice-lookup.yaml": {
        "toolTemplate": {
            "identity": {"urn": "urn:tool:invoice-lookup"},
            "name": "invoice_lookup",
            "description": "Find invoices by number",
            "mcp": {"serverRef": {"urn": "urn:server:erp"}, "toolName": "invoices.get"},
        }
    },
    "tools/ledger-post.yaml": {
        "toolTemplate": {
            "identity": {"urn": "urn:tool:ledger-post"},
            "name": "ledger_post",
            "description": "Post a ledger entry",
            "mcp": {"serverRef": {"urn": "urn:server:erp"}, "toolName": "ledger.post"},
        }
    },
    "tools/contact-search.yaml": {
        "toolTemplate": {
            "identity": {"urn": "urn:tool:contact-search"},
            "name": "contact_search",
            "description": "Search contacts",
            "mcp": {"serverRef": {"urn": "urn:server:crm"}, "toolName": "contacts.search"},
        }
    },
    "tools/calculator.yaml": {
        "toolTemplate": {
            "identity": {"urn": "urn:tool:calculator"},
            "name": "calculator",
            "description": "Arithmetic",
            "mcp": {"serverRef": {"urn": ""}, "toolName": "calc"},
        }
    },
    "knowledge-bases/policies.yaml": {
        "kbTemplate": {
            "identity": {"urn": "urn:kb:policies", "name": "policies"},
            "type": "AzureAISearch",
            "connection": {"endpoint": "https://search.enterprise.com", "index": "policies"},
        }
    },
    "llm-profiles/precise.yaml": {
        "llmTemplate": {
            "provider": "azure-openai",
            "model": "gpt-4o",
            "parameters": {"temperature": 0.1, "topP": 0.9, "maxTokens": 4096},
        }
    },
    "personas/finance-analyst.yaml": {
        "personaTemplate": {
            "agentType": "FinanceAgent",
            "tone": "precise",
            "topics": ["invoices", "reconciliation"],
        }
    },
    "personas/bare.yaml": {"notes": "no persona template"},
}


def _with_templates(index: dict[str, Any]) -> dict[str, Any]:
    data = copy.deepcopy(index)
    for records in data["components"].values():
        for record in records:
            record["template"] = copy.deepcopy(TEMPLATES[record["file"]])
    return data


@pytest.fixture
def catalog() -> CatalogIndex:
    """Fully resolved catalog (templates populated)."""
    return CatalogIndex.model_validate(_with_templates(INDEX))


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Catalog laid out on disk like the component library repository."""
    root = tmp_path / "library"
    root.mkdir()
    (root / "catalog-index.json").write_text(json.dumps(INDEX), encoding="utf-8")
    for rel, body in TEMPLATES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(body), encoding="utf-8")
    return root


@pytest.fixture
def index_data() -> dict[str, Any]:
    """Raw catalog-index.json content (no templates)."""
    return copy.deepcopy(INDEX)


@pytest.fixture
def template_files() -> dict[str, dict[str, Any]]:
    """Template bodies keyed by catalog-relative path."""
    return copy.deepcopy(TEMPLATES)
