"""Fixed policy blocks emitted into every Agent document.

Values are static defaults, independent of the user's selection.
Callers get fresh copies so a document never shares structure with these constants.
"""

import copy
from typing import Any

_BEHAVIOR: dict[str, Any] = {
    "responseFormat": {"type": "json"},
    "toolChoice": "auto",
    "reasoning": {"enabled": True, "maxReasoningTokens": 4000},
    "determinism": {"seed": 42},
    "contextWindow": {
        "maxPromptTokens": 100000,
        "truncationStrategy": "middle",
    },
}

# Only emitted when at least one knowledge base is selected
_RAG: dict[str, Any] = {
    "ingestion": {
        "chunker": "semantic",
        "chunkSize": 512,
        "chunkOverlap": 50,
        "dedupe": True,
        "schedule": "0 */6 * * *",
    },
    "embedding": {"model": "text-embedding-3-large", "dimension": 3072},
    "index": {
        "metric": "cosine",
        "hybrid": True,
        "hnsw": {"m": 16, "efConstruction": 200},
    },
    "retrieval": {
        "topK": 10,
        "mmr": True,
        "recencyBoost": True,
        "requireCitations": True,
    },
    "retention": {"ttlDays": 365, "lineage": True},
}

_SECURITY: dict[str, Any] = {
    "rbac": {"roles": ["AgentUser"]},
    "dataPolicy": {
        "classification": "Internal",
        "redactPII": True,
        "retentionDays": 365,
    },
    "egress": {"allowlist": ["*.enterprise.com"], "mtls": True},
}

_OPS: dict[str, Any] = {
    "timeouts": {"defaultMs": 30000},
    "retries": {"max": 3, "backoffMs": 1000},
    "rateLimit": {"rpm": 600, "rps": 20},
    "resources": {"cpu": "2", "memory": "4Gi"},
}

_TELEMETRY: dict[str, Any] = {
    "opentelemetry": {"enabled": True, "serviceName": "agent-service"},
    "logs": {"redaction": True},
    "metrics": ["agent_requests_total", "agent_latency", "agent_errors"],
}


def default_behavior() -> dict[str, Any]:
    return copy.deepcopy(_BEHAVIOR)


def default_rag() -> dict[str, Any]:
    return copy.deepcopy(_RAG)


def default_security() -> dict[str, Any]:
    return copy.deepcopy(_SECURITY)


def default_ops() -> dict[str, Any]:
    return copy.deepcopy(_OPS)


def default_telemetry() -> dict[str, Any]:
    return copy.deepcopy(_TELEMETRY)
