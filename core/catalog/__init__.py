"""Component catalog: typed records and the provider that loads them."""

from core.catalog.models import (
    CatalogComponents,
    CatalogIndex,
    ComponentRecord,
    KnowledgeBase,
    LLMProfile,
    MCPServer,
    Persona,
    Tool,
)
from core.catalog.provider import (
    CatalogProvider,
    HttpCatalogSource,
    LocalCatalogSource,
    build_catalog_provider,
)

__all__ = [
    "CatalogComponents",
    "CatalogIndex",
    "CatalogProvider",
    "ComponentRecord",
    "HttpCatalogSource",
    "KnowledgeBase",
    "LLMProfile",
    "LocalCatalogSource",
    "MCPServer",
    "Persona",
    "Tool",
    "build_catalog_provider",
]
