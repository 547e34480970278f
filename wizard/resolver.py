"""Tool -> MCP server dependency resolution."""

from collections.abc import Iterable

from core.catalog.models import MCPServer, Tool


def resolve_required_servers(
    selected_tools: Iterable[Tool],
    all_servers: Iterable[MCPServer],
) -> list[MCPServer]:
    """Return servers referenced by the tools' dependsOnServer, in catalog order.

    Deduplicated by URN. Tools without a dependency, or whose URN is not in
    all_servers, contribute nothing. Pure: same inputs give the same list.
    """
    required = {t.depends_on_server for t in selected_tools if t.depends_on_server}
    out: list[MCPServer] = []
    seen: set[str] = set()
    for server in all_servers:
        if server.urn in required and server.urn not in seen:
            seen.add(server.urn)
            out.append(server)
    return out
