"""Catalog provider: fetch catalog-index.json and component templates, with an in-memory cache.

Two sources share one layout: an HTTP root (raw GitHub) or a local directory.
Every transport, parse or validation failure surfaces as CatalogUnavailable.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol, Sequence, TypeVar

import httpx
import yaml
from pydantic import ValidationError

from core.catalog.models import CatalogIndex, ComponentRecord
from core.errors import CatalogUnavailable

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ComponentRecord)

DEFAULT_INDEX_FILE = "catalog-index.json"
DEFAULT_MAX_CONCURRENCY = 8


class CatalogSource(Protocol):
    """Reads raw text for a path relative to the catalog root."""

    async def read_text(self, rel_path: str) -> str: ...

    async def aclose(self) -> None: ...


class HttpCatalogSource:
    """Catalog served over HTTP (e.g. raw.githubusercontent.com).

    One pooled AsyncClient is opened on first read and kept until aclose().
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_connections: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections,
        )
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, limits=self._limits)
        return self._client

    async def read_text(self, rel_path: str) -> str:
        url = f"{self._base_url}/{rel_path.lstrip('/')}"
        resp = await self._get_client().get(url)
        if resp.status_code >= 400:
            raise CatalogUnavailable(
                f"Failed to fetch {rel_path}: HTTP {resp.status_code} {resp.reason_phrase}"
            )
        return resp.text

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()


class LocalCatalogSource:
    """Catalog checked out to a local directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    async def read_text(self, rel_path: str) -> str:
        path = self._root / rel_path
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise CatalogUnavailable(f"Failed to read {rel_path}: {e}") from e

    async def aclose(self) -> None:
        pass


class CatalogProvider:
    """Loads the catalog index, then resolves every component's template in a second pass.

    At most max_concurrency reads are in flight at once, and each distinct template
    file is read once per load even when several records share it.
    """

    def __init__(
        self,
        source: CatalogSource,
        index_file: str = DEFAULT_INDEX_FILE,
        strict_integrity: bool = False,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._source = source
        self._index_file = index_file
        self._strict = strict_integrity
        self._cache: dict[str, Any] = {}
        self._limit = asyncio.Semaphore(max(1, max_concurrency))

    async def fetch_index(self) -> CatalogIndex:
        """Fetch and validate catalog-index.json (cached)."""
        cached = self._cache.get(self._index_file)
        if isinstance(cached, CatalogIndex):
            return cached
        text = await self._read(self._index_file)
        try:
            index = CatalogIndex.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise CatalogUnavailable(f"Malformed catalog index: {e}") from e
        self._cache[self._index_file] = index
        return index

    async def fetch_template(self, rel_path: str) -> dict[str, Any]:
        """Fetch and parse one YAML template (cached by path)."""
        if rel_path in self._cache:
            logger.debug("Template cache hit: %s", rel_path)
            return self._cache[rel_path]
        text = await self._read(rel_path)
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CatalogUnavailable(f"Malformed template {rel_path}: {e}") from e
        if not isinstance(data, dict):
            raise CatalogUnavailable(f"Template must be a YAML object: {rel_path}")
        self._cache[rel_path] = data
        return data

    async def load_templates(self, records: Sequence[R]) -> list[R]:
        """Return copies of records with template populated, order preserved."""
        templates = await self._fetch_all([r.file for r in records])
        return _with_templates(records, templates)

    async def load(self) -> CatalogIndex:
        """Load the full catalog: index plus all five kinds' templates.

        The source is closed when the pass ends, whether or not it succeeded.
        """
        try:
            index = await self.fetch_index()
            c = index.components
            kinds = (c.mcp_servers, c.tools, c.knowledge_bases, c.llm_profiles, c.personas)
            templates = await self._fetch_all([r.file for records in kinds for r in records])
        finally:
            await self._source.aclose()
        servers, tools, kbs, profiles, personas = (
            _with_templates(records, templates) for records in kinds
        )
        full = index.model_copy(
            update={
                "components": c.model_copy(
                    update={
                        "mcp_servers": servers,
                        "tools": tools,
                        "knowledge_bases": kbs,
                        "llm_profiles": profiles,
                        "personas": personas,
                    }
                )
            }
        )
        problems = full.integrity_problems()
        for problem in problems:
            logger.warning("Catalog integrity: %s", problem)
        if problems and self._strict:
            raise CatalogUnavailable(
                f"Catalog failed integrity check ({len(problems)} problem(s))"
            )
        logger.info(
            "Catalog %s loaded: %d servers, %d tools, %d knowledge bases, "
            "%d LLM profiles, %d personas",
            full.version or "(unversioned)",
            len(servers),
            len(tools),
            len(kbs),
            len(profiles),
            len(personas),
        )
        return full

    def clear_cache(self) -> None:
        """Drop cached index and templates (next load refetches)."""
        self._cache.clear()

    async def aclose(self) -> None:
        """Release the source's connections (reopened lazily on the next read)."""
        await self._source.aclose()

    async def _fetch_all(self, paths: list[str]) -> dict[str, dict[str, Any]]:
        """Fetch each distinct path once. On the first failure the remaining fetches are cancelled."""
        unique = list(dict.fromkeys(paths))
        tasks = [asyncio.ensure_future(self.fetch_template(p)) for p in unique]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return dict(zip(unique, results))

    async def _read(self, rel_path: str) -> str:
        try:
            async with self._limit:
                return await self._source.read_text(rel_path)
        except httpx.TimeoutException as e:
            raise CatalogUnavailable(f"Timeout fetching {rel_path}") from e
        except httpx.HTTPError as e:
            raise CatalogUnavailable(f"Failed to fetch {rel_path}: {e}") from e


def _with_templates(records: Sequence[R], templates: dict[str, dict[str, Any]]) -> list[R]:
    return [r.model_copy(update={"template": templates[r.file]}) for r in records]


def build_catalog_provider(settings: dict[str, Any], project_root: Path) -> CatalogProvider:
    """Build a provider from the `catalog` settings section. Local path wins over base_url."""
    cfg = settings.get("catalog") or {}
    max_concurrency = int(cfg.get("max_concurrency", DEFAULT_MAX_CONCURRENCY))
    local = cfg.get("path")
    source: CatalogSource
    if local:
        root = Path(local)
        if not root.is_absolute():
            root = project_root / root
        source = LocalCatalogSource(root)
    else:
        source = HttpCatalogSource(
            str(cfg.get("base_url", "")),
            timeout=float(cfg.get("timeout", 10.0)),
            max_connections=max_concurrency,
        )
    return CatalogProvider(
        source,
        index_file=str(cfg.get("index_file", DEFAULT_INDEX_FILE)),
        strict_integrity=bool(cfg.get("strict_integrity", False)),
        max_concurrency=max_concurrency,
    )
