"""Startup checks: is the assistant usable, and does the catalog source look sane.

Neither check is fatal; the wizard runs in basic mode without an assistant and
reports catalog problems when it actually tries to load.
"""

from pathlib import Path
from typing import Any, Callable

from core import secrets
from core.llm.assistant import is_usable_key


def check_assistant(
    settings: dict[str, Any],
    secrets_getter: Callable[[str], str | None] | None = None,
) -> tuple[bool, str]:
    """Returns (ok, reason). ok is False when no usable API key is configured."""
    cfg = settings.get("assistant") or {}
    if cfg.get("api_key_literal"):
        return True, "ok"
    secret = cfg.get("api_key_secret")
    if not secret:
        return False, "assistant.api_key_secret not set"
    getter = secrets_getter or secrets.get_secret
    if not is_usable_key(getter(str(secret))):
        return False, f"{secret} is not set (keyring or environment)"
    return True, "ok"


def check_catalog_source(settings: dict[str, Any], project_root: Path) -> tuple[bool, str]:
    """Returns (ok, reason) for the configured catalog location."""
    cfg = settings.get("catalog") or {}
    local = cfg.get("path")
    if local:
        root = Path(local)
        if not root.is_absolute():
            root = project_root / root
        index = root / str(cfg.get("index_file", "catalog-index.json"))
        if not index.exists():
            return False, f"Catalog index not found: {index}"
        return True, "ok"
    base_url = str(cfg.get("base_url") or "")
    if not base_url.startswith(("http://", "https://")):
        return False, "catalog.base_url must be an http(s) URL"
    return True, "ok"
