"""Wizard orchestration: catalog load with retry, then each interactive step in order."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import questionary
from questionary import Choice

from core import secrets
from core.catalog.provider import build_catalog_provider
from core.config_check import check_assistant, check_catalog_source
from core.errors import CatalogUnavailable
from core.llm.assistant import build_assistant
from core.settings import get_setting
from wizard.constants import WIZARD_CATALOG_UNAVAILABLE, WIZARD_QUIT, WIZARD_SUCCESS
from wizard.session import WizardSession
from wizard.steps import (
    run_content_step,
    run_identity_step,
    run_knowledge_base_step,
    run_llm_step,
    run_persona_step,
    run_preview_step,
    run_tools_step,
)
from wizard.ui import STYLE, show

logger = logging.getLogger(__name__)


@dataclass
class WizardResult:
    """Result of running the wizard."""

    exit_code: int
    document_path: Path | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == WIZARD_SUCCESS


async def run_wizard(project_root: Path, settings: dict[str, Any]) -> WizardResult:
    """Run the full builder flow in one event loop."""
    ok, reason = check_catalog_source(settings, project_root)
    if not ok:
        print(f"Catalog source problem: {reason}")

    if not await _ensure_api_key(settings):
        return WizardResult(exit_code=WIZARD_QUIT)

    session = WizardSession(
        provider=build_catalog_provider(settings, project_root),
        assistant=build_assistant(settings, secrets.get_secret),
        accept_phrases=get_setting(settings, "wizard.accept_phrases", ["looks good"]),
    )
    try:
        code = await _start_with_retry(session)
        if code != WIZARD_SUCCESS:
            return WizardResult(exit_code=code)

        for step in (
            run_identity_step,
            run_persona_step,
            run_llm_step,
            run_tools_step,
            run_knowledge_base_step,
            run_content_step,
        ):
            if not await step(session):
                return WizardResult(exit_code=WIZARD_QUIT)

        output_dir = project_root / str(get_setting(settings, "wizard.output_dir", "output"))
        if not await run_preview_step(session, output_dir):
            return WizardResult(exit_code=WIZARD_QUIT)
        return WizardResult(exit_code=WIZARD_SUCCESS)
    finally:
        session.close()


async def _start_with_retry(session: WizardSession) -> int:
    """Load catalog; on failure offer retry until it loads or the user quits."""
    print("\nLoading component catalog...")
    try:
        show(await session.start())
        return WIZARD_SUCCESS
    except CatalogUnavailable as e:
        logger.warning("Catalog load failed: %s", e)
        print(f"\nError loading catalog: {e}")

    while True:
        choice = await questionary.select(
            "What would you like to do?",
            choices=[Choice("Retry", "retry"), Choice("Quit", "quit")],
            style=STYLE,
        ).ask_async()
        if choice != "retry":
            return WIZARD_CATALOG_UNAVAILABLE
        try:
            show(await session.retry_start())
            return WIZARD_SUCCESS
        except CatalogUnavailable as e:
            logger.warning("Catalog retry failed: %s", e)
            print(f"\nError loading catalog: {e}")


async def _ensure_api_key(settings: dict[str, Any]) -> bool:
    """Offer to enter an API key when none is configured. Returns False if user cancelled."""
    ok, reason = check_assistant(settings)
    if ok:
        return True
    secret = get_setting(settings, "assistant.api_key_secret")
    print(f"\nAssistant not configured: {reason}")
    if not secret:
        return True
    enter = await questionary.confirm(
        "Enter an API key now? (otherwise basic mode with template text)",
        default=False,
        style=STYLE,
    ).ask_async()
    if enter is None:
        return False
    if not enter:
        return True
    key = await questionary.password("API key:", style=STYLE).ask_async()
    if key is None:
        return False
    key = key.strip()
    if not key:
        return True
    if secrets.is_keyring_available() and secrets.set_secret(str(secret), key):
        print("Stored in OS keyring.\n")
    else:
        # Session-only: the key is not persisted anywhere
        settings.setdefault("assistant", {})["api_key_literal"] = key
        print("Keyring unavailable; key will be used for this session only.\n")
    return True
