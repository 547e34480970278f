"""Tests for the interactive steps' guards (no prompts are shown when state is missing)."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from core.errors import InvalidState
from wizard.machine import WizardMachine
from wizard.steps.preview_step import run_preview_step
from wizard.steps.selection_step import (
    run_knowledge_base_step,
    run_llm_step,
    run_persona_step,
    run_tools_step,
)


def _session(machine: WizardMachine) -> MagicMock:
    session = MagicMock()
    session.machine = machine
    return session


class TestSelectionSteps:
    """Selection steps need a loaded catalog."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "step", [run_persona_step, run_llm_step, run_tools_step, run_knowledge_base_step]
    )
    async def test_without_catalog(self, step) -> None:
        with patch("wizard.steps.selection_step.questionary") as q:
            with pytest.raises(InvalidState, match="Catalog not loaded"):
                await step(_session(WizardMachine()))
        q.select.assert_not_called()
        q.checkbox.assert_not_called()


class TestPreviewStep:
    @pytest.mark.asyncio
    async def test_without_document(self, tmp_path: Path) -> None:
        with patch("wizard.steps.preview_step.questionary") as q:
            with pytest.raises(InvalidState, match="No assembled document"):
                await run_preview_step(_session(WizardMachine()), tmp_path)
        q.confirm.assert_not_called()
