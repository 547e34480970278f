"""Identity step: agent name, display name, goal."""

import questionary

from core.errors import InvalidState
from wizard.constants import WizardStep
from wizard.session import WizardSession
from wizard.ui import STYLE, show

_PROMPTS = {
    "agent_name": "Agent name:",
    "display_name": "Display name:",
    "goal": "Primary goal:",
}


async def run_identity_step(session: WizardSession) -> bool:
    """Ask until all identity fields are set. Returns False if user cancelled."""
    while session.machine.step == WizardStep.IDENTITY:
        field = session.machine.selection.next_identity_field()
        if field is None:
            break
        answer = await questionary.text(_PROMPTS[field], style=STYLE).ask_async()
        if answer is None:
            return False
        try:
            show(await session.submit_text(answer))
        except InvalidState as e:
            print(f"{e}. Try again.\n")
    return True
