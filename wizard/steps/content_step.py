"""Content review step: show generated texts, loop on feedback until accepted."""

import questionary

from wizard.constants import WizardStep
from wizard.session import WizardSession
from wizard.ui import STYLE, show, show_block


async def run_content_step(session: WizardSession) -> bool:
    """Returns False if user cancelled, True once the document is assembled."""
    while session.machine.step == WizardStep.CONTENT_GENERATION:
        s = session.machine.selection
        show_block("Backstory", s.generated_backstory)
        show_block("System Prompt", s.generated_system_prompt)
        feedback = await questionary.text(
            'Feedback (or "looks good"):', style=STYLE
        ).ask_async()
        if feedback is None:
            return False
        if not feedback.strip():
            continue
        show(await session.submit_text(feedback))
    return True
