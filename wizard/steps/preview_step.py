"""Preview step: print the Agent YAML, optionally save it, then complete."""

from pathlib import Path

import questionary

from core.errors import InvalidState
from wizard.exporter import default_filename, save_document
from wizard.session import WizardSession
from wizard.ui import STYLE, show_block


async def run_preview_step(session: WizardSession, output_dir: Path) -> bool:
    """Returns False if user cancelled before completing."""
    document = session.machine.selection.final_document
    if document is None:
        raise InvalidState("No assembled document to preview")
    show_block("Agent CRD", document.to_yaml())

    save = await questionary.confirm(
        "Save the YAML to a file?", default=True, style=STYLE
    ).ask_async()
    if save is None:
        return False
    if save:
        filename = await questionary.text(
            "File name:", default=default_filename(document), style=STYLE
        ).ask_async()
        if filename is None:
            return False
        path = save_document(document, output_dir, filename.strip() or None)
        print(f"Saved to {path}\n")

    session.complete()
    return True
