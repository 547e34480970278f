"""Entry point: python -m wizard. Exit codes in wizard.constants."""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from core.logging_config import setup_logging
from core.settings import load_settings
from wizard.constants import WIZARD_QUIT, WIZARD_SUCCESS
from wizard.runner import run_wizard


def main() -> int:
    """Run the builder wizard. Returns process exit code."""
    project_root = Path.cwd()
    load_dotenv(project_root / ".env")
    settings = load_settings(project_root / "config")
    setup_logging(project_root, settings)

    print("\nAgent Builder Wizard: AI-assisted Agent CRD configuration\n")
    try:
        result = asyncio.run(run_wizard(project_root, settings))
        if result.exit_code == WIZARD_SUCCESS:
            print("\nDone! Your agent configuration is ready.\n")
        elif result.exit_code == WIZARD_QUIT:
            print("\nWizard cancelled.")
        return result.exit_code

    except KeyboardInterrupt:
        print("\n\nWizard cancelled.")
        return WIZARD_QUIT


if __name__ == "__main__":
    sys.exit(main())
