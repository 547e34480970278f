"""Agent CRD builder wizard: state machine, resolver, assembler, interactive session."""

from wizard.assembler import assemble
from wizard.constants import WIZARD_CATALOG_UNAVAILABLE, WIZARD_QUIT, WIZARD_SUCCESS, WizardStep
from wizard.document import AgentDocument
from wizard.machine import WizardMachine
from wizard.resolver import resolve_required_servers
from wizard.state import SelectionState

__all__ = [
    "AgentDocument",
    "SelectionState",
    "WIZARD_CATALOG_UNAVAILABLE",
    "WIZARD_QUIT",
    "WIZARD_SUCCESS",
    "WizardMachine",
    "WizardStep",
    "assemble",
    "resolve_required_servers",
]
