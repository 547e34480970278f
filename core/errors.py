"""Error kinds surfaced by the builder core.

Selection errors are recoverable (caller re-prompts, state unchanged).
IncompleteSelection is a contract violation. CatalogUnavailable is fatal to the session.
"""


class WizardError(Exception):
    """Base for all builder errors."""


class CatalogUnavailable(WizardError):
    """Catalog could not be fetched or returned malformed data."""


class InvalidState(WizardError):
    """Operation not accepted in the current step, or input empty/invalid."""


class NotFound(WizardError):
    """Referenced component id does not exist in the catalog."""

    def __init__(self, kind: str, component_id: str) -> None:
        super().__init__(f"Unknown {kind} id {component_id!r}")
        self.kind = kind
        self.component_id = component_id


class IncompleteSelection(WizardError):
    """Assembly attempted before persona and LLM profile are set."""


class GenerationFailed(WizardError):
    """Conversation assistant call failed, timed out or returned nothing."""


class SessionClosed(WizardError):
    """Session was abandoned while an external call was pending; result discarded."""
