"""Accept/refine classification of free text in the content-generation step.

Substring heuristic, not an intent parser: "that works, continue" is an accept
because it contains "continue"; phrasings like "ship it" fall through to refine.
"""

from collections.abc import Iterable
from enum import StrEnum

DEFAULT_ACCEPT_PHRASES: tuple[str, ...] = ("looks good", "proceed", "continue")


class ContentIntent(StrEnum):
    ACCEPT = "accept"
    REFINE = "refine"


def classify_feedback(
    text: str, accept_phrases: Iterable[str] = DEFAULT_ACCEPT_PHRASES
) -> ContentIntent:
    """Case-insensitive containment of any accept phrase => ACCEPT, else REFINE."""
    lower = text.lower()
    for phrase in accept_phrases:
        if phrase and phrase.lower() in lower:
            return ContentIntent.ACCEPT
    return ContentIntent.REFINE
