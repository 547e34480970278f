"""Shared terminal styling and output helpers for the builder wizard."""

from questionary import Style

from wizard.session import ChatMessage

STYLE = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green bold"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("instruction", "fg:gray italic"),
    ]
)


def show(message: ChatMessage) -> None:
    """Print a bot message with a blank line around it."""
    if message.content:
        print(f"\n{message.content}\n")


def show_block(title: str, body: str) -> None:
    """Print a titled, indented block (backstory, system prompt, YAML)."""
    print(f"── {title} " + "─" * max(0, 60 - len(title)))
    for line in body.splitlines() or [""]:
        print(f"  {line}")
    print()
