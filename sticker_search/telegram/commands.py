"""Bot command parsing."""

from __future__ import annotations

from dataclasses import dataclass

from sticker_search.telegram import strings

# Command name -> description shown by /help. Commands without a
# description are accepted but not advertised.
COMMANDS: dict[str, str | None] = {
    "tag": "tag a sticker with text description",
    "register": "register self as a tagger",
    "allow": "allow a user to tag",
    "help": "get help message",
    "untag": "remove a tag from a sticker",
    "listtags": "list all tags associated with a sticker",
    "start": None,
}


@dataclass(frozen=True)
class Command:
    """A parsed bot command."""

    name: str
    text: str = ""

    @property
    def args(self) -> list[str]:
        return self.text.split()


def parse_command(text: str | None, bot_username: str | None = None) -> Command | None:
    """Parse ``/name[@bot] rest`` into a Command.

    Args:
        text: Raw message text.
        bot_username: This bot's username. Commands explicitly addressed to
            another bot are ignored.

    Returns:
        The command, or None if the text isn't one of our commands.
    """
    if not text or not text.startswith("/"):
        return None

    parts = text[1:].split(maxsplit=1)
    if not parts or text[1].isspace():
        return None
    head = parts[0]
    rest = parts[1] if len(parts) > 1 else ""

    name, _, target = head.partition("@")
    if target and (bot_username is None or target.lower() != bot_username.lower()):
        return None

    name = name.lower()
    if name not in COMMANDS:
        return None

    return Command(name=name, text=rest.strip())


def help_text() -> str:
    """Render the /help reply."""
    lines = [f"/{name} - {desc}" for name, desc in COMMANDS.items() if desc]
    return f"{strings.HELP_INTRO}\n\nCommands:\n" + "\n".join(lines)
