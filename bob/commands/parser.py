"""Chat command parser."""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ParsedCommand:
    """Parsed chat command."""

    name: str
    parameters: list[str] = field(default_factory=list)
    raw: str = ""


class CommandParser:
    """Splits chat text into a command name and parameter tokens."""

    # Default slash command prefix
    DEFAULT_PREFIX = "/bob"

    def __init__(self, prefix: str = DEFAULT_PREFIX):
        self.prefix = prefix

    def parse(self, text: str) -> Optional[ParsedCommand]:
        """Parse a chat message or slash command.

        Args:
            text: Raw text (e.g., "/bob bump -b release" or "bump -b release")

        Returns:
            ParsedCommand or None if there is no command in the text
        """
        if not text or not text.strip():
            return None

        text = text.strip()

        # Drop the prefix if present ("/bob bump" or "bob bump")
        pattern = rf"^/?{re.escape(self.prefix.lstrip('/'))}(?:\s+|$)"
        text = re.sub(pattern, "", text, count=1, flags=re.IGNORECASE)
        if text.startswith("/"):
            text = text[1:]

        tokens = text.split()
        if not tokens:
            return None

        return ParsedCommand(name=tokens[0].lower(), parameters=tokens[1:], raw=text)
