"""Registry mapping command names to commands."""

import logging
from typing import Iterable, Optional

from bob.commands.base import Command, MessageSender
from bob.commands.parser import CommandParser
from bob.exceptions import BobError

logger = logging.getLogger(__name__)

HELP_COMMAND = "help"
USAGE_KEYWORD = "usage"


class CommandRegistry:
    """Looks up commands by name and runs them on behalf of a chat message."""

    def __init__(self, commands: Iterable[Command] = (), parser: Optional[CommandParser] = None):
        self.parser = parser or CommandParser()
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        """Add a command.

        Raises:
            ValueError: If the name is taken or reserved
        """
        name = command.name.lower()
        if name == HELP_COMMAND:
            raise ValueError(f"`{HELP_COMMAND}` is reserved")
        if name in self._commands:
            raise ValueError(f"Command `{name}` already registered")
        self._commands[name] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name.lower())

    @property
    def names(self) -> list[str]:
        return sorted(self._commands)

    def help_text(self, name: Optional[str] = None) -> str:
        """Usage of one command, or the list of all commands."""
        if name:
            command = self.get(name)
            if command is None:
                return f"Unknown command `{name}`. Type `{HELP_COMMAND}` for available commands."
            return command.usage

        lines = ["Available commands:"]
        lines.extend(f"• `{n}`" for n in self.names)
        lines.append(f"Type `{HELP_COMMAND} {{command}}` or `{{command}} {USAGE_KEYWORD}` for details.")
        return "\n".join(lines)

    async def handle(self, text: str, sender: MessageSender) -> bool:
        """Parse ``text`` and dispatch it.

        Returns:
            False if the text held no command
        """
        parsed = self.parser.parse(text)
        if parsed is None:
            return False
        await self.dispatch(parsed.name, parsed.parameters, sender)
        return True

    async def dispatch(self, name: str, parameters: list[str], sender: MessageSender) -> None:
        """Run a command, replying with the error if it is rejected.

        Failures raised before a command starts its remote calls
        (configuration, parameters) are turned into the single reply here.
        """
        if name.lower() == HELP_COMMAND:
            await sender.send(self.help_text(parameters[0] if parameters else None))
            return

        command = self.get(name)
        if command is None:
            logger.info(f"Unknown command: {name}")
            await sender.send(f"Unknown command `{name}`. Type `{HELP_COMMAND}` for available commands.")
            return

        if parameters == [USAGE_KEYWORD]:
            await sender.send(command.usage)
            return

        logger.info(
            f"AUDIT: Executing command - {command.name}",
            extra={
                "event_type": "command_executed",
                "command": command.name,
                "command_args": " ".join(parameters),
            },
        )
        try:
            await command.execute(parameters, sender)
        except BobError as e:
            logger.warning(f"Command {command.name} rejected: {e}")
            await sender.send(str(e))
        except Exception as e:
            logger.exception(f"Command {command.name} crashed")
            await sender.send(f"Command failed with error ```{e}```")
