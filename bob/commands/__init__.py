"""Chat commands."""

from bob.commands.base import Command, MessageSender, ResolvedParameters, resolve_parameters
from bob.commands.bump import BumpCommand
from bob.commands.parser import CommandParser, ParsedCommand
from bob.commands.registry import CommandRegistry
from bob.commands.travis_script import TravisScriptCommand

__all__ = [
    "Command",
    "MessageSender",
    "ResolvedParameters",
    "resolve_parameters",
    "BumpCommand",
    "CommandParser",
    "ParsedCommand",
    "CommandRegistry",
    "TravisScriptCommand",
]
