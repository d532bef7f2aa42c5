"""Command contract and the shared parameter resolver."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from bob.core.models import BranchName, TravisTarget
from bob.exceptions import (
    BranchRequired,
    MissingBranchArgument,
    NoParameters,
    TooManyParameters,
    UnknownTarget,
)

logger = logging.getLogger(__name__)

BRANCH_SPECIFIER = "-b"


class MessageSender(ABC):
    """Where a command sends its replies.

    ``send`` may be called more than once per invocation. Callers await
    each message before sending the next, so messages arrive in call order.
    Delivery failures are not raised back to the command.
    """

    @abstractmethod
    async def send(self, message: str) -> None:
        ...


class Command(ABC):
    """A chat command."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Keyword that invokes the command."""

    @property
    @abstractmethod
    def usage(self) -> str:
        """Help text shown by `help` and `<name> usage`."""

    @abstractmethod
    async def execute(self, parameters: list[str], sender: MessageSender) -> None:
        """Run the command.

        Parameter errors are raised before any reply is sent; failures once
        the remote calls start are reported through ``sender``.
        """


@dataclass(frozen=True)
class ResolvedParameters:
    """Target and branch picked out of the parameter tokens."""

    target: Optional[TravisTarget]
    branch: BranchName


def resolve_parameters(
    parameters: Sequence[str],
    command: str,
    targets: Sequence[TravisTarget] = (),
    default_branch: Optional[BranchName] = None,
) -> ResolvedParameters:
    """Resolve ``[<target>] [-b <branch>]`` out of the parameter tokens.

    Args:
        parameters: Tokens typed after the command name
        command: Command name, used in error messages
        targets: Configured targets. Empty means the command has no target;
            exactly one means the target name is not typed
        default_branch: Branch used when ``-b`` is absent. None makes the
            branch mandatory

    Returns:
        ResolvedParameters with the target (if any) and branch

    Raises:
        NoParameters: Several targets configured and no tokens given
        UnknownTarget: First token names no configured target
        MissingBranchArgument: ``-b`` is the last token
        BranchRequired: No ``-b`` and no default branch
        TooManyParameters: Tokens are left over
    """
    params = list(parameters)

    target = None
    if len(targets) == 1:
        target = targets[0]
    elif len(targets) > 1:
        if not params:
            raise NoParameters(command)
        target_name = params.pop(0)
        target = next((t for t in targets if t.name == target_name), None)
        if target is None:
            raise UnknownTarget(target_name)

    branch = default_branch
    if BRANCH_SPECIFIER in params:
        index = params.index(BRANCH_SPECIFIER)
        if index + 1 >= len(params):
            raise MissingBranchArgument(BRANCH_SPECIFIER)
        branch = BranchName(params[index + 1])
        del params[index:index + 2]

    if branch is None:
        raise BranchRequired()

    if params:
        raise TooManyParameters(command, params)

    return ResolvedParameters(target=target, branch=branch)
