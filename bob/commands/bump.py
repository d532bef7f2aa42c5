"""`bump` command: increments the build number directly on GitHub."""

import logging

from bob.clients.github import GitHub
from bob.commands.base import BRANCH_SPECIFIER, Command, MessageSender, resolve_parameters
from bob.core.app_version import (
    AppVersionProvider,
    GitHubFileAppVersionProvider,
    PlistFileParser,
    VersionUpdater,
)
from bob.core.models import Author
from bob.exceptions import Misconfigured

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "[General] Aligns version to <version>"


class BumpCommand(Command):
    """Bumps the build number in every configured plist with one commit.

    The first plist is the source of the current version; all of them are
    rewritten with the bumped value.
    """

    def __init__(
        self,
        github: GitHub,
        plist_paths: list[str],
        author: Author,
        message: str = DEFAULT_MESSAGE,
        app_version_provider: AppVersionProvider | None = None,
    ):
        """Initialize the bump command.

        Args:
            github: Client for the repository holding the plists
            plist_paths: Plist paths relative to the repository root
            author: Commit author shown on GitHub
            message: Commit message template, ``<version>`` is replaced
                with the version read before the bump
            app_version_provider: Override for where the current version
                is read from
        """
        self.github = github
        self.plist_paths = list(plist_paths)
        self.author = author
        self.message = message
        self.app_version_provider = app_version_provider
        if self.app_version_provider is None and self.plist_paths:
            self.app_version_provider = GitHubFileAppVersionProvider(
                github, self.plist_paths[0], PlistFileParser(),
            )

    @property
    def name(self) -> str:
        return "bump"

    @property
    def usage(self) -> str:
        return (
            "Bump up build number by typing `bump`. "
            f"Specify a branch by typing `{BRANCH_SPECIFIER} {{branch}}`."
        )

    async def execute(self, parameters: list[str], sender: MessageSender) -> None:
        if not self.plist_paths:
            raise Misconfigured(
                "Failed to bump. Misconfiguration of the `bump` command. Missing Plist file paths."
            )

        branch = resolve_parameters(parameters, command=self.name).branch

        await sender.send("One sec...")

        try:
            version = await self.app_version_provider.fetch_version(branch)
            bumped = version.bump()
            updater = VersionUpdater(self.plist_paths, bumped)
            message = version.commit_message(self.message)
            reference = await self.github.new_commit(updater, branch, self.author, message)
        except Exception as e:
            logger.error(f"bump on {branch} failed: {e}")
            await sender.send(f"Command failed with error ```{e}```")
            return

        logger.info(f"Bumped {branch} to {bumped.full_version} ({reference.sha[:7]})")
        await sender.send("ok")
