"""Wires clients and commands together from the configuration."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from bob.clients.github import GitHub
from bob.clients.travis import TravisCI
from bob.commands.bump import BumpCommand
from bob.commands.parser import CommandParser
from bob.commands.registry import CommandRegistry
from bob.commands.travis_script import TravisScriptCommand
from bob.config import BobConfig, TravisCommandConfig
from bob.core.app_version import (
    AppVersionProvider,
    GitHubFileAppVersionProvider,
    parser_for,
)
from bob.core.models import Author, BranchName, Script, TravisTarget

logger = logging.getLogger(__name__)


class UnavailableAppVersionProvider(AppVersionProvider):
    """Used when a Travis command has no version file; URLs are sent alone."""

    async def fetch_version(self, branch: BranchName):
        raise LookupError(f"No version file configured (branch {branch})")


@dataclass
class Bob:
    """Everything the server needs at runtime."""

    registry: CommandRegistry
    github: Optional[GitHub] = None
    travis: Optional[TravisCI] = None
    clients: list = field(default_factory=list)

    async def aclose(self) -> None:
        for client in self.clients:
            await client.aclose()


def _travis_command(
    cfg: TravisCommandConfig,
    travis: TravisCI,
    github: Optional[GitHub],
) -> TravisScriptCommand:
    provider: AppVersionProvider
    if cfg.version_file_path:
        provider = GitHubFileAppVersionProvider(
            github, cfg.version_file_path, parser_for(cfg.version_file_format),
        )
    else:
        provider = UnavailableAppVersionProvider()

    return TravisScriptCommand(
        name=cfg.name,
        travis=travis,
        targets=[TravisTarget(name=t.name, script=Script(t.script)) for t in cfg.targets],
        default_branch=BranchName(cfg.default_branch),
        app_version_provider=provider,
        github=github if cfg.verify_branch else None,
        poll_interval=cfg.poll.interval,
        max_poll_attempts=cfg.poll.max_attempts,
    )


def build_bob(config: BobConfig) -> Bob:
    """Create the clients and register every configured command."""
    github = None
    if config.github:
        github = GitHub(
            owner=config.github.owner,
            repo=config.github.repo,
            token=config.github.token,
            base_url=config.github.base_url,
        )

    travis = None
    if config.travis:
        travis = TravisCI(
            repo=config.travis.repo,
            token=config.travis.token,
            base_url=config.travis.base_url,
            web_url=config.travis.web_url,
        )

    registry = CommandRegistry(parser=CommandParser(prefix=config.mattermost.command_prefix))

    if config.bump is not None:
        registry.register(BumpCommand(
            github=github,
            plist_paths=config.bump.plist_paths,
            author=Author(config.bump.author_name, config.bump.author_email),
            message=config.bump.message,
        ))

    for command_cfg in config.travis_commands:
        registry.register(_travis_command(command_cfg, travis, github))

    logger.info(f"Registered commands: {', '.join(registry.names) or 'none'}")
    return Bob(
        registry=registry,
        github=github,
        travis=travis,
        clients=[c for c in (github, travis) if c is not None],
    )
