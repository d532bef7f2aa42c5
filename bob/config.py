"""Configuration loading and typed config sections."""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from bob.utils import deep_merge, env_override

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

# Environment variables holding secrets: (section, key, variable)
SECRET_ENV_VARS = [
    ("github", "token", "BOB_GITHUB_TOKEN"),
    ("travis", "token", "BOB_TRAVIS_TOKEN"),
    ("mattermost", "bot_token", "BOB_MATTERMOST_TOKEN"),
    ("mattermost", "slash_token", "BOB_SLASH_TOKEN"),
]


def _known(cls, data: Optional[dict]) -> dict:
    """Filter ``data`` to the dataclass's field names."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass
class GitHubConfig:
    """GitHub repository holding the app sources."""

    owner: str
    repo: str
    token: str = ""
    base_url: str = "https://api.github.com"

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("github.owner and github.repo are required")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["GitHubConfig"]:
        if not data:
            return None
        return cls(**_known(cls, data))


@dataclass
class TravisConfig:
    """Travis CI repository builds are triggered on."""

    repo: str
    token: str = ""
    base_url: str = "https://api.travis-ci.com"
    web_url: str = "https://app.travis-ci.com/github"

    def __post_init__(self) -> None:
        if not self.repo:
            raise ValueError("travis.repo is required")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["TravisConfig"]:
        if not data:
            return None
        return cls(**_known(cls, data))


@dataclass
class BumpConfig:
    """Settings of the `bump` command."""

    plist_paths: list[str] = field(default_factory=list)
    author_name: str = "Bob"
    author_email: str = "bob@example.com"
    message: str = "[General] Aligns version to <version>"

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["BumpConfig"]:
        if data is None:
            return None
        return cls(**_known(cls, data))


@dataclass
class PollConfig:
    """How long to wait for a triggered request to produce builds."""

    interval: float = 5.0
    max_attempts: int = 60

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("poll.interval must be > 0")
        if self.max_attempts < 1:
            raise ValueError("poll.max_attempts must be >= 1")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PollConfig":
        if not data:
            return cls()
        return cls(**_known(cls, data))


@dataclass
class TargetConfig:
    """Name typed in chat and the Travis script it runs."""

    name: str
    script: str

    def __post_init__(self) -> None:
        if not self.name or not self.script:
            raise ValueError("Each target needs a name and a script")


@dataclass
class TravisCommandConfig:
    """One Travis script command (e.g. `testflight`)."""

    name: str
    targets: list[TargetConfig]
    default_branch: str = "develop"
    verify_branch: bool = True
    version_file_path: str = ""
    version_file_format: str = "plist"
    poll: PollConfig = field(default_factory=PollConfig)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Travis command needs a name")
        if not self.targets:
            raise ValueError(f"Travis command `{self.name}` needs at least one target")

    @classmethod
    def from_dict(cls, data: dict) -> "TravisCommandConfig":
        values = _known(cls, data)
        values["targets"] = [TargetConfig(**t) for t in data.get("targets") or []]
        values["poll"] = PollConfig.from_dict(data.get("poll"))
        return cls(**values)


@dataclass
class MattermostConfig:
    """Mattermost server the replies are posted to."""

    url: str = "http://localhost:8065"
    bot_token: str = ""
    slash_token: str = ""
    command_prefix: str = "/bob"

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "MattermostConfig":
        return cls(**_known(cls, data))


@dataclass
class WebhookConfig:
    """Where the slash command server listens."""

    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "WebhookConfig":
        return cls(**_known(cls, data))


@dataclass
class BobConfig:
    """Complete Bob configuration."""

    mattermost: MattermostConfig = field(default_factory=MattermostConfig)
    webhook: WebhookConfig = field(default_factory=WebhookConfig)
    github: Optional[GitHubConfig] = None
    travis: Optional[TravisConfig] = None
    bump: Optional[BumpConfig] = None
    travis_commands: list[TravisCommandConfig] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.bump is not None and self.github is None:
            raise ValueError("bump needs a github section")
        if self.travis_commands and self.travis is None:
            raise ValueError("travis_commands need a travis section")
        for command in self.travis_commands:
            if command.version_file_path and self.github is None:
                raise ValueError(
                    f"Travis command `{command.name}` reads the app version from GitHub "
                    "but no github section is configured"
                )

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "BobConfig":
        data = data or {}
        return cls(
            mattermost=MattermostConfig.from_dict(data.get("mattermost")),
            webhook=WebhookConfig.from_dict(data.get("webhook")),
            github=GitHubConfig.from_dict(data.get("github")),
            travis=TravisConfig.from_dict(data.get("travis")),
            bump=BumpConfig.from_dict(data.get("bump")),
            travis_commands=[
                TravisCommandConfig.from_dict(c) for c in data.get("travis_commands") or []
            ],
        )


def load_config(path: str = DEFAULT_CONFIG_PATH, environ: Optional[dict[str, Any]] = None) -> BobConfig:
    """Load the YAML config, merging ``<name>.local.yaml`` and secret env vars over it.

    Args:
        path: Path to the YAML configuration file
        environ: Environment to read secrets from (defaults to os.environ)

    Returns:
        Parsed BobConfig

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ValueError: If a section is invalid
    """
    environ = os.environ if environ is None else environ

    with open(path) as f:
        cfg = yaml.safe_load(f) or {}

    # Allow local overrides
    local = Path(path).with_suffix(".local.yaml")
    if local.exists():
        with open(local) as f:
            local_cfg = yaml.safe_load(f) or {}
        deep_merge(cfg, local_cfg)
        logger.info(f"Merged local overrides from {local}")

    for section, key, env_name in SECRET_ENV_VARS:
        # Secrets never create a section on their own, except for Mattermost
        if section not in cfg and section != "mattermost":
            continue
        if not cfg.get(section):
            cfg[section] = {}
        env_override(cfg[section], key, env_name, environ)

    return BobConfig.from_dict(cfg)
