"""Value types shared by the commands and the remote clients."""

import plistlib
import re
from dataclasses import dataclass, field, replace
from typing import Optional

from bob.exceptions import MalformedVersion, MissingBuildNumber

VERSION_PLACEHOLDER = "<version>"

# 1.2.3 (45), 1.2.3+45, 1.2 (45), 1.2.3
_VERSION_RE = re.compile(
    r"^\s*(\d+)\.(\d+)(?:\.(\d+))?(?:\s*\((\d+)\)|\+(\d+))?\s*$"
)


@dataclass(frozen=True)
class BranchName:
    """Name of a branch on the source-control host."""

    name: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Branch name must not be empty")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Version:
    """Semantic app version with an optional build number."""

    major: int
    minor: int
    patch: int = 0
    build: Optional[int] = None
    # Short version text as read from a plist, e.g. "1.2"; written back unchanged
    short_version: Optional[str] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise ValueError("Version components must be non-negative")
        if self.build is not None and self.build < 0:
            raise ValueError("Build number must be non-negative")

    @classmethod
    def parse(cls, raw: str) -> "Version":
        """Parse ``M.m[.p]`` with an optional `` (B)`` or ``+B`` build suffix.

        Raises:
            MalformedVersion: If the text does not match
        """
        match = _VERSION_RE.match(raw or "")
        if not match:
            raise MalformedVersion(raw)
        major, minor, patch, build_paren, build_plus = match.groups()
        build = build_paren or build_plus
        return cls(
            major=int(major),
            minor=int(minor),
            patch=int(patch) if patch is not None else 0,
            build=int(build) if build is not None else None,
        )

    @classmethod
    def from_plist_content(cls, content: str) -> "Version":
        """Read the version out of an Info.plist document.

        ``CFBundleShortVersionString`` holds the marketing version and
        ``CFBundleVersion`` the build number.
        """
        try:
            info = plistlib.loads(content.encode("utf-8"))
        except Exception as e:
            raise MalformedVersion(content[:80]) from e
        if not isinstance(info, dict):
            raise MalformedVersion(content[:80])

        short_version = str(info.get("CFBundleShortVersionString", "")).strip()
        build = str(info.get("CFBundleVersion", "")).strip()
        if not build:
            version = cls.parse(short_version)
        elif not build.isdigit():
            raise MalformedVersion(build)
        else:
            version = cls.parse(f"{short_version} ({build})")
        return replace(version, short_version=short_version)

    def bump(self) -> "Version":
        """Return a copy with the build number incremented by one."""
        if self.build is None:
            raise MissingBuildNumber(self.version)
        return replace(self, build=self.build + 1)

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def full_version(self) -> str:
        if self.build is None:
            return self.version
        return f"{self.version} ({self.build})"

    def commit_message(self, template: str) -> str:
        return template.replace(VERSION_PLACEHOLDER, self.full_version)

    def __str__(self) -> str:
        return self.full_version


@dataclass(frozen=True)
class Author:
    """Commit author as shown on GitHub."""

    name: str
    email: str

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class TreeItem:
    """Entry of a git tree snapshot."""

    path: str
    sha: str
    type: str = "blob"
    mode: str = "100644"


@dataclass(frozen=True)
class Script:
    """Script body Travis CI runs in place of the repository's own."""

    content: str

    def to_config(self) -> dict:
        return {"merge_mode": "deep_merge", "script": self.content}


@dataclass(frozen=True)
class TravisTarget:
    """Maps the name typed in chat to the script to trigger."""

    name: str
    script: Script
