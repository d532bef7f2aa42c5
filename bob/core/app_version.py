"""App version lookup and rewriting for version files hosted on GitHub."""

import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from bob.core.models import BranchName, TreeItem, Version
from bob.exceptions import DecodingError, FileNotFound, MalformedVersion

if TYPE_CHECKING:
    from bob.clients.github import GitHub

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# File parsers
# ---------------------------------------------------------------------------

class AppVersionFileParser(ABC):
    """Turns the raw bytes of a version file into a `Version`."""

    @abstractmethod
    def parse_version(self, data: bytes) -> Version:
        """Parse a version file.

        Raises:
            DecodingError: If the bytes are not UTF-8 text
            MalformedVersion: If the text carries no valid version
        """


class PlistFileParser(AppVersionFileParser):
    """Parser for iOS Info.plist files."""

    def parse_version(self, data: bytes) -> Version:
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError() from e
        return Version.from_plist_content(content)


class TextFileParser(AppVersionFileParser):
    """Parser for files holding a bare ``1.2.3 (45)`` line."""

    def parse_version(self, data: bytes) -> Version:
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError() from e
        return Version.parse(content.strip())


FILE_PARSERS: dict[str, type[AppVersionFileParser]] = {
    "plist": PlistFileParser,
    "text": TextFileParser,
}


def parser_for(file_format: str) -> AppVersionFileParser:
    """Look up a parser by format name (``plist`` or ``text``)."""
    try:
        return FILE_PARSERS[file_format]()
    except KeyError:
        raise ValueError(
            f"Unknown version file format '{file_format}'. Available: {sorted(FILE_PARSERS)}"
        ) from None


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class AppVersionProvider(ABC):
    """Source of the current app version on a branch."""

    @abstractmethod
    async def fetch_version(self, branch: BranchName) -> Version:
        """Fetch the app version currently on ``branch``."""


def first_item(items: list[TreeItem], path: str) -> TreeItem:
    """Return the tree item whose path matches exactly.

    Raises:
        FileNotFound: If no item has that path
    """
    for item in items:
        if item.path == path:
            return item
    raise FileNotFound(path)


class GitHubFileAppVersionProvider(AppVersionProvider):
    """Reads the app version from a file in the GitHub repository."""

    def __init__(
        self,
        github: "GitHub",
        version_file_path: str,
        parser: AppVersionFileParser | None = None,
    ):
        self.github = github
        self.version_file_path = version_file_path
        self.parser = parser or PlistFileParser()

    async def fetch_version(self, branch: BranchName) -> Version:
        items = await self.github.current_state(branch)
        item = first_item(items, self.version_file_path)
        data = await self.github.git_blob(item.sha)
        try:
            version = self.parser.parse_version(data)
        except DecodingError:
            raise DecodingError(self.version_file_path) from None
        logger.debug("Version on %s (%s): %s", branch, self.version_file_path, version)
        return version


# ---------------------------------------------------------------------------
# File updates
# ---------------------------------------------------------------------------

class ItemsUpdater(ABC):
    """Plan of file rewrites applied in a single commit."""

    @property
    @abstractmethod
    def paths(self) -> list[str]:
        """Repository-relative paths the plan rewrites."""

    @abstractmethod
    def update(self, path: str, content: str) -> str:
        """Return the new content for ``path`` given its current content."""


def _plist_value_pattern(key: str) -> re.Pattern:
    return re.compile(
        rf"(<key>{re.escape(key)}</key>\s*<string>)([^<]*)(</string>)"
    )


class VersionUpdater(ItemsUpdater):
    """Writes a version into every configured Info.plist.

    Only the two version values are replaced so the rest of the file keeps
    its formatting.
    """

    SHORT_VERSION_KEY = "CFBundleShortVersionString"
    BUILD_KEY = "CFBundleVersion"

    def __init__(self, plist_paths: list[str], version: Version):
        self.plist_paths = list(plist_paths)
        self.version = version

    @property
    def paths(self) -> list[str]:
        return self.plist_paths

    def update(self, path: str, content: str) -> str:
        short_version = self.version.short_version or self.version.version
        updated = self._replace(content, self.SHORT_VERSION_KEY, short_version, path)
        if self.version.build is not None:
            updated = self._replace(updated, self.BUILD_KEY, str(self.version.build), path)
        return updated

    @staticmethod
    def _replace(content: str, key: str, value: str, path: str) -> str:
        pattern = _plist_value_pattern(key)
        if not pattern.search(content):
            raise MalformedVersion(f"{key} missing in {path}")
        return pattern.sub(lambda m: f"{m.group(1)}{value}{m.group(3)}", content, count=1)
