"""Value types and app version handling."""

from bob.core.app_version import (
    AppVersionFileParser,
    AppVersionProvider,
    GitHubFileAppVersionProvider,
    ItemsUpdater,
    PlistFileParser,
    TextFileParser,
    VersionUpdater,
)
from bob.core.models import Author, BranchName, Script, TravisTarget, TreeItem, Version

__all__ = [
    "AppVersionFileParser",
    "AppVersionProvider",
    "GitHubFileAppVersionProvider",
    "ItemsUpdater",
    "PlistFileParser",
    "TextFileParser",
    "VersionUpdater",
    "Author",
    "BranchName",
    "Script",
    "TravisTarget",
    "TreeItem",
    "Version",
]
