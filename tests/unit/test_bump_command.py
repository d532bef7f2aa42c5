"""Unit tests for the bump command."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bob.clients.github import GitReference
from bob.commands.bump import BumpCommand
from bob.core.models import Author, BranchName, TreeItem, Version
from bob.exceptions import BranchRequired, Misconfigured, RemoteError, TooManyParameters

from tests.helpers import make_plist

AUTHOR = Author("Bob", "bob@example.com")
PATHS = ["App/Info.plist", "Widget/Info.plist"]


class FakeGitHub:
    """In-memory repository recording the commits it accepts."""

    def __init__(self, files: dict[str, str], fail_commit: bool = False):
        self.files = dict(files)
        self.fail_commit = fail_commit
        self.commits: list[dict] = []

    async def current_state(self, branch):
        return [TreeItem(path, f"sha-{path}") for path in self.files]

    async def git_blob(self, sha):
        return self.files[sha[len("sha-"):]].encode()

    async def new_commit(self, updater, branch, author, message):
        if self.fail_commit:
            raise RemoteError("POST /git/commits returned 500: oops", status_code=500)
        updated = {path: updater.update(path, self.files[path]) for path in updater.paths}
        self.files.update(updated)
        self.commits.append({"branch": branch, "author": author, "message": message, "files": updated})
        return GitReference(ref=f"refs/heads/{branch}", sha="abcdef1234")


@pytest.fixture
def github():
    return FakeGitHub({
        PATHS[0]: make_plist("1.2.3", "45"),
        PATHS[1]: make_plist("1.2.3", "45"),
        "README.md": "hello",
    })


class TestBumpCommand:
    """Tests for BumpCommand."""

    def test_name_and_usage(self, github):
        command = BumpCommand(github, PATHS, AUTHOR)

        assert command.name == "bump"
        assert "-b {branch}" in command.usage

    @pytest.mark.asyncio
    async def test_bump_commits_all_paths(self, github, sender):
        """Test a successful bump writes one commit covering every plist."""
        command = BumpCommand(github, PATHS, AUTHOR)

        await command.execute(["-b", "release"], sender)

        assert sender.messages == ["One sec...", "ok"]
        assert len(github.commits) == 1
        commit = github.commits[0]
        assert commit["branch"] == BranchName("release")
        assert commit["author"] == AUTHOR
        assert commit["message"] == "[General] Aligns version to 1.2.3 (45)"
        assert set(commit["files"]) == set(PATHS)
        for path in PATHS:
            assert Version.from_plist_content(github.files[path]) == Version(1, 2, 3, 46)

    @pytest.mark.asyncio
    async def test_custom_message_template(self, github, sender):
        command = BumpCommand(github, PATHS, AUTHOR, message="Build <version> [skip ci]")

        await command.execute(["-b", "develop"], sender)

        assert github.commits[0]["message"] == "Build 1.2.3 (45) [skip ci]"

    @pytest.mark.asyncio
    async def test_missing_plist_paths(self, github, sender):
        command = BumpCommand(github, [], AUTHOR)

        with pytest.raises(Misconfigured, match="Missing Plist file paths"):
            await command.execute(["-b", "release"], sender)

        assert sender.messages == []

    @pytest.mark.asyncio
    async def test_branch_required(self, github, sender):
        command = BumpCommand(github, PATHS, AUTHOR)

        with pytest.raises(BranchRequired):
            await command.execute([], sender)

        assert sender.messages == []
        assert github.commits == []

    @pytest.mark.asyncio
    async def test_excess_parameters(self, github, sender):
        command = BumpCommand(github, PATHS, AUTHOR)

        with pytest.raises(TooManyParameters):
            await command.execute(["-b", "release", "twice"], sender)

    @pytest.mark.asyncio
    async def test_commit_failure(self, sender):
        """Test a failed commit leaves no commit and sends one failure reply."""
        original = make_plist("1.2.3", "45")
        github = FakeGitHub({PATHS[0]: original, PATHS[1]: original}, fail_commit=True)
        command = BumpCommand(github, PATHS, AUTHOR)

        await command.execute(["-b", "release"], sender)

        assert github.commits == []
        assert github.files[PATHS[0]] == original
        assert len(sender.messages) == 2
        assert sender.messages[1].startswith("Command failed with error")
        assert "500" in sender.messages[1]

    @pytest.mark.asyncio
    async def test_missing_build_number(self, sender):
        """Test a plist without build number fails without committing."""
        github = FakeGitHub({PATHS[0]: make_plist("1.2.3", None)})
        command = BumpCommand(github, PATHS[:1], AUTHOR)

        await command.execute(["-b", "release"], sender)

        assert github.commits == []
        assert "no build number" in sender.messages[-1]

    @pytest.mark.asyncio
    async def test_reads_first_path_only(self, sender):
        """Test the version comes from the first configured plist."""
        provider = MagicMock()
        provider.fetch_version = AsyncMock(return_value=Version(3, 0, 0, 9))
        github = MagicMock()
        github.new_commit = AsyncMock(return_value=GitReference("refs/heads/main", "1234567"))
        command = BumpCommand(github, PATHS, AUTHOR, app_version_provider=provider)

        await command.execute(["-b", "main"], sender)

        provider.fetch_version.assert_awaited_once_with(BranchName("main"))
        updater = github.new_commit.await_args.args[0]
        assert updater.version == Version(3, 0, 0, 10)
        assert updater.paths == PATHS
        assert sender.messages[-1] == "ok"

    def test_default_provider_uses_first_path(self, github):
        command = BumpCommand(github, PATHS, AUTHOR)

        assert command.app_version_provider.version_file_path == PATHS[0]

    @pytest.mark.asyncio
    async def test_two_part_version_keeps_short_version(self, sender):
        """Test a bump only changes the build number in the committed plists."""
        github = FakeGitHub({PATHS[0]: make_plist("1.2", "45"), PATHS[1]: make_plist("1.2", "45")})
        command = BumpCommand(github, PATHS, AUTHOR)

        await command.execute(["-b", "develop"], sender)

        assert github.commits[0]["message"] == "[General] Aligns version to 1.2.0 (45)"
        for path in PATHS:
            assert "<string>1.2</string>" in github.files[path]
            assert "<string>46</string>" in github.files[path]
            assert "1.2.0" not in github.files[path]
