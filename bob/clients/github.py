"""GitHub REST client covering the git data calls Bob needs."""

import base64
import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from bob.clients.http import build_async_client, json_body, send
from bob.core.app_version import ItemsUpdater, first_item
from bob.core.models import Author, BranchName, TreeItem
from bob.exceptions import BranchNotFound, DecodingError, RemoteError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"


def _ref_name(branch: BranchName) -> str:
    return quote(str(branch), safe="/")


@dataclass(frozen=True)
class GitReference:
    """A git ref and the commit it points to."""

    ref: str
    sha: str


class GitHub:
    """Async client for one GitHub repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        base_url: str = DEFAULT_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.owner = owner
        self.repo = repo
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = build_async_client(base_url, headers=headers, transport=transport)

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def current_state(self, branch: BranchName) -> list[TreeItem]:
        """List every item of the branch's tree (recursive)."""
        return await self._tree(quote(str(branch), safe=""))

    async def _tree(self, tree_ish: str) -> list[TreeItem]:
        response = await send(
            self._client, "GET", f"{self._repo_path}/git/trees/{tree_ish}",
            params={"recursive": "1"},
        )
        data = json_body(response)
        if data.get("truncated"):
            logger.warning("Tree %s of %s/%s is truncated", tree_ish, self.owner, self.repo)
        return [
            TreeItem(
                path=item["path"],
                sha=item["sha"],
                type=item.get("type", "blob"),
                mode=item.get("mode", "100644"),
            )
            for item in data.get("tree", [])
        ]

    async def git_blob(self, sha: str) -> bytes:
        """Fetch the raw bytes of a blob."""
        response = await send(self._client, "GET", f"{self._repo_path}/git/blobs/{sha}")
        data = json_body(response)
        content = data.get("content", "")
        if data.get("encoding", "base64") != "base64":
            return content.encode("utf-8")
        try:
            return base64.b64decode(content)
        except ValueError as e:
            raise RemoteError(f"Blob {sha} is not valid base64") from e

    async def assert_branch_exists(self, branch: BranchName) -> None:
        """Raise `BranchNotFound` unless the branch exists."""
        try:
            await send(
                self._client, "GET",
                f"{self._repo_path}/branches/{quote(str(branch), safe='')}",
            )
        except RemoteError as e:
            if e.status_code == 404:
                raise BranchNotFound(str(branch)) from e
            raise

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def new_commit(
        self,
        updater: ItemsUpdater,
        branch: BranchName,
        author: Author,
        message: str,
    ) -> GitReference:
        """Commit the updater's rewrites on top of ``branch``.

        Blobs, tree and commit objects are created first; the branch ref is
        moved last, so a failure anywhere before that leaves the branch as
        it was.
        """
        head = await self._reference(branch)
        commit = json_body(await send(self._client, "GET", f"{self._repo_path}/git/commits/{head.sha}"))
        base_tree = commit["tree"]["sha"]
        items = await self._tree(base_tree)

        new_items = []
        for path in updater.paths:
            item = first_item(items, path)
            data = await self.git_blob(item.sha)
            try:
                current = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodingError(path) from e
            blob = json_body(await send(
                self._client, "POST", f"{self._repo_path}/git/blobs",
                json={"content": updater.update(path, current), "encoding": "utf-8"},
            ))
            new_items.append({"path": path, "mode": item.mode, "type": "blob", "sha": blob["sha"]})

        tree = json_body(await send(
            self._client, "POST", f"{self._repo_path}/git/trees",
            json={"base_tree": base_tree, "tree": new_items},
        ))
        new_commit = json_body(await send(
            self._client, "POST", f"{self._repo_path}/git/commits",
            json={
                "message": message,
                "tree": tree["sha"],
                "parents": [head.sha],
                "author": author.to_dict(),
            },
        ))
        ref = json_body(await send(
            self._client, "PATCH", f"{self._repo_path}/git/refs/heads/{_ref_name(branch)}",
            json={"sha": new_commit["sha"], "force": False},
        ))
        logger.info("Committed %s on %s: %s", new_commit["sha"][:7], branch, message)
        return GitReference(ref=ref["ref"], sha=ref["object"]["sha"])

    async def _reference(self, branch: BranchName) -> GitReference:
        response = await send(self._client, "GET", f"{self._repo_path}/git/ref/heads/{_ref_name(branch)}")
        data = json_body(response)
        return GitReference(ref=data["ref"], sha=data["object"]["sha"])
