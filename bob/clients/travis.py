"""Travis CI v3 client: trigger requests and poll them into builds."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar
from urllib.parse import quote

import httpx

from bob.clients.http import build_async_client, json_body, send
from bob.core.models import BranchName, Script
from bob.exceptions import PollTimeout, RemoteError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.travis-ci.com"
DEFAULT_WEB_URL = "https://app.travis-ci.com/github"

# Polling defaults
DEFAULT_POLL_INTERVAL = 5.0  # seconds
DEFAULT_MAX_POLL_ATTEMPTS = 60

PENDING_STATE = "pending"

T = TypeVar("T")


@dataclass(frozen=True)
class TriggerResponse:
    """Acknowledgement returned when a request is created."""

    request_id: int
    branch_name: str = ""


@dataclass(frozen=True)
class Build:
    """One build spawned by a request."""

    id: int
    number: str = ""
    state: str = ""


@dataclass(frozen=True)
class CompletedRequest:
    """A request Travis has finished processing."""

    id: int
    branch_name: str
    builds: list[Build] = field(default_factory=list)
    result: str = ""


@dataclass(frozen=True)
class Request:
    """Canonical record of a build request.

    ``complete`` is None while Travis reports the request as pending. A
    finished request may carry no builds, e.g. when it was rejected.
    """

    id: int
    complete: Optional[CompletedRequest] = None

    @property
    def pending(self) -> bool:
        return self.complete is None

    @classmethod
    def from_dict(cls, data: dict) -> "Request":
        builds = [
            Build(id=b["id"], number=str(b.get("number", "")), state=b.get("state", ""))
            for b in data.get("builds") or []
        ]
        if data.get("state", PENDING_STATE) == PENDING_STATE:
            return cls(id=data["id"])
        branch = data.get("branch_name") or (data.get("branch") or {}).get("name", "")
        return cls(
            id=data["id"],
            complete=CompletedRequest(
                id=data["id"],
                branch_name=branch,
                builds=builds,
                result=data.get("result") or "",
            ),
        )


@dataclass(frozen=True)
class Poll(Generic[T]):
    """Decision returned by a poll predicate: keep polling or stop with a value."""

    done: bool
    value: Optional[T] = None

    @classmethod
    def again(cls) -> "Poll[T]":
        return cls(done=False)

    @classmethod
    def stop(cls, value: T) -> "Poll[T]":
        return cls(done=True, value=value)


class TravisCI:
    """Async client for one Travis CI repository."""

    def __init__(
        self,
        repo: str,
        token: str = "",
        base_url: str = DEFAULT_BASE_URL,
        web_url: str = DEFAULT_WEB_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.repo = repo
        self.web_url = web_url.rstrip("/")
        headers = {"Travis-API-Version": "3"}
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = build_async_client(base_url, headers=headers, transport=transport)

    @property
    def _repo_path(self) -> str:
        return f"/repo/{quote(self.repo, safe='')}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def execute(self, script: Script, branch: BranchName) -> TriggerResponse:
        """Create a request running ``script`` on ``branch``."""
        response = await send(
            self._client, "POST", f"{self._repo_path}/requests",
            json={
                "request": {
                    "branch": str(branch),
                    "message": f"Triggered by Bob on {branch}",
                    "config": script.to_config(),
                }
            },
        )
        data = json_body(response)
        try:
            request_id = data["request"]["id"]
        except (KeyError, TypeError) as e:
            raise RemoteError(f"Unexpected trigger response: {str(data)[:200]}") from e
        logger.info("Triggered request %s on %s", request_id, branch)
        return TriggerResponse(request_id=request_id, branch_name=str(branch))

    async def request(self, request_id: int) -> Request:
        """Fetch the current state of a request."""
        response = await send(self._client, "GET", f"{self._repo_path}/request/{request_id}")
        data = json_body(response)
        try:
            return Request.from_dict(data)
        except (KeyError, TypeError) as e:
            raise RemoteError(f"Unexpected request record: {str(data)[:200]}") from e

    async def poll(
        self,
        request_id: int,
        until: Callable[[Request], Poll[T]],
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
    ) -> T:
        """Re-fetch a request until ``until`` says stop.

        Args:
            request_id: Request to poll
            until: Predicate deciding whether to continue
            interval: Seconds to wait between fetches
            max_attempts: Fetches before giving up

        Raises:
            PollTimeout: If the predicate never stops within ``max_attempts``
        """
        for attempt in range(1, max_attempts + 1):
            request = await self.request(request_id)
            decision = until(request)
            if decision.done:
                logger.debug("Request %s resolved after %d poll(s)", request_id, attempt)
                return decision.value
            logger.debug("Request %s pending (attempt %d/%d)", request_id, attempt, max_attempts)
            if attempt < max_attempts:
                await asyncio.sleep(interval)

        raise PollTimeout(request_id, max_attempts)

    def build_url(self, build: Build) -> str:
        return f"{self.web_url}/{self.repo}/builds/{build.id}"
