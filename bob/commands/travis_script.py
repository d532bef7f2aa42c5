"""Command triggering a script on Travis CI and reporting the build URLs."""

import logging

from bob.clients.github import GitHub
from bob.clients.travis import (
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    CompletedRequest,
    Poll,
    Request,
    TravisCI,
    TriggerResponse,
)
from bob.commands.base import BRANCH_SPECIFIER, Command, MessageSender, resolve_parameters
from bob.core.app_version import AppVersionProvider
from bob.core.models import BranchName, TravisTarget
from bob.exceptions import RemoteError

logger = logging.getLogger(__name__)


class TravisScriptCommand(Command):
    """Runs a script on Travis CI.

    Scripts are provided via `TravisTarget`s. When only one target is
    configured the user does not type its name.
    """

    def __init__(
        self,
        name: str,
        travis: TravisCI,
        targets: list[TravisTarget],
        default_branch: BranchName,
        app_version_provider: AppVersionProvider,
        github: GitHub | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
    ):
        """Initialize the command.

        Args:
            name: Command name to use
            travis: Travis CI client
            targets: Targets the user can pick from
            default_branch: Branch used when ``-b`` is not given
            app_version_provider: Source of the version shown next to each build
            github: When given, the branch is checked on GitHub before
                anything is triggered
            poll_interval: Seconds between request polls
            max_poll_attempts: Polls before giving up with `PollTimeout`
        """
        if not targets:
            raise ValueError(f"Command `{name}` needs at least one target")
        self._name = name
        self.travis = travis
        self.targets = list(targets)
        self.default_branch = default_branch
        self.app_version_provider = app_version_provider
        self.github = github
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts

    @property
    def name(self) -> str:
        return self._name

    @property
    def usage(self) -> str:
        target = "" if len(self.targets) == 1 else " {target}"
        message = (
            f"Trigger a script by saying `{self.name}{target} {BRANCH_SPECIFIER} {{branch}}`. "
            "I'll do the job for you. `branch` parameter is optional and it defaults "
            f"to `{self.default_branch}`"
        )
        if len(self.targets) != 1:
            message += "\nAvailable targets:"
            for t in self.targets:
                message += f"\n• {t.name}"
        return message

    async def execute(self, parameters: list[str], sender: MessageSender) -> None:
        resolved = resolve_parameters(
            parameters,
            command=self.name,
            targets=self.targets,
            default_branch=self.default_branch,
        )
        target, branch = resolved.target, resolved.branch

        logger.info(f"Executing target {target.name} on {branch}")
        try:
            await self._assert_branch_if_possible(branch)
            response = await self._trigger_and_acknowledge(target, branch, sender)
            build_request = await self.travis.request(response.request_id)
            completed = await self._poll_for_build(build_request)
            message = await self._build_urls_message(completed, branch)
        except Exception as e:
            logger.error(f"Executing target {target.name} on {branch} failed: {e}")
            await sender.send(f"Executing target *{target.name}* failed: `{e}`")
            return

        await sender.send(message)

    async def _assert_branch_if_possible(self, branch: BranchName) -> None:
        if self.github is None:
            logger.debug("No GitHub configured for `%s`, skipping branch check", self.name)
            return
        await self.github.assert_branch_exists(branch)

    async def _trigger_and_acknowledge(
        self,
        target: TravisTarget,
        branch: BranchName,
        sender: MessageSender,
    ) -> TriggerResponse:
        """Trigger the target's script and tell the user it was accepted.

        The acknowledgement is sent as soon as Travis accepts the request,
        before polling starts.
        """
        response = await self.travis.execute(target.script, branch)
        await sender.send(f"Got it! Executing target *{target.name}* success.")
        return response

    async def _poll_for_build(self, build_request: Request) -> CompletedRequest:
        """Poll the request until it leaves the pending state.

        Raises:
            RemoteError: If the request finished without any build
        """

        def until(request: Request) -> Poll[CompletedRequest]:
            if request.pending:
                return Poll.again()
            return Poll.stop(request.complete)

        completed = await self.travis.poll(
            build_request.id,
            until,
            interval=self.poll_interval,
            max_attempts=self.max_poll_attempts,
        )
        if not completed.builds:
            reason = f" ({completed.result})" if completed.result else ""
            raise RemoteError(f"Request {completed.id} finished without builds{reason}")
        return completed

    async def _build_urls_message(self, completed: CompletedRequest, branch: BranchName) -> str:
        """Build the message listing every build URL with the app version.

        Lines read ``1.2.3 (45): https://...``. When the version cannot be
        fetched the URLs are listed alone.
        """
        version_branch = BranchName(completed.branch_name) if completed.branch_name else branch
        urls = [self.travis.build_url(build) for build in completed.builds]
        try:
            version = await self.app_version_provider.fetch_version(version_branch)
        except Exception as e:
            logger.warning(f"Could not fetch app version on {version_branch}, sending URLs only: {e}")
            return "Build URL: " + "".join(f"\n {url}" for url in urls)

        return "Build URL: " + "".join(f"\n `{version.full_version}: {url}`" for url in urls)
