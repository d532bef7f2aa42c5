"""Mattermost communication bridge.

Posts Bob's replies through the Mattermost REST API. Incoming commands
arrive through the slash command webhook (see ``bob.webhook``), so the
bridge only needs to write.
"""

import logging

import httpx

from bob.commands.base import MessageSender

logger = logging.getLogger(__name__)


class MattermostBridge:
    """Send messages to Mattermost channels as the Bob bot."""

    def __init__(
        self,
        mattermost_url: str = "http://localhost:8065",
        bot_token: str = "",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.mattermost_url = mattermost_url.rstrip("/")
        self.bot_token = bot_token
        self._client = httpx.AsyncClient(
            base_url=self.mattermost_url,
            headers={"Authorization": f"Bearer {bot_token}"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration and connectivity.

        Returns:
            Tuple of (success: bool, errors: list[str])
        """
        errors: list[str] = []

        if not self.bot_token:
            errors.append("No Mattermost bot token configured")
            return False, errors

        try:
            response = await self._client.get("/api/v4/users/me")
            response.raise_for_status()
            logger.info("Mattermost validation passed")
        except httpx.HTTPError as e:
            errors.append(f"Mattermost API failed: {e}")

        return len(errors) == 0, errors

    # ------------------------------------------------------------------
    # Send
    # ------------------------------------------------------------------

    async def send(self, message: str, channel_id: str, root_id: str | None = None) -> dict:
        """Send a message to the channel (optionally as a thread reply).

        Failures are logged and an empty dict returned; replies are
        fire-and-forget.
        """
        payload = {"channel_id": channel_id, "message": message}
        if root_id:
            payload["root_id"] = root_id

        try:
            response = await self._client.post("/api/v4/posts", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to send to %s: %s", channel_id, e)
            return {}

        logger.info("Sent%s: %s", f" thread:{root_id}" if root_id else "", message[:100])
        try:
            return response.json()
        except ValueError:
            return {"raw": response.text}


class ChannelSender(MessageSender):
    """Reply sink posting every message to one channel."""

    def __init__(self, bridge: MattermostBridge, channel_id: str, root_id: str | None = None):
        self.bridge = bridge
        self.channel_id = channel_id
        self.root_id = root_id

    async def send(self, message: str) -> None:
        await self.bridge.send(message, self.channel_id, root_id=self.root_id)
