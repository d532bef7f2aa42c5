"""Tests for the Mattermost bridge."""

import asyncio
import json

import httpx
import pytest

from bob.mattermost_bridge import ChannelSender, MattermostBridge

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class FakeMattermost:
    """Records posts and answers /users/me."""

    def __init__(self, status_code=201):
        self.status_code = status_code
        self.posts: list[dict] = []
        self.auth: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.auth.append(request.headers.get("authorization", ""))
        if request.url.path == "/api/v4/users/me":
            return httpx.Response(self.status_code, json={"id": "bot"})
        if request.method == "POST" and request.url.path == "/api/v4/posts":
            if self.status_code >= 400:
                return httpx.Response(self.status_code, text="nope")
            post = json.loads(request.content)
            self.posts.append(post)
            return httpx.Response(201, json={"id": f"post{len(self.posts)}", **post})
        return httpx.Response(404)


@pytest.fixture
def server():
    return FakeMattermost()


@pytest.fixture
def bridge(server):
    return MattermostBridge(
        mattermost_url="http://localhost:8065/",
        bot_token="bot-token",
        transport=httpx.MockTransport(server),
    )


# ---------------------------------------------------------------------------
# Unit tests
# ---------------------------------------------------------------------------


class TestSend:
    @pytest.mark.asyncio
    async def test_send_posts_to_channel(self, bridge, server):
        result = await bridge.send("hello", channel_id="ch1")

        assert server.posts == [{"channel_id": "ch1", "message": "hello"}]
        assert result["id"] == "post1"
        assert server.auth == ["Bearer bot-token"]

    @pytest.mark.asyncio
    async def test_send_thread_reply(self, bridge, server):
        await bridge.send("reply", channel_id="ch1", root_id="root1")

        assert server.posts[0]["root_id"] == "root1"

    @pytest.mark.asyncio
    async def test_send_failure_is_logged_not_raised(self):
        bridge = MattermostBridge(
            bot_token="bot-token",
            transport=httpx.MockTransport(FakeMattermost(status_code=500)),
        )

        assert await bridge.send("hello", channel_id="ch1") == {}

    @pytest.mark.asyncio
    async def test_send_does_not_block_event_loop(self):
        """Test other coroutines keep running while a post is in flight."""
        release = asyncio.Event()
        ticks = []

        async def slow_mattermost(request):
            await release.wait()
            return httpx.Response(201, json={"id": "post1"})

        async def ticker():
            for i in range(3):
                ticks.append(i)
                await asyncio.sleep(0)
            release.set()

        bridge = MattermostBridge(
            bot_token="bot-token",
            transport=httpx.MockTransport(slow_mattermost),
        )

        result, _ = await asyncio.wait_for(
            asyncio.gather(bridge.send("hello", channel_id="ch1"), ticker()),
            timeout=5,
        )

        assert ticks == [0, 1, 2]
        assert result == {"id": "post1"}


class TestValidate:
    @pytest.mark.asyncio
    async def test_validate_ok(self, bridge):
        ok, errors = await bridge.validate()

        assert ok is True
        assert errors == []

    @pytest.mark.asyncio
    async def test_validate_without_token(self):
        ok, errors = await MattermostBridge(bot_token="").validate()

        assert ok is False
        assert "No Mattermost bot token configured" in errors

    @pytest.mark.asyncio
    async def test_validate_bad_token(self):
        bridge = MattermostBridge(
            bot_token="wrong",
            transport=httpx.MockTransport(FakeMattermost(status_code=401)),
        )

        ok, errors = await bridge.validate()

        assert ok is False
        assert errors[0].startswith("Mattermost API failed")


class TestChannelSender:
    @pytest.mark.asyncio
    async def test_preserves_order(self, bridge, server):
        """Test messages arrive in the order they were sent."""
        sender = ChannelSender(bridge, "ch9")

        await sender.send("Got it!")
        await sender.send("Build URL: ...")

        assert [p["message"] for p in server.posts] == ["Got it!", "Build URL: ..."]
        assert all(p["channel_id"] == "ch9" for p in server.posts)
