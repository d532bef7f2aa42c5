"""FastAPI server receiving Mattermost slash commands."""

import argparse
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, status
from pydantic import BaseModel

from bob.bootstrap import Bob, build_bob
from bob.commands.registry import HELP_COMMAND
from bob.config import DEFAULT_CONFIG_PATH, load_config
from bob.mattermost_bridge import ChannelSender, MattermostBridge
from bob.webhook.auth import SlashCommandAuth

logger = logging.getLogger(__name__)


class SlashCommandResponse(BaseModel):
    """Response for slash command."""

    response_type: str = "ephemeral"  # in_channel or ephemeral
    text: str
    username: Optional[str] = None


def create_app(
    bob: Bob,
    bridge: MattermostBridge,
    slash_token: str = "",
) -> FastAPI:
    """Create and configure the FastAPI slash command application.

    Args:
        bob: Registry and clients built from the configuration
        bridge: Bridge used to post command replies
        slash_token: Token Mattermost sends with each slash command.
            Empty disables the check

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Bob slash command server")
        ok, errors = await bridge.validate()
        if not ok:
            for error in errors:
                logger.warning(error)
        yield
        logger.info("Shutting down Bob slash command server")
        await bob.aclose()
        await bridge.aclose()

    app = FastAPI(
        title="Bob",
        description="Chat commands for GitHub and Travis CI",
        version="1.0.0",
        lifespan=lifespan,
    )

    auth = SlashCommandAuth(slash_token) if slash_token else None
    registry = bob.registry

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "commands": registry.names}

    @app.get("/help")
    async def help_endpoint():
        """Usage of every registered command."""
        return {
            "commands": [
                {"name": name, "usage": registry.get(name).usage}
                for name in registry.names
            ],
            "command_prefix": registry.parser.prefix,
        }

    @app.post("/command", response_model=SlashCommandResponse)
    async def handle_slash_command(request: Request, background_tasks: BackgroundTasks):
        """Handle Mattermost slash command callback.

        Mattermost sends POST requests with form-urlencoded data and expects
        an answer within 3 seconds, so commands run in the background and
        reply through the bridge.
        """
        form_data = await request.form()
        payload = dict(form_data)

        if auth and not auth.verify_token(payload.get("token")):
            logger.warning(
                "AUDIT: Invalid slash command token",
                extra={"event_type": "slash_command_unauthorized"},
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid slash command token",
            )

        text = f"{payload.get('command', '')} {payload.get('text', '')}".strip()
        user_id = payload.get("user_id", "")
        channel_id = payload.get("channel_id", "")

        logger.info(
            f"AUDIT: Slash command invocation - {text}",
            extra={
                "event_type": "slash_command",
                "command": text,
                "user_id": user_id,
                "channel_id": channel_id,
            },
        )

        parsed = registry.parser.parse(text)
        if parsed is None or parsed.name == HELP_COMMAND:
            topic = parsed.parameters[0] if parsed and parsed.parameters else None
            return SlashCommandResponse(text=registry.help_text(topic))

        if registry.get(parsed.name) is None:
            return SlashCommandResponse(
                text=f"Unknown command `{parsed.name}`. Type `{HELP_COMMAND}` for available commands.",
            )

        if not channel_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing channel_id",
            )

        sender = ChannelSender(bridge, channel_id)
        background_tasks.add_task(registry.dispatch, parsed.name, parsed.parameters, sender)
        return SlashCommandResponse(text=f"Running `{parsed.raw}`...")

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

class ColoredFormatter(logging.Formatter):
    """Console formatter coloring the level name.

    Records are copied before coloring, so handlers formatting the same
    record later (the log file) still see the plain level name.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt=None, datefmt=None, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record):
        if not self.use_color:
            return super().format(record)
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _setup_logging(log_path: Path) -> None:
    """Configure console (INFO) and file (DEBUG) logging handlers."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(ColoredFormatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S",
        use_color=sys.stdout.isatty(),
    ))
    root.addHandler(console)

    fh = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(fh)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Run the slash command server."""
    import uvicorn

    parser = argparse.ArgumentParser(description="Bob slash command server")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to config file")
    parser.add_argument("--log-file", default="bob.log", help="Path to the debug log")
    args = parser.parse_args()

    _setup_logging(Path(args.log_file))

    config = load_config(args.config)
    bridge = MattermostBridge(
        mattermost_url=config.mattermost.url,
        bot_token=config.mattermost.bot_token,
    )

    app = create_app(
        bob=build_bob(config),
        bridge=bridge,
        slash_token=config.mattermost.slash_token,
    )
    uvicorn.run(app, host=config.webhook.host, port=config.webhook.port)


if __name__ == "__main__":
    main()
