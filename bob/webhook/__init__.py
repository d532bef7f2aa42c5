"""Slash command server for Mattermost."""

from bob.webhook.auth import SlashCommandAuth
from bob.webhook.server import create_app

__all__ = ["SlashCommandAuth", "create_app"]
