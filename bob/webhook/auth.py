"""Slash command token verification."""

import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SlashCommandAuth:
    """Checks the token Mattermost sends with every slash command."""

    def __init__(self, token: str):
        self.token = token.encode() if isinstance(token, str) else token

    def verify_token(self, token: Optional[str]) -> bool:
        """Verify the token of a slash command request.

        Args:
            token: Value of the ``token`` form field

        Returns:
            True if the token matches, False otherwise
        """
        if not token:
            logger.warning("No slash command token provided")
            return False

        return hmac.compare_digest(self.token, token.encode())
