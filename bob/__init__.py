"""Bob: a chat-operated relay for GitHub and Travis CI chores."""

__version__ = "1.0.0"
