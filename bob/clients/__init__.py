"""HTTP clients for GitHub and Travis CI."""

from bob.clients.github import GitHub, GitReference
from bob.clients.travis import Build, CompletedRequest, Poll, Request, TravisCI, TriggerResponse

__all__ = [
    "GitHub",
    "GitReference",
    "TravisCI",
    "Build",
    "CompletedRequest",
    "Poll",
    "Request",
    "TriggerResponse",
]
