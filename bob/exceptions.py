"""Bob exception classes."""


class BobError(Exception):
    """Base exception for Bob errors."""
    pass


class Misconfigured(BobError):
    """Raised when a command is missing required static configuration."""
    pass


# ---------------------------------------------------------------------------
# Parameter errors
# ---------------------------------------------------------------------------

class ParameterError(BobError):
    """Raised when command parameters cannot be resolved."""
    pass


class NoParameters(ParameterError):
    """Raised when a command needs parameters but none were given."""
    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"No parameters provided. See `{command} usage` for instructions on how to use this command"
        )


class UnknownTarget(ParameterError):
    """Raised when the target name does not match any configured target."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown target `{name}`.")


class MissingBranchArgument(ParameterError):
    """Raised when `-b` is the last token."""
    def __init__(self, specifier: str = "-b"):
        self.specifier = specifier
        super().__init__(f"Branch name not specified after `{specifier}`")


class BranchRequired(ParameterError):
    """Raised when a command needs an explicit branch and none was given."""
    def __init__(self):
        super().__init__("Please specify a branch")


class TooManyParameters(ParameterError):
    """Raised when tokens remain after target and branch resolution."""
    def __init__(self, command: str, excess: list[str]):
        self.command = command
        self.excess = excess
        super().__init__(
            f"Too many parameters ({' '.join(excess)}). "
            f"See `{command} usage` for instructions on how to use this command"
        )


# ---------------------------------------------------------------------------
# Version errors
# ---------------------------------------------------------------------------

class VersionError(BobError):
    """Base exception for version parsing and arithmetic."""
    pass


class MalformedVersion(VersionError):
    """Raised when a version string does not match the expected pattern."""
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Malformed version: {raw!r}")


class MissingBuildNumber(VersionError):
    """Raised when bumping a version that carries no build number."""
    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Version {version} has no build number to bump")


# ---------------------------------------------------------------------------
# Remote errors
# ---------------------------------------------------------------------------

class RemoteError(BobError):
    """Raised when a call to GitHub or Travis CI fails."""
    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class FileNotFound(RemoteError):
    """Raised when a path is missing from the branch's tree."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"TreeItem '{path}' not found")


class DecodingError(RemoteError):
    """Raised when a blob is not valid UTF-8 text."""
    def __init__(self, path: str = ""):
        self.path = path
        msg = "Could not convert version file data to String"
        if path:
            msg += f" ({path})"
        super().__init__(msg)


class BranchNotFound(RemoteError):
    """Raised when a branch does not exist on GitHub."""
    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"Branch `{branch}` does not exist", status_code=404)


class PollTimeout(BobError):
    """Raised when a build request stays pending past the polling bound."""
    def __init__(self, request_id: int, attempts: int):
        self.request_id = request_id
        self.attempts = attempts
        super().__init__(
            f"Request {request_id} still pending after {attempts} attempts"
        )
