"""Test doubles and builders shared across the test suite."""

from bob.commands.base import MessageSender


class RecordingSender(MessageSender):
    """Reply sink that keeps every message in order."""

    def __init__(self):
        self.messages: list[str] = []

    async def send(self, message: str) -> None:
        self.messages.append(message)


def make_plist(short_version: str = "1.2.3", build: str | None = "45") -> str:
    """Build an Info.plist document with the given version values."""
    build_entry = ""
    if build is not None:
        build_entry = f"\t<key>CFBundleVersion</key>\n\t<string>{build}</string>\n"
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" '
        '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
        '<plist version="1.0">\n'
        "<dict>\n"
        "\t<key>CFBundleName</key>\n"
        "\t<string>App</string>\n"
        "\t<key>CFBundleShortVersionString</key>\n"
        f"\t<string>{short_version}</string>\n"
        f"{build_entry}"
        "</dict>\n"
        "</plist>\n"
    )
