"""
Exception types raised inside the bot.

Every failure the bot can hit in steady state maps to one of these, and each
one is caught at its own boundary (poll cycle, state save, command reply,
command registration) so the process keeps running.
"""

from typing import Optional


class NotifyPatchError(Exception):
    """Base class for all bot errors."""


class RequestError(NotifyPatchError):
    """An upstream HTTP request failed, timed out or returned garbage."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause else "unknown error"
        super().__init__(f"Request to {url} failed ({detail})")


class PersistenceError(NotifyPatchError):
    """Reading or writing the state file failed."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"State file {path}: {cause}")


class CommandError(NotifyPatchError):
    """Building or sending a slash command reply failed."""

    def __init__(self, command: str, cause: Optional[BaseException] = None):
        self.command = command
        self.cause = cause
        super().__init__(f"Command /{command} failed: {cause}")


class RegistrationError(NotifyPatchError):
    """Slash commands could not be registered with Discord."""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Command registration failed: {cause}")
