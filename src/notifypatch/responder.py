"""
Slash command replies.

All commands are read-only views of the persisted state; none of them call
the upstream API. Every interaction gets exactly one reply: if building the
intended reply fails, a private generic error is sent instead.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import discord

from .config import DEFAULT_DOWNLOADS_PAGE
from .errors import CommandError
from .formatters import (
    COMMAND_ERROR_MESSAGE,
    format_current_build,
    format_history_embed,
    format_status_embed,
)
from .state import StateStore

logger = logging.getLogger(__name__)

# name -> description, as registered with Discord
COMMAND_DESCRIPTIONS: Dict[str, str] = {
    "status": "Shows the current PaperMC version and its latest changes",
    "build": "Shows the current build detected by the bot",
    "history": "Shows the history of recent builds",
}


@dataclass
class Reply:
    """What to send back to an interaction."""

    content: Optional[str] = None
    embed: Optional[discord.Embed] = None
    ephemeral: bool = False

    def as_kwargs(self) -> dict:
        kwargs = {"ephemeral": self.ephemeral}
        if self.content is not None:
            kwargs["content"] = self.content
        if self.embed is not None:
            kwargs["embed"] = self.embed
        return kwargs


ERROR_REPLY = Reply(content=COMMAND_ERROR_MESSAGE, ephemeral=True)


class CommandResponder:
    """Builds replies for the status, build and history commands."""

    def __init__(self, store: StateStore, downloads_page: str = DEFAULT_DOWNLOADS_PAGE):
        self.store = store
        self.downloads_page = downloads_page
        self._handlers: Dict[str, Callable[[], Reply]] = {
            "status": self.status,
            "build": self.current_build,
            "history": self.history,
        }

    def status(self) -> Reply:
        return Reply(embed=format_status_embed(self.store.state, self.downloads_page))

    def current_build(self) -> Reply:
        return Reply(content=format_current_build(self.store.state))

    def history(self) -> Reply:
        return Reply(embed=format_history_embed(self.store.state, self.downloads_page))

    def respond(self, command_name: str) -> Reply:
        """Build the reply for a command. Never raises."""
        try:
            handler = self._handlers.get(command_name)
            if handler is None:
                raise KeyError(f"unknown command '{command_name}'")
            return handler()
        except Exception as e:
            error = CommandError(command_name, e)
            logger.error(f"Error in command {command_name}: {error}", exc_info=True)
            return ERROR_REPLY

    async def handle(self, interaction: discord.Interaction, command_name: str) -> None:
        """Reply to an interaction for `command_name`."""
        logger.info(f"/{command_name} invoked by {interaction.user} in {interaction.channel}")
        reply = self.respond(command_name)

        try:
            await interaction.response.send_message(**reply.as_kwargs())
            return
        except discord.HTTPException as e:
            logger.error(f"Failed to send reply for /{command_name}: {e}")
            if reply is ERROR_REPLY or interaction.response.is_done():
                return

        try:
            await interaction.response.send_message(**ERROR_REPLY.as_kwargs())
        except discord.HTTPException as e:
            logger.error(f"Failed to send error reply for /{command_name}: {e}")
