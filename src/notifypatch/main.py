"""
notifypatch - Main entry point.

A Discord bot that watches the PaperMC downloads API and announces new
builds to a channel. Status queries use Discord Slash Commands.

Usage:
    python -m src.notifypatch.main

Environment Variables Required:
    DISCORD_TOKEN - Discord bot token
    CHANNEL_ID - Channel that receives announcements
    CLIENT_ID - Discord application ID
    GUILD_ID - Guild the slash commands are registered to
    PORT - Liveness endpoint port (optional, default 3000)
"""

import asyncio
import base64
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands
from dotenv import load_dotenv

from .client import UpstreamClient
from .config import NotifyPatchConfig, load_config
from .detector import UpdateDetector
from .errors import RegistrationError
from .formatters import format_restart_embed
from .health import start_health_server
from .notifier import ChannelNotifier
from .poller import BuildPoller
from .responder import COMMAND_DESCRIPTIONS, ERROR_REPLY, CommandResponder
from .scheduler import PollScheduler
from .state import StateStore
from .timefmt import DisplayClock

# Load environment variables from .env file
load_dotenv()

PACKAGE_LOGGER = __package__ or "notifypatch"

logger = logging.getLogger(__name__)


def setup_logging(config: NotifyPatchConfig) -> logging.Logger:
    """
    Set up logging with both file and stdout handlers.

    Writes a rotating log file to {log_dir}/notifypatch.log.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    pkg_logger.handlers.clear()

    log_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # File handler - rotating, max 10MB per file, keep 5 backups
    log_file = config.log_dir / "notifypatch.log"
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(log_format)
    pkg_logger.addHandler(file_handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(getattr(logging, config.log_level, logging.INFO))
    stdout_handler.setFormatter(log_format)
    pkg_logger.addHandler(stdout_handler)

    # Also configure discord.py logging
    discord_logger = logging.getLogger("discord")
    discord_logger.setLevel(logging.WARNING)
    discord_logger.addHandler(file_handler)

    pkg_logger.info(f"Logging initialized. Log file: {log_file}")

    return pkg_logger


def validate_discord_token(token: str) -> tuple[bool, str]:
    """
    Validate Discord token format.

    Discord tokens have a specific format:
    - Base64 encoded user ID
    - Timestamp
    - HMAC
    """
    if not token:
        return False, "Discord token is empty"

    # Basic format check - tokens have 3 parts separated by dots
    parts = token.split(".")
    if len(parts) != 3:
        return False, "Discord token format invalid (expected 3 parts separated by dots)"

    # First part should be base64 encoded
    try:
        padded = parts[0] + "=" * (-len(parts[0]) % 4)
        base64.urlsafe_b64decode(padded)
    except ValueError:
        return False, "Discord token format invalid (first part not valid base64)"

    return True, "Token format valid"


class PaperNotifyBot(commands.Bot):
    """Discord bot that announces PaperMC builds and answers slash commands."""

    def __init__(
        self,
        config: NotifyPatchConfig,
        store: StateStore,
        upstream: Optional[UpstreamClient] = None,
    ):
        """Initialize the bot and wire the polling pipeline to the state store."""
        intents = discord.Intents.default()

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            application_id=config.application_id or None,
            help_command=None,
        )
        self.config = config
        self.store = store
        self.clock = DisplayClock(config.display_timezone)

        self.upstream = upstream or UpstreamClient(
            user_agent=config.user_agent, timeout=config.request_timeout
        )
        self.poller = BuildPoller(
            self.upstream, api_base=config.api_base, project=config.project, clock=self.clock
        )
        self.notifier = ChannelNotifier(self, config.channel_id)
        self.detector = UpdateDetector(self.poller, store, self.notifier)
        self.responder = CommandResponder(store, downloads_page=config.downloads_page)
        self.scheduler = PollScheduler(
            self.detector.run_cycle,
            initial_delay=config.initial_delay,
            interval=config.poll_interval,
        )
        self._startup_done = False

    async def setup_hook(self):
        """Called before connecting. Installs the slash command error handler."""
        logger.info("Bot setup hook called")
        self.tree.on_error = self.on_app_command_error

    async def on_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ):
        """Last-resort handler: make sure the interaction still gets a reply."""
        logger.error(f"Slash command error: {error}", exc_info=True)
        if interaction.response.is_done():
            return
        try:
            await interaction.response.send_message(**ERROR_REPLY.as_kwargs())
        except discord.HTTPException as e:
            logger.error(f"Failed to send error response: {e}")

    def _make_command(self, name: str, description: str) -> app_commands.Command:
        responder = self.responder

        async def callback(interaction: discord.Interaction):
            await responder.handle(interaction, name)

        return app_commands.Command(name=name, description=description, callback=callback)

    async def register_commands(self) -> bool:
        """
        Upsert the slash commands for the configured guild.

        Returns:
            True on success. Failures are logged; the bot keeps running.
        """
        guild = discord.Object(id=self.config.guild_id)
        try:
            self.tree.clear_commands(guild=guild)
            for name, description in COMMAND_DESCRIPTIONS.items():
                self.tree.add_command(self._make_command(name, description), guild=guild)

            synced = await self.tree.sync(guild=guild)
        except Exception as e:
            error = RegistrationError(e)
            logger.error(f"Error registering commands: {error}", exc_info=True)
            return False

        logger.info(f"Synced {len(synced)} commands to guild {self.config.guild_id}")
        for cmd in synced:
            logger.info(f"  - /{cmd.name}: {cmd.description}")
        return True

    async def send_startup_announcement(self) -> None:
        """Post the 'bot restarted' embed reflecting the persisted state."""
        try:
            embed = format_restart_embed(
                self.store.state, self.config.downloads_page, self.clock.timestamp()
            )
            await self.notifier.send_embed(embed)
            logger.info("Startup announcement sent to channel")
        except Exception as e:
            logger.error(f"Error sending startup announcement: {e}", exc_info=True)

    async def on_ready(self):
        """Called when bot successfully connects to Discord."""
        logger.info("=" * 60)
        logger.info("DISCORD BOT CONNECTED SUCCESSFULLY")
        logger.info(f"  Bot User: {self.user} (ID: {self.user.id if self.user else '?'})")
        logger.info(f"  Guilds: {len(self.guilds)}")
        logger.info(f"  Announcement channel: {self.config.channel_id}")
        logger.info("=" * 60)

        # on_ready fires again after reconnects; the startup sequence runs once.
        if self._startup_done:
            return
        self._startup_done = True

        await self.register_commands()
        await self.send_startup_announcement()
        self.scheduler.start()

    async def on_disconnect(self):
        logger.warning("Disconnected from Discord gateway")

    async def on_resumed(self):
        logger.info("Session resumed after disconnect")

    async def on_error(self, event_method: str, *args, **kwargs):
        """Called when an error occurs in an event handler."""
        logger.error(f"Error in event {event_method}", exc_info=True)

    async def close(self):
        """Stop polling and release the HTTP session before disconnecting."""
        await self.scheduler.stop()
        await self.upstream.close()
        await super().close()


async def run_bot(config: NotifyPatchConfig) -> None:
    """Load state, start the liveness server and run the bot until it exits."""
    store = StateStore(config.data_file)
    store.load()

    runner = await start_health_server(config.port)
    try:
        bot = PaperNotifyBot(config, store)
        async with bot:
            await bot.start(config.discord_token)
    finally:
        await runner.cleanup()


def main():
    """Main entry point with validation."""
    config = load_config()
    setup_logging(config)

    logger.info("=" * 60)
    logger.info("NOTIFYPATCH BOT STARTING")
    logger.info(f"  Time: {datetime.now().isoformat()}")
    logger.info(f"  PID: {os.getpid()}")
    logger.info(f"  Log directory: {config.log_dir}")
    logger.info(f"  State file: {config.data_file}")
    logger.info("=" * 60)

    logger.info("Validating Discord token...")
    token_valid, token_msg = validate_discord_token(config.discord_token)
    if not token_valid:
        logger.error(f"Discord token validation failed: {token_msg}")
        sys.exit(1)
    logger.info(f"  Discord token: {token_msg}")

    is_valid, error_msg = config.validate()
    if not is_valid:
        logger.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    logger.info("Configuration loaded successfully:")
    logger.info(f"  API: {config.api_base} (project: {config.project})")
    logger.info(f"  Poll interval: {config.poll_interval}s")
    logger.info(f"  Guild: {config.guild_id}")
    logger.info(f"  Liveness port: {config.port}")

    try:
        asyncio.run(run_bot(config))
    except discord.LoginFailure as e:
        logger.error(f"AUTHENTICATION FAILED: {e}")
        logger.error("Please check your DISCORD_TOKEN is valid")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Bot shutdown by keyboard interrupt (Ctrl+C)")
    except Exception as e:
        logger.error(f"Bot crashed with unexpected error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        logger.info("Bot shutdown complete")


if __name__ == "__main__":
    main()
