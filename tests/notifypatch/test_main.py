"""
Tests for bot wiring: logging setup, token checks, command registration and
the startup sequence.
"""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.notifypatch.formatters import NOT_AVAILABLE
from src.notifypatch.main import (
    PACKAGE_LOGGER,
    PaperNotifyBot,
    setup_logging,
    validate_discord_token,
)
from src.notifypatch.responder import COMMAND_DESCRIPTIONS
from tests.notifypatch.fakes import FakeUpstream, make_record, paper_responses


@pytest.fixture
def bot(mock_config, store, mock_notifier):
    bot = PaperNotifyBot(mock_config, store, upstream=FakeUpstream(paper_responses()))
    bot.notifier = mock_notifier
    bot.detector.notifier = mock_notifier
    return bot


class TestValidateDiscordToken:

    def test_empty_token(self):
        assert validate_discord_token("")[0] is False

    def test_wrong_number_of_parts(self):
        ok, message = validate_discord_token("abc.def")
        assert ok is False
        assert "3 parts" in message

    def test_well_formed_token(self):
        assert validate_discord_token("MTIzNDU2Nzg5MDEyMzQ1Njc4.GabcDE.abcdefghijklmnopqrstuvwxyz0")[0] is True


class TestSetupLogging:

    def test_creates_log_file(self, mock_config):
        pkg_logger = setup_logging(mock_config)
        try:
            assert pkg_logger.name == PACKAGE_LOGGER
            logging.getLogger(f"{PACKAGE_LOGGER}.detector").info("hello from detector")
            for handler in pkg_logger.handlers:
                handler.flush()
            content = (mock_config.log_dir / "notifypatch.log").read_text(encoding="utf-8")
            assert "hello from detector" in content
        finally:
            for handler in list(pkg_logger.handlers):
                handler.close()
                pkg_logger.removeHandler(handler)
            logging.getLogger("discord").handlers.clear()

    def test_repeat_setup_does_not_duplicate_handlers(self, mock_config):
        setup_logging(mock_config)
        pkg_logger = setup_logging(mock_config)
        try:
            assert len(pkg_logger.handlers) == 2
        finally:
            for handler in list(pkg_logger.handlers):
                handler.close()
                pkg_logger.removeHandler(handler)
            logging.getLogger("discord").handlers.clear()


class TestBotWiring:

    def test_pipeline_shares_one_store(self, bot, store):
        assert bot.detector.store is store
        assert bot.responder.store is store
        assert bot.scheduler.interval == 300
        assert bot.scheduler.initial_delay == 2

    def test_register_commands_to_guild(self, bot, mock_config):
        synced = [SimpleNamespace(name=n, description=d) for n, d in COMMAND_DESCRIPTIONS.items()]

        async def run():
            with patch.object(bot.tree, "sync", AsyncMock(return_value=synced)) as sync:
                ok = await bot.register_commands()
                return ok, sync

        ok, sync = asyncio.run(run())
        assert ok is True
        guild = sync.await_args.kwargs["guild"]
        assert guild.id == mock_config.guild_id
        names = sorted(cmd.name for cmd in bot.tree.get_commands(guild=guild))
        assert names == sorted(COMMAND_DESCRIPTIONS)

    def test_register_commands_is_repeatable(self, bot):
        async def run():
            with patch.object(bot.tree, "sync", AsyncMock(return_value=[])):
                await bot.register_commands()
                return await bot.register_commands()

        assert asyncio.run(run()) is True

    def test_register_failure_is_logged_not_raised(self, bot, caplog):
        async def run():
            with patch.object(bot.tree, "sync", AsyncMock(side_effect=RuntimeError("403 Forbidden"))):
                return await bot.register_commands()

        assert asyncio.run(run()) is False
        assert "Error registering commands" in caplog.text

    def test_startup_announcement_without_data(self, bot, mock_notifier):
        asyncio.run(bot.send_startup_announcement())
        embed = mock_notifier.send_embed.await_args.args[0]
        assert embed.title == "🔄 Bot restarted"
        assert embed.fields[0].value == f"Paper {NOT_AVAILABLE}"

    def test_startup_announcement_with_data(self, bot, store, mock_notifier):
        store.record_build(make_record(42))
        asyncio.run(bot.send_startup_announcement())
        embed = mock_notifier.send_embed.await_args.args[0]
        assert embed.fields[1].value == "#42"

    def test_startup_announcement_failure_is_swallowed(self, bot, mock_notifier):
        mock_notifier.send_embed.side_effect = RuntimeError("no access")
        asyncio.run(bot.send_startup_announcement())

    def test_on_ready_runs_startup_once(self, bot):
        bot.register_commands = AsyncMock(return_value=True)
        bot.send_startup_announcement = AsyncMock()
        bot.scheduler.start = MagicMock()

        async def run():
            await bot.on_ready()
            await bot.on_ready()

        asyncio.run(run())
        bot.register_commands.assert_awaited_once()
        bot.send_startup_announcement.assert_awaited_once()
        bot.scheduler.start.assert_called_once()
