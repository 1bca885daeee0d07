"""
Pytest fixtures for notifypatch tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.notifypatch.config import NotifyPatchConfig
from src.notifypatch.poller import BuildPoller
from src.notifypatch.state import StateStore
from src.notifypatch.timefmt import DisplayClock
from tests.notifypatch.fakes import API, FakeUpstream, paper_responses


@pytest.fixture
def mock_config(tmp_path):
    """Create a configuration for testing."""
    return NotifyPatchConfig(
        discord_token="test_token",
        channel_id=111,
        application_id=222,
        guild_id=333,
        port=3000,
        data_file=tmp_path / "data.json",
        log_dir=tmp_path / "logs",
        api_base=API,
        display_timezone="America/Argentina/Buenos_Aires",
    )


@pytest.fixture
def clock():
    return DisplayClock("America/Argentina/Buenos_Aires")


@pytest.fixture
def store(tmp_path):
    return StateStore(tmp_path / "data.json")


@pytest.fixture
def upstream():
    return FakeUpstream(paper_responses())


@pytest.fixture
def poller(upstream, clock):
    return BuildPoller(upstream, api_base=API, project="paper", clock=clock)


@pytest.fixture
def mock_notifier():
    """Create a mock channel notifier."""
    notifier = MagicMock()
    notifier.send_embed = AsyncMock()
    notifier.send_text = AsyncMock()
    return notifier


@pytest.fixture
def mock_interaction():
    """Create a mock Discord interaction."""
    interaction = MagicMock()
    interaction.user.__str__ = MagicMock(return_value="TestUser#1234")
    interaction.response.send_message = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    return interaction
