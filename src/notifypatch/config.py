"""
Bot configuration management.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

USER_AGENT = "notifypatch-bot/1.0"
REQUEST_TIMEOUT = 10  # seconds, per upstream request
INITIAL_POLL_DELAY = 2  # seconds after startup
POLL_INTERVAL = 5 * 60  # seconds between poll cycles

DEFAULT_API_BASE = "https://api.papermc.io/v2"
DEFAULT_DOWNLOADS_PAGE = "https://papermc.io/downloads/paper"


def _env_int(name: str, default: int = 0) -> int:
    """Read an integer from the environment, falling back on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class NotifyPatchConfig:
    """Configuration for the PaperMC notification bot."""

    # Discord credentials and targets (required)
    discord_token: str = field(default_factory=lambda: os.getenv("DISCORD_TOKEN", ""))
    channel_id: int = field(default_factory=lambda: _env_int("CHANNEL_ID"))
    application_id: int = field(default_factory=lambda: _env_int("CLIENT_ID"))
    guild_id: int = field(default_factory=lambda: _env_int("GUILD_ID"))

    # Liveness endpoint
    port: int = field(default_factory=lambda: _env_int("PORT", 3000))

    # Local files
    data_file: Path = field(
        default_factory=lambda: Path(os.getenv("DATA_FILE", "data.json"))
    )
    log_dir: Path = field(default_factory=lambda: Path(os.getenv("LOG_DIR", "logs")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Upstream API
    api_base: str = field(
        default_factory=lambda: os.getenv("PAPER_API_BASE", DEFAULT_API_BASE)
    )
    project: str = field(default_factory=lambda: os.getenv("PAPER_PROJECT", "paper"))
    user_agent: str = USER_AGENT
    request_timeout: float = REQUEST_TIMEOUT

    # Polling
    initial_delay: float = INITIAL_POLL_DELAY
    poll_interval: float = POLL_INTERVAL

    # Display
    display_timezone: str = field(
        default_factory=lambda: os.getenv(
            "DISPLAY_TIMEZONE", "America/Argentina/Buenos_Aires"
        )
    )
    downloads_page: str = DEFAULT_DOWNLOADS_PAGE

    def __post_init__(self):
        """Normalize values that may arrive as strings."""
        self.data_file = Path(self.data_file)
        self.log_dir = Path(self.log_dir)
        self.api_base = self.api_base.rstrip("/")
        self.log_level = self.log_level.upper()

    def validate(self) -> tuple[bool, str]:
        """Validate that required configuration is present."""
        if not self.discord_token:
            return False, "DISCORD_TOKEN environment variable not set"
        if not self.channel_id:
            return False, "CHANNEL_ID environment variable not set or not numeric"
        if not self.application_id:
            return False, "CLIENT_ID environment variable not set or not numeric"
        if not self.guild_id:
            return False, "GUILD_ID environment variable not set or not numeric"
        if not 0 < self.port < 65536:
            return False, f"PORT out of range: {self.port}"
        return True, "Configuration valid"


def load_config() -> NotifyPatchConfig:
    """Load configuration from environment variables."""
    return NotifyPatchConfig()
