"""
Discord message formatting.

Builds the embeds and text lines the bot sends, and applies Discord's
character limits at this boundary so the rest of the code never has to.
"""

from typing import Optional

import discord

from .state import BuildRecord, PersistedState

# Discord limits
MAX_EMBED_FIELD_VALUE = 1024
HISTORY_CHANGELOG_LIMIT = 500
HISTORY_TIME_LIMIT = 100
HISTORY_DISPLAY_COUNT = 3

# Embed colors
COLOR_NEW_BUILD = 0x00BFFF
COLOR_STATUS = 0x00FF88
COLOR_HISTORY = 0xFFCC00
COLOR_RESTART = 0x00FFCC

NOT_AVAILABLE = "Not available"
NO_INFORMATION = "No information available"
NO_CHANGES = "No changes"
NO_DATE = "Date not available"

UPDATE_FOOTER = "PaperMC Update Bot"
STATUS_FOOTER = "PaperMC Status Bot"
HISTORY_FOOTER = "PaperMC History Bot"

POLL_FAILED_MESSAGE = "⚠️ Could not check for PaperMC updates. Try again later."
COMMAND_ERROR_MESSAGE = "❌ An error occurred while processing the command"
NO_BUILD_MESSAGE = "⚠️ No build information available"
NO_HISTORY_MESSAGE = "⚠️ No build history available"


def clip(text: Optional[str], limit: int) -> str:
    """Cut text to at most `limit` characters."""
    return (text or "")[:limit]


def download_link(url: str, label: str = "Click here") -> str:
    return f"[{label}]({url})"


def joined_changelog(record: Optional[BuildRecord], limit: int = MAX_EMBED_FIELD_VALUE) -> str:
    """Changelog lines joined by newlines and clipped, or '' if there are none."""
    if record is None or not isinstance(record.changelog, list):
        return ""
    return clip("\n".join(record.changelog), limit)


def format_new_build_embed(record: BuildRecord) -> discord.Embed:
    """Announcement for a newly detected build."""
    embed = discord.Embed(title="📰 New PaperMC version", color=COLOR_NEW_BUILD)
    embed.add_field(name="📦 Version", value=f"Paper {record.version}", inline=True)
    embed.add_field(name="🔨 Build", value=f"#{record.build}", inline=True)
    embed.add_field(
        name="📜 Recent changes", value=joined_changelog(record) or NO_CHANGES, inline=False
    )
    embed.add_field(
        name="🕒 Date", value=clip(record.time, MAX_EMBED_FIELD_VALUE) or NO_DATE, inline=False
    )
    embed.add_field(name="📥 Download", value=download_link(record.download_url), inline=False)
    embed.timestamp = discord.utils.utcnow()
    embed.set_footer(text=UPDATE_FOOTER)
    return embed


def format_status_embed(state: PersistedState, downloads_page: str) -> discord.Embed:
    """Reply for the status command."""
    embed = discord.Embed(title="📊 PaperMC current status", color=COLOR_STATUS)
    embed.add_field(name="📦 Version", value=str(state.last_version or NOT_AVAILABLE), inline=True)
    embed.add_field(name="🔨 Build", value=str(state.last_build or NOT_AVAILABLE), inline=True)

    latest = state.latest
    embed.add_field(
        name="📜 Recent changes", value=joined_changelog(latest) or NO_INFORMATION, inline=False
    )
    url = (latest.download_url if latest else "") or downloads_page
    embed.add_field(name="📥 Download", value=download_link(url), inline=False)
    embed.timestamp = discord.utils.utcnow()
    embed.set_footer(text=STATUS_FOOTER)
    return embed


def format_current_build(state: PersistedState) -> str:
    """Reply for the build command."""
    if state.last_version and state.last_build:
        return f"🔨 Current build: **Paper {state.last_version} Build #{state.last_build}**"
    return NO_BUILD_MESSAGE


def format_history_entry(record: BuildRecord, downloads_page: str) -> str:
    changelog = "\n".join(record.changelog) if record.changelog else ""
    changelog = clip(changelog or "No changes available", HISTORY_CHANGELOG_LIMIT)
    time_text = clip(record.time or NO_DATE, HISTORY_TIME_LIMIT)
    url = record.download_url or downloads_page
    return f"{changelog}\n🕒 {time_text}\n📥 {download_link(url, 'Download')}"


def format_history_embed(state: PersistedState, downloads_page: str) -> discord.Embed:
    """Reply for the history command: up to three most recent builds."""
    embed = discord.Embed(title="📜 Build history", color=COLOR_HISTORY)

    records = state.last_builds_data[:HISTORY_DISPLAY_COUNT]
    if records:
        for record in records:
            embed.add_field(
                name=f"📦 Paper {record.version} Build #{record.build}",
                value=format_history_entry(record, downloads_page),
                inline=False,
            )
    else:
        embed.description = NO_HISTORY_MESSAGE

    embed.timestamp = discord.utils.utcnow()
    embed.set_footer(text=HISTORY_FOOTER)
    return embed


def format_restart_embed(
    state: PersistedState, downloads_page: str, now_text: str
) -> discord.Embed:
    """
    Announcement sent once when the bot comes online.

    Args:
        state: Current persisted state
        downloads_page: Link used when no build has been recorded
        now_text: Display time used when no build has been recorded
    """
    latest = state.latest
    version = state.last_version or NOT_AVAILABLE
    build = state.last_build or NOT_AVAILABLE

    embed = discord.Embed(
        title="🔄 Bot restarted",
        description="The bot is online and watching for PaperMC updates.",
        color=COLOR_RESTART,
    )
    embed.add_field(name="📦 Version", value=f"Paper {version}", inline=True)
    embed.add_field(name="🔨 Build", value=f"#{build}", inline=True)
    embed.add_field(
        name="📜 Recent changes", value=joined_changelog(latest) or NO_INFORMATION, inline=False
    )
    time_text = (latest.time if latest else "") or now_text
    embed.add_field(name="🕒 Date", value=clip(time_text, MAX_EMBED_FIELD_VALUE), inline=False)
    url = (latest.download_url if latest else "") or downloads_page
    embed.add_field(name="📥 Download", value=download_link(url), inline=False)
    embed.timestamp = discord.utils.utcnow()
    embed.set_footer(text=UPDATE_FOOTER)
    return embed
