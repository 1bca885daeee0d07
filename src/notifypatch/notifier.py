"""
Posts messages to the configured announcement channel.
"""

import logging

import discord

logger = logging.getLogger(__name__)


class ChannelNotifier:
    """Sends embeds and plain text to one Discord channel."""

    def __init__(self, client: discord.Client, channel_id: int):
        self.client = client
        self.channel_id = channel_id

    async def get_channel(self) -> discord.abc.Messageable:
        """Resolve the channel from cache, falling back to an API fetch."""
        channel = self.client.get_channel(self.channel_id)
        if channel is None:
            channel = await self.client.fetch_channel(self.channel_id)
        return channel

    async def send_embed(self, embed: discord.Embed) -> None:
        channel = await self.get_channel()
        await channel.send(embed=embed)
        logger.debug(f"Sent embed '{embed.title}' to channel {self.channel_id}")

    async def send_text(self, text: str) -> None:
        channel = await self.get_channel()
        await channel.send(text)
        logger.debug(f"Sent message to channel {self.channel_id}: {text[:100]}")
