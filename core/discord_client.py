"""
Discord Chat Client

discord.py adapter used by the gallery cleaner. The cleaner never needs
gateway events, so the client only logs in over REST:
- Resolves channel names
- Pages through channel history (discord.py handles pagination and rate limits)
- Deletes messages and posts admin summaries
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

import aiohttp
import discord

from core.errors import ChannelLookupError, DeleteError, SendError, SessionError, describe
from core.ports import FetchError, HistoryItem

logger = logging.getLogger(__name__)

# Raised by discord.py once its own retries are used up
TRANSPORT_ERRORS = (discord.HTTPException, OSError, aiohttp.ClientError, asyncio.TimeoutError)

# Consecutive failed pages before a history is given up
MAX_FETCH_FAILURES = 3


class DiscordChatClient:
    """
    Thin wrapper around discord.Client.

    Translates discord.py and transport exceptions into the cleaner's own
    errors so the purge pass and orchestrator never import discord.
    """

    def __init__(
        self,
        bot_token: str,
        client: Optional[discord.Client] = None,
        max_fetch_failures: int = MAX_FETCH_FAILURES,
    ):
        self.bot_token = bot_token
        self.max_fetch_failures = max_fetch_failures

        # Message content is needed to see links in message text
        if client is None:
            intents = discord.Intents.default()
            intents.message_content = True
            client = discord.Client(intents=intents)
        self._client = client

        self._channels: dict[int, discord.abc.Messageable] = {}

    async def start(self):
        """Log in to Discord. Raises SessionError on a bad token or network failure."""
        try:
            await self._client.login(self.bot_token)
        except discord.LoginFailure as e:
            raise SessionError(f"Invalid bot token: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise SessionError(f"Discord login failed: {describe(e)}") from e

        logger.info(f"Discord client logged in as {self._client.user}")

    async def stop(self):
        """Close the HTTP session"""
        if not self._client.is_closed():
            await self._client.close()
        self._channels.clear()
        logger.info("Discord client closed")

    async def __aenter__(self) -> "DiscordChatClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def _get_channel(self, channel_id: int) -> discord.abc.Messageable:
        if channel_id in self._channels:
            return self._channels[channel_id]

        channel = self._client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._client.fetch_channel(channel_id)
            except discord.NotFound:
                raise ChannelLookupError(channel_id, "not found")
            except discord.Forbidden:
                raise ChannelLookupError(channel_id, "no access")
            except discord.InvalidData as e:
                raise ChannelLookupError(channel_id, str(e)) from e
            except TRANSPORT_ERRORS as e:
                raise ChannelLookupError(channel_id, describe(e)) from e

        if not isinstance(channel, discord.abc.Messageable):
            raise ChannelLookupError(channel_id, "not a text channel")

        self._channels[channel_id] = channel
        return channel

    async def resolve_channel_name(self, channel_id: int) -> str:
        channel = await self._get_channel(channel_id)
        name = getattr(channel, "name", None)
        if not name:
            raise ChannelLookupError(channel_id, "channel has no name")
        return name

    async def history(self, channel_id: int) -> AsyncIterator[HistoryItem]:
        """
        Yield every message in the channel, newest first.

        A failed page yields a FetchError and the history is reopened before
        the last message seen. After max_fetch_failures failures in a row
        the iteration ends.
        """
        try:
            channel = await self._get_channel(channel_id)
        except ChannelLookupError as e:
            yield FetchError(channel_id, e)
            return

        before = None
        failures = 0
        while True:
            try:
                async for message in channel.history(limit=None, before=before):
                    before = message
                    failures = 0
                    yield message
                return
            except TRANSPORT_ERRORS as e:
                failures += 1
                yield FetchError(channel_id, e)

            if failures >= self.max_fetch_failures:
                logger.error(
                    f"Giving up on history of channel {channel_id} "
                    f"after {failures} failed fetches"
                )
                return

    async def delete(self, message: discord.Message) -> None:
        try:
            await message.delete()
        except TRANSPORT_ERRORS as e:
            raise DeleteError(message.id, e) from e

    async def send(self, channel_id: int, text: str) -> None:
        try:
            channel = await self._get_channel(channel_id)
        except ChannelLookupError as e:
            raise SendError(channel_id, e) from e

        try:
            await channel.send(text)
        except TRANSPORT_ERRORS as e:
            raise SendError(channel_id, e) from e
