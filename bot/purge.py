"""
bot/purge.py
Clears the quarantine channel down to the bot's last message whenever a
member is newly given the quarantine role.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional

import discord
from discord.ext import commands

from bot.config import PurgeSettings
from purge.anchored import PurgeContextError, authored_by, purge_up_to

log = logging.getLogger("deadchat.purge.events")


def gained_role(before: discord.Member, after: discord.Member, role_id: int) -> bool:
    """Edge check: `after` has the role and `before` did not."""
    return before.get_role(role_id) is None and after.get_role(role_id) is not None


class QuarantinePurge(commands.Cog):
    def __init__(self, bot: commands.Bot, settings: PurgeSettings):
        self.bot      = bot
        self.settings = settings
        self._lock    = asyncio.Lock()

    @commands.Cog.listener()
    async def on_member_update(self, before: discord.Member, after: discord.Member) -> None:
        if not gained_role(before, after, self.settings.role_id):
            return
        if after.guild is None:
            raise PurgeContextError(f"Member update for {after.id} has no guild.")

        log.info("%s (%s) received the quarantine role; purging.", after, after.id)
        async with self._lock:
            await self.purge(after.guild)

    async def purge(self, guild: discord.Guild) -> int:
        channel = await self._resolve_channel(guild)
        if channel is None:
            return 0
        me = self.bot.user
        if me is None:
            log.warning("Bot user not ready; skipping purge.")
            return 0
        try:
            return await purge_up_to(
                channel,
                authored_by(me.id),
                limit=self.settings.fetch_limit,
            )
        except discord.HTTPException as e:
            log.error("Purge of channel %s failed: %s", channel.id, e)
            return 0

    async def _resolve_channel(self, guild: discord.Guild) -> Optional[discord.TextChannel]:
        channel_id = self.settings.channel_id
        channel = guild.get_channel(channel_id)
        if channel is None:
            try:
                channel = await guild.fetch_channel(channel_id)
            except discord.HTTPException as e:
                log.error("Channel not found: %s (%s)", channel_id, e)
                return None
        if not isinstance(channel, discord.TextChannel):
            log.error("Channel %s is not a text channel.", channel_id)
            return None
        return channel


async def setup(bot: commands.Bot) -> None:
    settings = PurgeSettings.from_env()
    log.info(
        "Quarantine purge on role %s for channel %s (batch %d).",
        settings.role_id, settings.channel_id, settings.fetch_limit,
    )
    await bot.add_cog(QuarantinePurge(bot, settings))
