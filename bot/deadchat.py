"""
bot/deadchat.py
The Dead Chat listener: whoever revives the monitored channel after a quiet
window takes the Dead Chat role from its current holder(s).
"""

from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands

from bot.config import DeadChatSettings
from revival.announce import Announcement, render
from revival.classifier import is_activity
from revival.directory import RoleDirectory, member_has_role
from revival.logic import RevivalContextError, RevivalDecision, RevivalMachine
from revival.rotation import MarkerRotator, RotationOutcome, RotationResult
from revival.timers import Clock, HintTimer

log = logging.getLogger("deadchat.events")


class DeadChat(commands.Cog):
    def __init__(self, bot: commands.Bot, settings: DeadChatSettings, clock: Optional[Clock] = None):
        self.bot      = bot
        self.settings = settings
        self.clock    = clock or Clock()
        self.machine  = RevivalMachine(window=settings.window, clock=self.clock)
        self.rotator  = MarkerRotator(settings.role_id)
        self.hint     = HintTimer()
        self.last_result: Optional[RotationResult] = None

    def cog_unload(self) -> None:
        self.hint.cancel()

    # ────────────────────────────────────────
    # on_message
    # ────────────────────────────────────────

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if not is_activity(
            message,
            channel_id=self.settings.channel_id,
            ignored_user_ids=self.settings.ignored_user_ids,
        ):
            return

        guild, member = self._require_context(message)
        decision = self.machine.observe(
            message.created_at,
            author_is_holder=member_has_role(member, self.settings.role_id),
        )
        # The holder talking does not keep the chat alive, so it neither
        # arms nor refreshes the hint either.
        if decision is RevivalDecision.HOLDER_IGNORED:
            return

        self._arm_hint(message.channel, message.created_at)
        if decision is not RevivalDecision.REVIVED:
            return

        directory = RoleDirectory(guild, self.settings.role_id)
        result = await self.rotator.rotate(member, message, directory)
        self.last_result = result
        if result.outcome is RotationOutcome.GRANT_FAILED:
            log.error("Rotation to %s (%s) failed; announcement left as placeholder.", member, member.id)
        elif result.failed:
            log.warning("Role still on %d stale holder(s) until the next rotation: %s", len(result.failed), result.failed)

    @staticmethod
    def _require_context(message: discord.Message) -> tuple[discord.Guild, discord.Member]:
        guild = message.guild
        if guild is None:
            raise RevivalContextError(f"Message {message.id} in a guild channel has no guild.")
        member = message.author
        if not isinstance(member, discord.Member):
            raise RevivalContextError(f"Author of message {message.id} is not a guild member.")
        return guild, member

    # ────────────────────────────────────────
    # "Up for grabs" hint
    # ────────────────────────────────────────

    def _arm_hint(self, channel: discord.abc.Messageable, activity_at: datetime) -> None:
        delay = self.settings.hint_after
        if delay is None:
            return

        async def _fire() -> None:
            # A newer message re-arms the timer, but check anyway.
            if self.machine.state.last_activity != activity_at:
                return
            await self._post_hint(channel)

        self.hint.arm(delay, _fire)

    async def _post_hint(self, channel: discord.abc.Messageable) -> None:
        text = render(
            Announcement.UP_FOR_GRABS,
            role_id=self.settings.role_id,
            quiet_for=self.settings.hint_after,
        )
        try:
            await channel.send(text, allowed_mentions=discord.AllowedMentions.none())
            log.info("Posted up-for-grabs hint.")
        except discord.HTTPException as e:
            log.error("Failed to post hint: %s", e)


async def setup(bot: commands.Bot) -> None:
    settings = DeadChatSettings.from_env()
    log.info(
        "Dead Chat watching channel %s for role %s (window %s, hint %s, %d ignored).",
        settings.channel_id, settings.role_id, settings.window,
        settings.hint_after or "off", len(settings.ignored_user_ids),
    )
    await bot.add_cog(DeadChat(bot, settings))
