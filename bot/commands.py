"""
bot/commands.py
Slash commands for operators.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from revival.directory import RoleDirectory

if TYPE_CHECKING:
    from bot.deadchat import DeadChat

log = logging.getLogger("deadchat.commands")

MAX_LISTED_HOLDERS = 10


def build_status_embed(cog: "DeadChat", guild: Optional[discord.Guild]) -> discord.Embed:
    state = cog.machine.state
    embed = discord.Embed(title="💀 Dead Chat", colour=discord.Colour.dark_grey())
    embed.add_field(name="Channel", value=f"<#{cog.settings.channel_id}>", inline=True)
    embed.add_field(name="Window", value=f"{int(state.window.total_seconds() // 60)} min", inline=True)
    embed.add_field(
        name="Dead",
        value=discord.utils.format_dt(state.deadline, "R"),
        inline=True,
    )

    if guild is not None:
        holders = RoleDirectory(guild, cog.settings.role_id).holders()
        shown = ", ".join(m.mention for m in holders[:MAX_LISTED_HOLDERS]) or "Nobody"
        if len(holders) > MAX_LISTED_HOLDERS:
            shown += f" (+{len(holders) - MAX_LISTED_HOLDERS} more)"
        embed.add_field(name="Holder", value=shown, inline=False)

    embed.add_field(name="Revivals", value=str(state.revivals), inline=True)
    embed.add_field(name="Hint pending", value="Yes" if cog.hint.pending else "No", inline=True)
    return embed


class DeadChatCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        log.info("Bot logged in as %s (ID: %s)", self.bot.user, self.bot.user.id)
        try:
            synced = await self.bot.tree.sync()
            log.info("Synced %d slash commands.", len(synced))
        except discord.HTTPException as e:
            log.error("Failed to sync slash commands: %s", e)

    @app_commands.command(name="deadchat", description="Show the Dead Chat countdown and holder")
    @app_commands.default_permissions(manage_roles=True)
    async def deadchat(self, interaction: discord.Interaction) -> None:
        cog: Optional[DeadChat] = self.bot.get_cog("DeadChat")
        if cog is None:
            await interaction.response.send_message("❌ Dead Chat is disabled.", ephemeral=True)
            return
        embed = build_status_embed(cog, interaction.guild)
        await interaction.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(DeadChatCommands(bot))
