"""
revival/directory.py
Thin adapter over the guild member cache for one role.

Reads are snapshots of the cache at call time; they may be stale by the time
a grant or revoke lands on Discord.
"""

from __future__ import annotations
import logging

import discord

log = logging.getLogger("deadchat.directory")


def member_has_role(member: discord.Member, role_id: int) -> bool:
    return member.get_role(role_id) is not None


class RoleDirectory:
    """Who holds `role_id` in `guild`, and grant / revoke it."""

    def __init__(self, guild: discord.Guild, role_id: int, *, reason: str = "Dead Chat rotation"):
        self.guild   = guild
        self.role_id = role_id
        self.reason  = reason

    def holders(self) -> list[discord.Member]:
        role = self.guild.get_role(self.role_id)
        if role is not None:
            return list(role.members)
        log.warning("Role %s not found in guild %s; scanning members.", self.role_id, self.guild.id)
        return [m for m in self.guild.members if member_has_role(m, self.role_id)]

    async def grant(self, member: discord.Member) -> None:
        await member.add_roles(discord.Object(id=self.role_id), reason=self.reason)

    async def revoke(self, member: discord.Member) -> None:
        await member.remove_roles(discord.Object(id=self.role_id), reason=self.reason)
