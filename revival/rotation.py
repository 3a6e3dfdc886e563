"""
revival/rotation.py
Moves the Dead Chat role to whoever revived the chat.

The grant to the new holder and the revokes from every stale holder run
side by side. One failed revoke never blocks the others or the grant; the
role may briefly sit on more than one member until the next rotation.
The announcement is a single reply that gets edited in place, and the
previous one is deleted so only the latest stays in the channel.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol

import discord

from revival.announce import Announcement, render

log = logging.getLogger("deadchat.rotation")


class Directory(Protocol):
    def holders(self) -> list[discord.Member]: ...
    async def grant(self, member: discord.Member) -> None: ...
    async def revoke(self, member: discord.Member) -> None: ...


class RotationOutcome(Enum):
    ROTATED        = "rotated"
    ALREADY_HOLDER = "already_holder"
    GRANT_FAILED   = "grant_failed"


@dataclass
class RotationResult:
    outcome: RotationOutcome
    holder_id: int
    removed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    announcement: Optional[discord.Message] = None

    @property
    def consistent(self) -> bool:
        """True when the new holder is the only one left with the role."""
        return self.outcome is RotationOutcome.ROTATED and not self.failed


class MarkerRotator:
    """Performs rotations one at a time and remembers the last announcement."""

    def __init__(self, role_id: int):
        self.role_id = role_id
        self.previous: Optional[discord.Message] = None
        self._lock = asyncio.Lock()

    async def rotate(
        self,
        new_holder: discord.Member,
        trigger: discord.Message,
        directory: Directory,
    ) -> RotationResult:
        async with self._lock:
            return await self._rotate(new_holder, trigger, directory)

    async def _rotate(
        self,
        new_holder: discord.Member,
        trigger: discord.Message,
        directory: Directory,
    ) -> RotationResult:
        placeholder, _ = await asyncio.gather(
            self._post_placeholder(trigger),
            self._delete_previous(),
        )

        holders = directory.holders()
        if len(holders) == 1 and holders[0].id == new_holder.id:
            log.warning("%s (%s) already holds the role alone; nothing to rotate.", new_holder, new_holder.id)
            await self._discard(placeholder)
            return RotationResult(RotationOutcome.ALREADY_HOLDER, holder_id=new_holder.id)

        # Revoking from the new holder would race the grant.
        stale = [m for m in holders if m.id != new_holder.id]
        granted, (removed, failed) = await asyncio.gather(
            self._grant(directory, new_holder),
            self._revoke_all(directory, stale),
        )

        if not granted:
            self.previous = placeholder
            return RotationResult(
                RotationOutcome.GRANT_FAILED,
                holder_id=new_holder.id,
                removed=removed,
                failed=failed,
                announcement=placeholder,
            )

        announcement = await self._finalize(placeholder, new_holder)
        self.previous = announcement
        log.info(
            "Role %s moved to %s (%s); removed from %d, %d failed.",
            self.role_id, new_holder, new_holder.id, len(removed), len(failed),
        )
        return RotationResult(
            RotationOutcome.ROTATED,
            holder_id=new_holder.id,
            removed=removed,
            failed=failed,
            announcement=announcement,
        )

    # ──────────────────────────────────────────
    # Steps
    # ──────────────────────────────────────────

    async def _post_placeholder(self, trigger: discord.Message) -> Optional[discord.Message]:
        try:
            return await trigger.reply(render(Announcement.PLACEHOLDER))
        except discord.HTTPException as e:
            log.error("Failed to reply to message %s: %s", trigger.id, e)
            return None

    async def _delete_previous(self) -> None:
        previous, self.previous = self.previous, None
        if previous is None:
            return
        try:
            await previous.delete()
        except discord.HTTPException as e:
            log.warning("Failed to delete previous announcement %s: %s", previous.id, e)

    async def _discard(self, message: Optional[discord.Message]) -> None:
        if message is None:
            return
        try:
            await message.delete()
        except discord.HTTPException as e:
            log.warning("Failed to delete placeholder %s: %s", message.id, e)

    async def _grant(self, directory: Directory, member: discord.Member) -> bool:
        try:
            await directory.grant(member)
        except discord.HTTPException as e:
            log.error("Failed to add role %s to %s (%s): %s", self.role_id, member, member.id, e)
            return False
        return True

    async def _revoke_all(
        self,
        directory: Directory,
        members: list[discord.Member],
    ) -> tuple[list[int], list[int]]:
        """Settle every revoke; returns (removed ids, failed ids)."""
        results = await asyncio.gather(
            *(directory.revoke(m) for m in members),
            return_exceptions=True,
        )
        removed: list[int] = []
        failed: list[int] = []
        for member, result in zip(members, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                log.warning("Failed to remove role from %s (%s): %s", member, member.id, result)
                failed.append(member.id)
            else:
                log.info("Removed role from %s (%s)", member, member.id)
                removed.append(member.id)
        return removed, failed

    async def _finalize(
        self,
        placeholder: Optional[discord.Message],
        new_holder: discord.Member,
    ) -> Optional[discord.Message]:
        if placeholder is None:
            return None
        content = render(Announcement.STOLEN, holder=new_holder.mention, role_id=self.role_id)
        try:
            edited = await placeholder.edit(
                content=content,
                allowed_mentions=discord.AllowedMentions.none(),
            )
        except discord.HTTPException as e:
            log.error("Failed to edit announcement %s: %s", placeholder.id, e)
            return placeholder
        return edited or placeholder
