"""
purge/anchored.py
Bulk-deletes channel history up to the bot's own last message.

The anchor is the newest fetched message authored by the bot itself. That
message and everything posted at or before it is deleted, newer messages are
kept. No anchor in the batch means nothing is deleted. Discord refuses bulk
deletion of messages older than 14 days, so those are left alone.
"""

from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

import discord

log = logging.getLogger("deadchat.purge")

BULK_DELETE_MAX_AGE = timedelta(days=14)
DEFAULT_FETCH_LIMIT = 100

AnchorPredicate = Callable[[discord.Message], bool]


def authored_by(user_id: int) -> AnchorPredicate:
    """Anchor rule: the message author is exactly `user_id`."""
    def _is_anchor(message: discord.Message) -> bool:
        return message.author.id == user_id
    return _is_anchor


def find_anchor(messages: Sequence[discord.Message], is_anchor: AnchorPredicate) -> Optional[discord.Message]:
    """Most recent message in `messages` matching `is_anchor`, in any input order."""
    anchors = [m for m in messages if is_anchor(m)]
    if not anchors:
        return None
    return max(anchors, key=lambda m: m.created_at)


def select_purge_batch(
    messages: Sequence[discord.Message],
    is_anchor: AnchorPredicate,
    now: datetime,
) -> list[discord.Message]:
    """Messages to bulk-delete, oldest excluded past the 14-day ceiling."""
    anchor = find_anchor(messages, is_anchor)
    if anchor is None:
        return []
    cutoff = now - BULK_DELETE_MAX_AGE
    return [
        m for m in messages
        if m.created_at <= anchor.created_at and m.created_at > cutoff
    ]


async def purge_up_to(
    channel: discord.TextChannel,
    is_anchor: AnchorPredicate,
    *,
    limit: int = DEFAULT_FETCH_LIMIT,
    now: Optional[datetime] = None,
) -> int:
    """Fetch the last `limit` messages and delete up to the anchor. Returns the count deleted."""
    now = now or datetime.now(timezone.utc)
    messages = [m async for m in channel.history(limit=limit)]
    log.info("Fetched %d messages from channel %s", len(messages), channel.id)

    batch = select_purge_batch(messages, is_anchor, now)
    if not batch:
        log.info("No anchor (or nothing young enough) in channel %s; nothing deleted.", channel.id)
        return 0

    await channel.delete_messages(batch)
    log.info("Deleted %d messages in channel %s", len(batch), channel.id)
    return len(batch)


class PurgeContextError(RuntimeError):
    """A member update arrived without a guild."""
