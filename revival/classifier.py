"""
revival/classifier.py
Decides whether a message counts as chat activity for the Dead Chat window.

Emoji-only, attachment-only and sticker-only posts, bots, join notices and
ignored authors never count. The check is pure and never raises on a
well-formed message.
"""

from __future__ import annotations
import re
from typing import Collection

import discord

# Custom emotes (<:name:id>, <a:name:id>), keycaps and every Unicode
# Extended_Pictographic code point, plus the joiners / modifiers / tag
# characters that glue multi-codepoint emoji together.
_PICTOGRAPHS = (
    r"\u00A9\u00AE\u203C\u2049\u2122\u2139"   # (c) (r) !! ?! tm info
    r"\u2194-\u2199\u21A9\u21AA"               # arrows
    r"\u2300-\u23FF"                           # misc technical (watch, hourglass, ...)
    r"\u24C2\u25AA\u25AB\u25B6\u25C0\u25FB-\u25FE"  # circled M, geometric shapes
    r"\u2600-\u27BF"                           # misc symbols, dingbats
    r"\u2934\u2935"                            # curved arrows
    r"\u2B00-\u2BFF"                           # arrows, stars
    r"\u3030\u303D\u3297\u3299"                # wavy dash, part mark, circled ideographs
    r"\U0001F000-\U0001FFFD"                   # pictographs, emoticons, transport, flags, skin tones
)
_JOINERS = r"\u200D\uFE0E\uFE0F\u20E3\U000E0020-\U000E007F"  # ZWJ, variation selectors, keycap, tags

_EMOJI_ONLY = re.compile(
    r"^(?:<a?:\w+:\d+>"
    r"|[#*0-9]\uFE0F?\u20E3"
    r"|[" + _PICTOGRAPHS + _JOINERS + r"]"
    r"|\s)+$"
)


def is_emoji_only(text: str) -> bool:
    """True when `text` is non-empty and made only of emoji and whitespace."""
    content = (text or "").strip()
    return bool(content) and _EMOJI_ONLY.match(content) is not None


def has_media(message: discord.Message) -> bool:
    attachments = getattr(message, "attachments", None) or []
    stickers    = getattr(message, "stickers", None) or []
    return len(attachments) > 0 or len(stickers) > 0


def is_noise(message: discord.Message) -> bool:
    """
    Emoji-only text with nothing attached, or attachments/stickers with no
    text at all.
    """
    content = (getattr(message, "content", "") or "").strip()
    if not content:
        return has_media(message)
    return is_emoji_only(content) and not has_media(message)


def is_activity(
    message: discord.Message,
    *,
    channel_id: int,
    ignored_user_ids: Collection[int] = (),
) -> bool:
    """Return True if `message` should reset (and possibly revive) the chat."""
    author = getattr(message, "author", None)
    if author is None or getattr(author, "bot", False):
        return False

    channel = getattr(message, "channel", None)
    if int(getattr(channel, "id", 0) or 0) != int(channel_id):
        return False

    if getattr(message, "type", None) == discord.MessageType.new_member:
        return False

    if is_noise(message):
        return False

    if int(getattr(author, "id", 0) or 0) in ignored_user_ids:
        return False

    return True
