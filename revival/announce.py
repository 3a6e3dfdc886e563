"""
revival/announce.py
Fixed message texts posted in the monitored channel.
"""

from __future__ import annotations
from datetime import timedelta
from enum import Enum


class Announcement(Enum):
    PLACEHOLDER  = "placeholder"
    STOLEN       = "stolen"
    UP_FOR_GRABS = "up_for_grabs"


_TEMPLATES: dict[Announcement, str] = {
    Announcement.PLACEHOLDER:
        "Hang on a second…",
    Announcement.STOLEN:
        "{holder}, you've stolen the {role} role.",
    Announcement.UP_FOR_GRABS:
        "Chat has been quiet for {quiet}. The {role} role is up for grabs.",
}


def role_mention(role_id: int) -> str:
    return f"<@&{role_id}>"


def _minutes(delta: timedelta) -> int:
    """Whole minutes, rounded up; a quiet spell is never reported as 0."""
    seconds = delta.total_seconds()
    return max(1, -int(-seconds // 60))


def render(kind: Announcement, **context) -> str:
    """Fill the template for `kind`. Missing keys are left as-is."""
    template = _TEMPLATES[kind]
    if "role_id" in context and "role" not in context:
        context["role"] = role_mention(context["role_id"])
    if isinstance(context.get("quiet_for"), timedelta):
        count = _minutes(context["quiet_for"])
        context["quiet"] = f"{count} minute" if count == 1 else f"{count} minutes"
    try:
        return template.format(**context)
    except KeyError:
        return template
