"""
bot/config.py
Environment-driven settings for each behavior.

Each cog loads only its own settings in setup(); a missing or malformed
variable raises ConfigError there, the extension fails to load, and the
rest of the bot keeps running.
"""

from __future__ import annotations
import os
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

from purge.anchored import DEFAULT_FETCH_LIMIT


class ConfigError(RuntimeError):
    """A required setting is missing or unusable."""


def _env(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def require_id(name: str, environ: Optional[Mapping[str, str]] = None, *, aliases: tuple[str, ...] = ()) -> int:
    """Read a Discord snowflake from the first of `name` / `aliases` that is set."""
    env = _env(environ)
    for key in (name, *aliases):
        raw = (env.get(key) or "").strip()
        if raw:
            break
    else:
        raise ConfigError(f"{name} is not set")
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a numeric id, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be a positive id, got {raw!r}")
    return value


def parse_id_set(raw: Optional[str]) -> frozenset[int]:
    """'123, 456 789' -> {123, 456, 789}. Non-numeric tokens are a config error."""
    out: set[int] = set()
    for token in re.split(r"[,\s;]+", raw or ""):
        if not token:
            continue
        if not token.isdigit():
            raise ConfigError(f"Invalid user id in ignore list: {token!r}")
        out.add(int(token))
    return frozenset(out)


def minutes(name: str, default: float, environ: Optional[Mapping[str, str]] = None) -> timedelta:
    env = _env(environ)
    raw = (env.get(name) or "").strip()
    if not raw:
        return timedelta(minutes=default)
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number of minutes, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return timedelta(minutes=value)


# ──────────────────────────────────────────────
# Dead Chat
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class DeadChatSettings:
    channel_id: int
    role_id: int
    ignored_user_ids: frozenset[int] = frozenset()
    window: timedelta = timedelta(minutes=15)
    hint_after: Optional[timedelta] = timedelta(minutes=60)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DeadChatSettings":
        env = _env(environ)
        window = minutes("DEADCHAT_WINDOW_MINUTES", 15, env)
        if window <= timedelta(0):
            raise ConfigError("DEADCHAT_WINDOW_MINUTES must be greater than zero")
        hint = minutes("DEADCHAT_HINT_MINUTES", 60, env)
        # An earlier hint would call the role up for grabs while the chat is still alive.
        if timedelta(0) < hint <= window:
            raise ConfigError(
                f"DEADCHAT_HINT_MINUTES ({hint}) must be longer than DEADCHAT_WINDOW_MINUTES ({window}), or 0 to disable"
            )
        return cls(
            channel_id=require_id("GENERAL_CHANNEL_ID", env),
            role_id=require_id("DEADCHAT_ROLE_ID", env),
            ignored_user_ids=parse_id_set(env.get("IGNORE_USER_ID")),
            window=window,
            hint_after=hint if hint > timedelta(0) else None,
        )


# ──────────────────────────────────────────────
# Quarantine purge
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class PurgeSettings:
    channel_id: int
    role_id: int
    fetch_limit: int = DEFAULT_FETCH_LIMIT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PurgeSettings":
        env = _env(environ)
        raw_limit = (env.get("PURGE_FETCH_LIMIT") or "").strip()
        try:
            limit = int(raw_limit) if raw_limit else DEFAULT_FETCH_LIMIT
        except ValueError as exc:
            raise ConfigError(f"PURGE_FETCH_LIMIT must be an integer, got {raw_limit!r}") from exc
        if not 1 <= limit <= DEFAULT_FETCH_LIMIT:
            raise ConfigError(f"PURGE_FETCH_LIMIT must be between 1 and {DEFAULT_FETCH_LIMIT}")
        return cls(
            channel_id=require_id("QUARANTINE_CHANNEL_ID", env, aliases=("SOURCE_CHANNEL_ID",)),
            role_id=require_id("QUARANTINE_ROLE_ID", env),
            fetch_limit=limit,
        )
