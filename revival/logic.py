"""
revival/logic.py

Decides WHEN a message revives the chat.
The channel is "dead" once a qualifying message arrives at or after the
current deadline. Every qualifying message (revival or not) pushes the
deadline to its own timestamp plus the window, so the window slides.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from revival.timers import Clock

log = logging.getLogger("deadchat.logic")

DEFAULT_WINDOW = timedelta(minutes=15)


class RevivalDecision(Enum):
    HOLDER_IGNORED = "holder_ignored"   # author already has the role
    ALIVE          = "alive"            # deadline not reached, countdown reset
    REVIVED        = "revived"          # deadline passed, rotate the role


@dataclass
class RevivalWindow:
    """Sliding inactivity window for one channel."""
    deadline: datetime
    window: timedelta = DEFAULT_WINDOW
    last_activity: Optional[datetime] = None
    revivals: int = 0

    def advance(self, timestamp: datetime) -> bool:
        """
        Compare against the deadline and move it, in one step.
        Returns True if the chat was dead at `timestamp`.
        """
        was_dead = timestamp >= self.deadline
        self.deadline = timestamp + self.window
        self.last_activity = timestamp
        if was_dead:
            self.revivals += 1
        return was_dead

    def is_dead(self, now: datetime) -> bool:
        return now >= self.deadline


@dataclass
class RevivalMachine:
    """
    Owns the RevivalWindow for the monitored channel.

    The first deadline is one full window after construction, so a freshly
    started bot needs a full window of silence before the first rotation.
    """
    window: timedelta = DEFAULT_WINDOW
    clock: Clock = field(default_factory=Clock)
    state: RevivalWindow = field(init=False)

    def __post_init__(self) -> None:
        started_at = self.clock.now()
        self.state = RevivalWindow(deadline=started_at + self.window, window=self.window)
        log.info("Revival window %s; first deadline %s", self.window, self.state.deadline.isoformat())

    @property
    def deadline(self) -> datetime:
        return self.state.deadline

    def observe(self, timestamp: datetime, *, author_is_holder: bool) -> RevivalDecision:
        """Feed one qualifying message into the window."""
        if author_is_holder:
            log.debug("Holder spoke at %s; window unchanged.", timestamp.isoformat())
            return RevivalDecision.HOLDER_IGNORED

        # No await between compare and write: two messages cannot both see
        # the same deadline as expired.
        if not self.state.advance(timestamp):
            log.info("Chat is alive. Dead again if no reply by %s", self.state.deadline.isoformat())
            return RevivalDecision.ALIVE

        log.info("Chat revived at %s (revival #%d)", timestamp.isoformat(), self.state.revivals)
        return RevivalDecision.REVIVED


class RevivalContextError(RuntimeError):
    """A monitored-channel message arrived without a guild or a guild member."""
