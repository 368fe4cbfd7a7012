"""Voting window calculations.

A motion's voting window ends at its end override when one is set, otherwise
``planned_duration`` minutes after voting started. Nothing here reads the
system clock: every function takes ``now`` from the caller.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from convention_voting.core.constants import URGENT_THRESHOLD_MINUTES
from convention_voting.core.utils import to_utc

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
OVERTIME_PREFIX = "Over by "


@dataclass(frozen=True)
class VotingWindow:
    """Countdown state of a motion at one instant.

    ``remaining`` and ``overtime`` are never both positive; both are zero
    before voting starts and at the exact end instant.
    """

    ends_at: Optional[datetime]
    remaining: timedelta
    overtime: timedelta
    is_urgent: bool
    is_expired: bool

    @property
    def has_started(self) -> bool:
        return self.ends_at is not None

    @property
    def remaining_seconds(self) -> int:
        return int(self.remaining.total_seconds())

    @property
    def overtime_seconds(self) -> int:
        return int(self.overtime.total_seconds())


def voting_ends_at(
    voting_started_at: Optional[datetime],
    planned_duration: int,
    end_override: Optional[datetime] = None,
) -> Optional[datetime]:
    """Effective end of voting, or None when voting has not started."""
    if voting_started_at is None:
        return None
    if end_override is not None:
        return to_utc(end_override)
    return to_utc(voting_started_at) + timedelta(minutes=planned_duration)


def compute_window(
    voting_started_at: Optional[datetime],
    planned_duration: int,
    end_override: Optional[datetime],
    now: datetime,
    urgent_threshold_minutes: int = URGENT_THRESHOLD_MINUTES,
) -> VotingWindow:
    """Derive remaining time, overtime and the urgent/expired flags."""
    ends_at = voting_ends_at(voting_started_at, planned_duration, end_override)
    if ends_at is None:
        return VotingWindow(
            ends_at=None,
            remaining=timedelta(0),
            overtime=timedelta(0),
            is_urgent=False,
            is_expired=False,
        )

    now = to_utc(now)
    delta = ends_at - now
    remaining = max(timedelta(0), delta)
    overtime = max(timedelta(0), -delta)

    return VotingWindow(
        ends_at=ends_at,
        remaining=remaining,
        overtime=overtime,
        is_urgent=timedelta(0) < remaining < timedelta(minutes=urgent_threshold_minutes),
        is_expired=now >= ends_at,
    )


def window_for_motion(motion, now: datetime, urgent_threshold_minutes: int = URGENT_THRESHOLD_MINUTES) -> VotingWindow:
    return compute_window(
        motion.voting_started_at,
        motion.planned_duration,
        motion.end_override,
        now,
        urgent_threshold_minutes,
    )


def format_duration(seconds: int) -> str:
    """Render a duration as ``"{m}m {s}s"``, or ``"{h}h {m}m"`` from one hour up.

    Seconds are always dropped at the hour scale.
    """
    seconds = max(0, int(seconds))
    if seconds >= SECONDS_PER_HOUR:
        hours, rest = divmod(seconds, SECONDS_PER_HOUR)
        return f"{hours}h {rest // SECONDS_PER_MINUTE}m"
    minutes, secs = divmod(seconds, SECONDS_PER_MINUTE)
    return f"{minutes}m {secs}s"


def format_remaining(window: VotingWindow) -> str:
    """Countdown label for a window.

    Empty before voting starts, ``"Over by ..."`` from the end instant on.
    """
    if not window.has_started:
        return ""
    if window.remaining > timedelta(0):
        return format_duration(window.remaining_seconds)
    return OVERTIME_PREFIX + format_duration(window.overtime_seconds)
