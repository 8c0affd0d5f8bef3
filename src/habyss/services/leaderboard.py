"""Leaderboard ranking over friends' remotely sourced activity summaries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

PERIODS = ("week", "month", "year", "all")


@dataclass(slots=True, frozen=True)
class FriendSummary:
    """Public aggregate for one participant, already scoped to a period."""

    id: str
    username: str
    current_streak: int = 0
    best_streak: int = 0
    today_completion: float = 0.0
    weekly_activity: tuple[float, ...] = field(default_factory=tuple)
    is_current_user: bool = False

    @property
    def has_activity(self) -> bool:
        return (
            self.current_streak > 0
            or self.best_streak > 0
            or self.today_completion > 0
            or any(v > 0 for v in self.weekly_activity)
        )


@dataclass(slots=True, frozen=True)
class LeaderboardEntry:
    rank: int
    friend: FriendSummary


class FriendStatsSource(Protocol):
    """Remote read of friends' public aggregates."""

    def fetch_friend_stats(self, period: str) -> list[FriendSummary]:  # pragma: no cover - interface
        """Return friend summaries scoped to ``period``."""
        ...


def validate_period(period: str) -> str:
    normalized = (period or "").strip().lower()
    if normalized not in PERIODS:
        raise ValueError(f"Invalid leaderboard period: {period!r}")
    return normalized


def rank_leaderboard(
    entries: Iterable[FriendSummary],
    period: str,
    *,
    current_user: Optional[FriendSummary] = None,
) -> list[LeaderboardEntry]:
    """Rank participants by descending ``current_streak``.

    Ties keep their input order (``sorted`` is stable) and ranks are
    positional, so two friends tied on 5 get consecutive ranks. The current
    user is flagged, and appended when absent and active.
    """

    validate_period(period)
    participants = list(entries)

    if current_user is not None:
        participants = [
            replace(p, is_current_user=True) if p.id == current_user.id else p
            for p in participants
        ]
        if current_user.id not in {p.id for p in participants} and current_user.has_activity:
            participants.append(replace(current_user, is_current_user=True))

    ranked = sorted(participants, key=lambda p: p.current_streak, reverse=True)
    return [LeaderboardEntry(rank=index, friend=friend) for index, friend in enumerate(ranked, start=1)]


def build_leaderboard(
    source: FriendStatsSource,
    period: str,
    *,
    current_user: Optional[FriendSummary] = None,
) -> list[LeaderboardEntry]:
    """Fetch period-scoped friend stats and rank them."""

    period = validate_period(period)
    friends = source.fetch_friend_stats(period)
    logger.debug(f"Ranking {len(friends)} friends for period {period}")
    return rank_leaderboard(friends, period, current_user=current_user)
