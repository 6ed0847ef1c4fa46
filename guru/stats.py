"""Per-club scoring history and the "to date" queries built on it.

The module-level functions are pure: they either read a single club's
:class:`Stats` or scan a full match collection, keeping only matches with a
known result dated strictly before the match under consideration.

:class:`Ledger` holds the mutable state of one pass. Besides the per-club
:class:`Stats` it keeps date-ordered result logs (per club and side, per
club pairing, league-wide running maxima) so the same "to date" questions
are answered without re-scanning the whole collection for every match.
"""

import bisect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .data import Match, Outcome
from .errors import LedgerInUseError, LedgerInvariantViolation, MissingClubError
from .utils import median

log = logging.getLogger(__name__)


@dataclass
class Stats:
    """Scoring history of one club.

    ``games_played`` is ``[home_count, away_count]`` and always matches the
    lengths of ``home_scores`` and ``away_scores``.
    """
    home_scores: List[int] = field(default_factory=list)
    away_scores: List[int] = field(default_factory=list)
    games_played: List[int] = field(default_factory=lambda: [0, 0])

    @property
    def consistent(self) -> bool:
        return (len(self.home_scores) == self.games_played[0]
                and len(self.away_scores) == self.games_played[1])


# =============================================================================
# Pure queries
# =============================================================================

def total_scoring_to_date(stats: Stats) -> Tuple[int, int]:
    """Goals scored at home and away over the retained history."""
    return sum(stats.home_scores), sum(stats.away_scores)


def highest_scoring_to_date(stats: Stats) -> Tuple[int, int]:
    """Highest single-match score at home and away; 0 without history."""
    return max(stats.home_scores, default=0), max(stats.away_scores, default=0)


def _played_before(matches: Iterable[Match], date: datetime) -> Iterator[Match]:
    for m in matches:
        if m.result is not None and m.date < date:
            yield m


def highest_scoring_in_league_to_date(matches: Iterable[Match], date: datetime) -> Tuple[int, int]:
    """Highest home and away result of any club before ``date``.

    Scans the whole collection, so calling it once per match is quadratic.
    :meth:`Ledger.highest_scoring_in_league_to_date` answers the same query
    from the ledger.
    """
    home = away = 0
    for m in _played_before(matches, date):
        home = max(home, m.result[0])
        away = max(away, m.result[1])
    return home, away


def all_time_highest_score_in_league(matches: Iterable[Match]) -> Tuple[int, int]:
    """Highest home and away result over the whole collection."""
    home = away = 0
    for m in matches:
        if m.result is not None:
            home = max(home, m.result[0])
            away = max(away, m.result[1])
    return home, away


def max_goal_value(matches: Iterable[Match]) -> int:
    """Anchor used to normalize goal targets: the all-time high of either side."""
    return max(all_time_highest_score_in_league(matches))


def game_days(matches: Sequence[Match]) -> int:
    return len(matches)


def _count_outcomes(
    home_fixtures: Iterable[Match],
    away_fixtures: Iterable[Match],
    outcome: Outcome,
) -> Tuple[int, int]:
    home = sum(1 for m in home_fixtures if m.outcome == outcome)
    away = sum(1 for m in away_fixtures if m.outcome == outcome)
    return home, away


def _oriented_totals(meetings: Iterable[Match], match: Match) -> Tuple[int, int]:
    """Sum goals of past meetings from the point of view of ``match.home``."""
    home = away = 0
    for m in meetings:
        if m.home == match.home:
            home += m.result[0]
            away += m.result[1]
        else:
            home += m.result[1]
            away += m.result[0]
    return home, away


def wdl_counts_to_date(matches: Iterable[Match], match: Match, outcome: Outcome) -> Tuple[int, int]:
    """Count earlier matches with the given home-vs-away ``outcome``.

    The first count covers the home club's home fixtures, the second the
    away club's away fixtures. ``outcome`` always compares home goals with
    away goals, whichever side the club was on.
    """
    earlier = list(_played_before(matches, match.date))
    return _count_outcomes(
        (m for m in earlier if m.home == match.home),
        (m for m in earlier if m.away == match.away),
        outcome,
    )


def median_score_to_date(matches: Iterable[Match], match: Match) -> Tuple[float, float]:
    """Median goals of the home club at home and of the away club away."""
    earlier = list(_played_before(matches, match.date))
    return (
        median([m.result[0] for m in earlier if m.home == match.home]),
        median([m.result[1] for m in earlier if m.away == match.away]),
    )


def head_to_head_to_date(matches: Iterable[Match], match: Match) -> Tuple[int, int]:
    """Goals scored by each club in its earlier meetings with the other.

    Meetings count regardless of venue; the totals are oriented so the first
    value belongs to ``match.home``.
    """
    pair = {match.home, match.away}
    meetings = (m for m in _played_before(matches, match.date) if {m.home, m.away} == pair)
    return _oriented_totals(meetings, match)


# =============================================================================
# Ledger
# =============================================================================

class _ResultLog:
    """Matches with a result in date order, sliceable by cutoff date."""

    __slots__ = ("dates", "matches")

    def __init__(self):
        self.dates: List[datetime] = []
        self.matches: List[Match] = []

    def append(self, match: Match):
        self.dates.append(match.date)
        self.matches.append(match)

    def before(self, date: datetime) -> List[Match]:
        return self.matches[:bisect.bisect_left(self.dates, date)]

    def __len__(self):
        return len(self.matches)


class Ledger:
    """Mutable per-club statistics for one forward pass.

    A ledger is bound to exactly one generator at a time (:meth:`bind`).
    Matches must be recorded in chronological order; :meth:`update` refuses
    a result older than the last one recorded.
    """

    def __init__(self, clubs: Iterable[str]):
        self._clubs = list(clubs)
        self._owner = None
        self.reset()

    def reset(self):
        """Forget all recorded matches."""
        self._stats: Dict[str, Stats] = {c: Stats() for c in self._clubs}
        self._home_log: Dict[str, _ResultLog] = {c: _ResultLog() for c in self._clubs}
        self._away_log: Dict[str, _ResultLog] = {c: _ResultLog() for c in self._clubs}
        self._h2h: Dict[FrozenSet[str], _ResultLog] = {}
        self._league_dates: List[datetime] = []
        self._league_max: List[Tuple[int, int]] = []
        self._last_date: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    @property
    def owner(self):
        return self._owner

    def bind(self, owner):
        if self._owner is not None and self._owner is not owner:
            raise LedgerInUseError(
                f"Ledger is bound to {type(self._owner).__name__}; release it first"
            )
        self._owner = owner

    def release(self, owner):
        if self._owner is owner:
            self._owner = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def clubs(self) -> List[str]:
        return list(self._clubs)

    @property
    def matches_recorded(self) -> int:
        return len(self._league_dates)

    def __contains__(self, club) -> bool:
        return club in self._stats

    def stats(self, club: str) -> Stats:
        try:
            return self._stats[club]
        except KeyError:
            raise MissingClubError(club) from None

    def update(self, match: Match):
        """Record the result of ``match``; no-op for matches without a result.

        Fixtures are order-checked like results but never recorded.
        """
        home = self.stats(match.home)
        away = self.stats(match.away)
        if self._last_date is not None and match.date < self._last_date:
            raise LedgerInvariantViolation(
                f"{match.home} v {match.away} on {match.date.isoformat()} is older "
                f"than the last recorded match ({self._last_date.isoformat()})"
            )
        if match.result is None:
            return

        home_goals, away_goals = match.result
        home.home_scores.append(home_goals)
        home.games_played[0] += 1
        away.away_scores.append(away_goals)
        away.games_played[1] += 1

        self._home_log[match.home].append(match)
        self._away_log[match.away].append(match)
        self._h2h.setdefault(frozenset((match.home, match.away)), _ResultLog()).append(match)
        prev_home, prev_away = self._league_max[-1] if self._league_max else (0, 0)
        self._league_dates.append(match.date)
        self._league_max.append((max(prev_home, home_goals), max(prev_away, away_goals)))
        self._last_date = match.date

    def check(self, club: str):
        """Raise LedgerInvariantViolation if the club's counters disagree with its scores."""
        s = self.stats(club)
        if not s.consistent:
            raise LedgerInvariantViolation(
                f"{club}: games_played={s.games_played} but "
                f"{len(s.home_scores)} home and {len(s.away_scores)} away scores"
            )

    def check_match(self, match: Match):
        self.check(match.home)
        self.check(match.away)

    # ------------------------------------------------------------------
    # To-date queries
    # ------------------------------------------------------------------

    def total_scoring_to_date(self, club: str) -> Tuple[int, int]:
        return total_scoring_to_date(self.stats(club))

    def highest_scoring_to_date(self, club: str) -> Tuple[int, int]:
        return highest_scoring_to_date(self.stats(club))

    def highest_scoring_in_league_to_date(self, date: datetime) -> Tuple[int, int]:
        i = bisect.bisect_left(self._league_dates, date)
        if i == 0:
            return 0, 0
        return self._league_max[i - 1]

    def _home_before(self, match: Match) -> List[Match]:
        self.stats(match.home)
        return self._home_log[match.home].before(match.date)

    def _away_before(self, match: Match) -> List[Match]:
        self.stats(match.away)
        return self._away_log[match.away].before(match.date)

    def wdl_counts_to_date(self, match: Match, outcome: Outcome) -> Tuple[int, int]:
        return _count_outcomes(self._home_before(match), self._away_before(match), outcome)

    def median_score_to_date(self, match: Match) -> Tuple[float, float]:
        return (
            median([m.result[0] for m in self._home_before(match)]),
            median([m.result[1] for m in self._away_before(match)]),
        )

    def head_to_head_to_date(self, match: Match) -> Tuple[int, int]:
        meetings = self._h2h.get(frozenset((match.home, match.away)))
        if meetings is None:
            return 0, 0
        return _oriented_totals(meetings.before(match.date), match)
