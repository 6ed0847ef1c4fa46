"""Sub-features combined by the generators.

Every pair-valued feature compares the home club with the away club and is
normalized against the sum of both values, so the two halves add up to 1.0.
When both values are zero the degenerate ``normalize`` fallback yields
``(0.0, 0.0)``.
"""

from typing import Iterable, List, Tuple

import numpy as np

from .clubs import ClubRegistry
from .data import Match, Outcome
from .stats import Ledger
from .utils import normalize

# Strength of an away side relative to the home side in the club block
AWAY_FACTOR = 1.0


def pair(home: float, away: float) -> Tuple[float, float]:
    """Normalize two values against their sum."""
    total = home + away
    return normalize(home, 0.0, total), normalize(away, 0.0, total)


def ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator``, or the numerator itself when the denominator is 0."""
    if denominator != 0:
        return numerator / denominator
    return float(numerator)


def club_features(registry: ClubRegistry, match: Match, away_factor: float = AWAY_FACTOR) -> np.ndarray:
    """One slot per registered club; only the two playing clubs are set.

    The home club gets ``1 / (1 + away_factor)`` and the away club
    ``away_factor / (1 + away_factor)``, so the block always sums to 1.0.
    With ``away_factor = 0.8`` an away side counts as 80% of a home side:
    0.5556 for the home club, 0.4444 for the away club.
    """
    block = np.zeros(len(registry), dtype=np.float64)
    total = 1.0 + away_factor
    block[registry.get_index(match.home)] = normalize(1.0, 0.0, total)
    block[registry.get_index(match.away)] = normalize(away_factor, 0.0, total)
    return block


def timestamp_range(matches: Iterable[Match]) -> Tuple[float, float]:
    stamps = [m.timestamp for m in matches]
    if not stamps:
        return 0.0, 0.0
    return min(stamps), max(stamps)


def recency_feature(match: Match, time_range: Tuple[float, float]) -> float:
    """Position of the match date between the earliest and latest reference match.

    Example: earliest 2019-05-12, latest 2019-11-02, match on 2019-10-02
    gives 0.8218. Fixtures after the reference window get values above 1.0.
    """
    return normalize(match.timestamp, time_range[0], time_range[1])


def league_value(label) -> int:
    """Base-36 value of a league label; 0 when the match has no league."""
    if not label:
        return 0
    return int(label, 36)


def highest_league_value(matches: Iterable[Match]) -> int:
    return max((league_value(m.league) for m in matches), default=0)


def league_feature(match: Match, highest: int) -> float:
    """League label as a number, relative to the highest label in the reference set.

    Gives the network a neutral handle on the competition a match belongs
    to (cup vs league, division, season phase) without ranking leagues by
    hand.
    """
    return normalize(float(league_value(match.league)), 0.0, float(highest))


def wdl_feature(ledger: Ledger, match: Match, outcome: Outcome) -> Tuple[float, float]:
    """Earlier home fixtures of the home club vs away fixtures of the away club with ``outcome``.

    Example for wins: home club won 5 at home, away club's away fixtures
    ended in a home win once -> (0.8333, 0.1667).
    """
    return pair(*ledger.wdl_counts_to_date(match, outcome))


def median_score_feature(ledger: Ledger, match: Match) -> Tuple[float, float]:
    """Home club scored [2, 3, 4, 1, 4] at home (median 3), away club [2, 0, 1, 2]
    away (median 1.5) -> (0.6667, 0.3333)."""
    return pair(*ledger.median_score_to_date(match))


def total_scoring_feature(ledger: Ledger, match: Match) -> Tuple[float, float]:
    """Home goals of the home club against away goals of the away club."""
    home_total = ledger.total_scoring_to_date(match.home)[0]
    away_total = ledger.total_scoring_to_date(match.away)[1]
    return pair(home_total, away_total)


def relative_advantage_feature(ledger: Ledger, match: Match) -> Tuple[float, float]:
    """How much more each club scores in its current role than in the other one.

    Home club scored 7 at home and 6 away (7/6), away club 4 at home and 1
    away (1/4) -> (0.8235, 0.1765).
    """
    home_home, home_away = ledger.total_scoring_to_date(match.home)
    away_home, away_away = ledger.total_scoring_to_date(match.away)
    return pair(ratio(home_home, home_away), ratio(away_away, away_home))


def highest_scores(ledger: Ledger, match: Match) -> Tuple[int, int]:
    """Best home score of the home club and best away score of the away club."""
    return (
        ledger.highest_scoring_to_date(match.home)[0],
        ledger.highest_scoring_to_date(match.away)[1],
    )


def highest_scoring_feature(ledger: Ledger, match: Match) -> Tuple[float, float]:
    return pair(*highest_scores(ledger, match))


def highest_vs_league_feature(ledger: Ledger, match: Match) -> Tuple[float, float]:
    """Each club's best score relative to the best score of any club on that side so far.

    The halves are independent and do not add up to 1.0.
    """
    home_best, away_best = highest_scores(ledger, match)
    league_home, league_away = ledger.highest_scoring_in_league_to_date(match.date)
    return normalize(home_best, 0.0, league_home), normalize(away_best, 0.0, league_away)


def highest_vs_anchor_feature(ledger: Ledger, match: Match, anchor: int) -> Tuple[float, float]:
    """Each club's best score relative to a fixed all-time league high."""
    home_best, away_best = highest_scores(ledger, match)
    return normalize(home_best, 0.0, anchor), normalize(away_best, 0.0, anchor)


def head_to_head_feature(ledger: Ledger, match: Match) -> Tuple[float, float]:
    """Share of the goals in earlier meetings of the two clubs.

    A scored [1, 3, 2] and B scored [0, 1, 1] in three meetings -> (0.75, 0.25).
    """
    return pair(*ledger.head_to_head_to_date(match))


def flatten(parts: Iterable) -> List[float]:
    """Concatenate scalars, pairs and arrays into one flat list of floats."""
    out: List[float] = []
    for p in parts:
        if isinstance(p, (tuple, list, np.ndarray)):
            out.extend(float(v) for v in p)
        else:
            out.append(float(p))
    return out
