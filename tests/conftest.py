"""Shared test fixtures."""

import json
from datetime import datetime, timedelta, timezone
from itertools import permutations

import pytest

from guru.clubs import ClubRegistry
from guru.data import Match
from guru.stats import Ledger

UTC = timezone.utc


def make_match(date_str, home, away, result=None, league=None):
    """Helper to create a Match object from a YYYY-MM-DD date."""
    date = datetime.strptime(date_str, "%Y-%m-%d").replace(tzinfo=UTC)
    return Match(date=date, home=home, away=away,
                 result=tuple(result) if result is not None else None, league=league)


@pytest.fixture
def round_robin():
    """A plays B, B plays C, C plays A, one week apart."""
    return [
        make_match("2020-01-01", "A", "B", (2, 1)),
        make_match("2020-01-08", "B", "C", (0, 0)),
        make_match("2020-01-15", "C", "A", (1, 3)),
    ]


@pytest.fixture
def season():
    """Three rounds of every ordered pairing of four clubs, two matches per day.

    Goals follow a fixed pattern so every outcome type occurs and several
    matches share a date.
    """
    clubs = ["Atlanta", "Detroit", "Miami", "Oakland"]
    base = datetime(2019, 8, 1, 19, 30, tzinfo=timezone(timedelta(hours=-4)))
    matches = []
    for i, (home, away) in enumerate(list(permutations(clubs, 2)) * 3):
        matches.append(Match(
            date=base + timedelta(days=i // 2),
            home=home,
            away=away,
            result=((i * 7) % 5, (i * 3) % 4),
            league="nisa" if i % 3 else "mc",
        ))
    # Fixtures after the last result
    last = matches[-1].date
    matches.append(Match(last + timedelta(days=7), "Atlanta", "Miami", None, "nisa"))
    matches.append(Match(last + timedelta(days=7), "Detroit", "Oakland", None, "nisa"))
    return matches


@pytest.fixture
def registry(season):
    return ClubRegistry.build(season)


@pytest.fixture
def ledger(registry):
    return Ledger(registry)


@pytest.fixture
def data_file(tmp_path, season):
    """Season written in the persisted JSON format."""
    path = tmp_path / "data.json"
    path.write_text(json.dumps([m.to_record() for m in season]))
    return path
