"""Match records and JSON loading."""

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import UnparsableRecord

log = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path("data") / "data.json"

_LEAGUE_RE = re.compile(r"^[0-9A-Za-z]+$")


class Outcome(IntEnum):
    """Comparison of home goals against away goals."""
    LOSS = -1
    DRAW = 0
    WIN = 1

    @classmethod
    def of(cls, home_goals: int, away_goals: int) -> "Outcome":
        if home_goals > away_goals:
            return cls.WIN
        if home_goals < away_goals:
            return cls.LOSS
        return cls.DRAW


@dataclass(frozen=True)
class Match:
    """A single fixture. ``result`` is None for matches still to be played."""
    date: datetime
    home: str
    away: str
    result: Optional[Tuple[int, int]] = None
    league: Optional[str] = None

    def __post_init__(self):
        if self.home == self.away:
            raise ValueError(f"'{self.home}' cannot play itself")

    @property
    def has_result(self) -> bool:
        return self.result is not None

    @property
    def home_goals(self) -> Optional[int]:
        return self.result[0] if self.result is not None else None

    @property
    def away_goals(self) -> Optional[int]:
        return self.result[1] if self.result is not None else None

    @property
    def outcome(self) -> Optional[Outcome]:
        if self.result is None:
            return None
        return Outcome.of(*self.result)

    @property
    def timestamp(self) -> float:
        return self.date.timestamp()

    def to_record(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "league": self.league,
            "home": self.home,
            "away": self.away,
            "result": list(self.result) if self.result is not None else None,
        }


def _parse_date(index: int, raw) -> datetime:
    if not isinstance(raw, str):
        raise UnparsableRecord(index, "date must be a string")
    try:
        date = datetime.fromisoformat(raw.strip())
    except ValueError as e:
        raise UnparsableRecord(index, f"invalid date '{raw}': {e}") from e
    if date.tzinfo is None or date.utcoffset() is None:
        raise UnparsableRecord(index, f"date '{raw}' has no timezone offset")
    return date


def _parse_club(index: int, record: dict, key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value.strip():
        raise UnparsableRecord(index, f"'{key}' must be a non-empty string")
    return value.strip()


def _parse_result(index: int, raw) -> Optional[Tuple[int, int]]:
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise UnparsableRecord(index, "result must be null or a pair of goals")
    goals = []
    for g in raw:
        # bool is an int subclass; reject it explicitly
        if isinstance(g, bool) or not isinstance(g, int) or g < 0:
            raise UnparsableRecord(index, f"invalid goal count {g!r}")
        goals.append(g)
    return goals[0], goals[1]


def _parse_league(index: int, raw) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str) or not _LEAGUE_RE.match(raw):
        raise UnparsableRecord(index, f"league label {raw!r} is not base-36")
    return raw


def parse_match(index: int, record) -> Match:
    """Parse one persisted record, raising UnparsableRecord on any defect."""
    if not isinstance(record, dict):
        raise UnparsableRecord(index, "record must be an object")
    home = _parse_club(index, record, "home")
    away = _parse_club(index, record, "away")
    if home == away:
        raise UnparsableRecord(index, f"'{home}' cannot play itself")
    return Match(
        date=_parse_date(index, record.get("date")),
        home=home,
        away=away,
        result=_parse_result(index, record.get("result")),
        league=_parse_league(index, record.get("league")),
    )


def parse_matches(records) -> List[Match]:
    """Parse a list of records. Either all records parse or nothing is returned."""
    if not isinstance(records, list):
        raise UnparsableRecord(None, "match data must be a list of records")
    return [parse_match(i, r) for i, r in enumerate(records)]


def load_matches(path: Path = DEFAULT_DATA_PATH) -> List[Match]:
    """Load all matches from a JSON file in file order."""
    path = Path(path)
    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise UnparsableRecord(None, f"{path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise UnparsableRecord(None, f"{path} is not valid JSON: {e}") from e
    matches = parse_matches(records)
    log.debug("Loaded %d matches from %s", len(matches), path)
    return matches


def save_matches(matches: List[Match], path: Path):
    """Write matches in the format read by load_matches."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([m.to_record() for m in matches], indent=2))
