"""Input generators: turn a match into the feature vector fed to the network.

A generator owns the ledger of its pass. ``generate`` computes the features
of a match from the ledger state before the match, then records the match in
the ledger. Matches must therefore be generated in chronological order, and
every match exactly once.

Custom feature sets subclass :class:`Generator`, implement ``features`` and
``feature_names`` and register under a tag::

    @register
    class GoalsOnly(Generator):
        name = "goals-only"

        def feature_names(self):
            return ["home_total", "away_total"]

        def features(self, match):
            return list(total_scoring_feature(self.ledger, match))
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Type

import numpy as np

from .clubs import ClubRegistry
from .data import Match, Outcome
from .errors import LedgerInUseError
from .features import (
    AWAY_FACTOR,
    club_features,
    flatten,
    head_to_head_feature,
    highest_league_value,
    highest_scoring_feature,
    highest_vs_anchor_feature,
    highest_vs_league_feature,
    league_feature,
    median_score_feature,
    recency_feature,
    relative_advantage_feature,
    timestamp_range,
    total_scoring_feature,
    wdl_feature,
)
from .stats import Ledger, max_goal_value

log = logging.getLogger(__name__)


class Generator(ABC):
    """Base class for feature generators.

    Args:
        reference: Matches that define the normalization ranges (date window,
            league labels). Usually the training matches.
        registry: Clubs that may appear in generated matches.
        ledger: Statistics of this pass; bound to the generator until
            :meth:`close`.
        away_factor: Relative strength of the away side in the club block.
    """

    name: str = ""

    def __init__(
        self,
        reference: Sequence[Match],
        registry: ClubRegistry,
        ledger: Ledger,
        away_factor: float = AWAY_FACTOR,
    ):
        ledger.bind(self)
        self.reference = list(reference)
        self.registry = registry
        self.ledger = ledger
        self.away_factor = away_factor
        self.time_range = timestamp_range(self.reference)

    @abstractmethod
    def feature_names(self) -> List[str]:
        """Names of the generated features, in output order."""

    @abstractmethod
    def features(self, match: Match) -> List[float]:
        """Compute features from the current ledger state. Must not mutate it."""

    @property
    def num_features(self) -> int:
        return len(self.feature_names())

    def generate(self, match: Match) -> np.ndarray:
        """Feature vector for ``match``; records the match in the ledger afterwards."""
        if self.ledger.owner is not self:
            raise LedgerInUseError(f"{type(self).__name__} no longer owns its ledger")
        inputs = np.asarray(self.features(match), dtype=np.float64)
        self.ledger.update(match)
        self.ledger.check_match(match)
        log.debug("%s: %s v %s -> %d features", self.name, match.home, match.away, len(inputs))
        return inputs

    def close(self):
        """Release the ledger so another generator can bind it."""
        self.ledger.release(self)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _club_names(self) -> List[str]:
        return [f"club_{c}" for c in self.registry]


GENERATORS: Dict[str, Type[Generator]] = {}


def register(cls: Type[Generator]) -> Type[Generator]:
    """Class decorator adding a generator to GENERATORS under its ``name``."""
    if not cls.name:
        raise ValueError(f"{cls.__name__} has no name")
    GENERATORS[cls.name] = cls
    return cls


def make_generator(name: str, *args, **kwargs) -> Generator:
    try:
        cls = GENERATORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown generator '{name}'. Available: {', '.join(sorted(GENERATORS))}"
        ) from None
    return cls(*args, **kwargs)


@register
class DefaultGenerator(Generator):
    """Reference feature set: club block plus 20 features."""

    name = "default"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.highest_league = highest_league_value(self.reference)

    def feature_names(self) -> List[str]:
        names = self._club_names() + ["recency", "league"]
        for label in ("wins", "draws", "losses"):
            names += [f"home_{label}", f"away_{label}"]
        for label in ("median", "total", "advantage", "highest", "highest_vs_league", "h2h"):
            names += [f"home_{label}", f"away_{label}"]
        return names

    def features(self, match: Match) -> List[float]:
        return flatten([
            club_features(self.registry, match, self.away_factor),
            recency_feature(match, self.time_range),
            league_feature(match, self.highest_league),
            wdl_feature(self.ledger, match, Outcome.WIN),
            wdl_feature(self.ledger, match, Outcome.DRAW),
            wdl_feature(self.ledger, match, Outcome.LOSS),
            median_score_feature(self.ledger, match),
            total_scoring_feature(self.ledger, match),
            relative_advantage_feature(self.ledger, match),
            highest_scoring_feature(self.ledger, match),
            highest_vs_league_feature(self.ledger, match),
            head_to_head_feature(self.ledger, match),
        ])


@register
class CompactGenerator(Generator):
    """Smaller feature set built only from the clubs' own scoring history."""

    name = "compact"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.anchor = max_goal_value(self.reference)

    def feature_names(self) -> List[str]:
        names = self._club_names()
        for label in ("total", "highest", "advantage", "highest_vs_all_time"):
            names += [f"home_{label}", f"away_{label}"]
        return names + ["recency"]

    def features(self, match: Match) -> List[float]:
        return flatten([
            club_features(self.registry, match, self.away_factor),
            total_scoring_feature(self.ledger, match),
            highest_scoring_feature(self.ledger, match),
            relative_advantage_feature(self.ledger, match),
            highest_vs_anchor_feature(self.ledger, match, self.anchor),
            recency_feature(match, self.time_range),
        ])
