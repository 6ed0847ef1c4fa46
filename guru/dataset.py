"""Sample assembly and partitioning of the match set."""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .clubs import ClubRegistry
from .data import Match
from .errors import LedgerInvariantViolation
from .generators import Generator
from .utils import normalize

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Sample:
    """Network input and target for one match.

    ``outputs`` is empty for fixtures without a result, otherwise the home and
    away goals normalized against the goal anchor.
    """
    inputs: np.ndarray
    outputs: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def trainable(self) -> bool:
        return len(self.outputs) > 0


def assemble(match: Match, registry: ClubRegistry, max_goal_value: int, generator: Generator) -> Sample:
    """Generate the sample for ``match`` and advance the generator's ledger.

    ``max_goal_value`` must be the same anchor for training, testing and
    prediction, otherwise predicted goals are scaled inconsistently.
    """
    # Fail before the ledger is touched
    registry.get_index(match.home)
    registry.get_index(match.away)

    inputs = generator.generate(match)
    if match.result is None:
        outputs = np.zeros(0)
    else:
        outputs = np.array([
            normalize(float(match.result[0]), 0.0, float(max_goal_value)),
            normalize(float(match.result[1]), 0.0, float(max_goal_value)),
        ])
    return Sample(inputs=inputs, outputs=outputs)


def build_samples(
    matches: Sequence[Match],
    registry: ClubRegistry,
    max_goal_value: int,
    generator: Generator,
) -> List[Sample]:
    """Assemble samples for ``matches`` in order.

    Raises LedgerInvariantViolation if a match is dated before its
    predecessor; the whole batch is abandoned in that case.
    """
    samples = []
    prev: Optional[Match] = None
    for m in matches:
        if prev is not None and m.date < prev.date:
            raise LedgerInvariantViolation(
                f"Matches out of order: {m.date.isoformat()} after {prev.date.isoformat()}"
            )
        samples.append(assemble(m, registry, max_goal_value, generator))
        prev = m
    log.debug("Built %d samples with %s generator", len(samples), generator.name)
    return samples


def to_arrays(samples: Sequence[Sample]) -> Tuple[np.ndarray, np.ndarray]:
    """Stack samples into (X, Y) float32 arrays. All samples need outputs."""
    if not samples:
        return np.zeros((0, 0), dtype=np.float32), np.zeros((0, 0), dtype=np.float32)
    X = np.stack([s.inputs for s in samples]).astype(np.float32)
    Y = np.stack([s.outputs for s in samples]).astype(np.float32)
    return X, Y


# =============================================================================
# Partitioning
# =============================================================================

def sort_matches(matches: Sequence[Match]) -> List[Match]:
    """Chronological order; matches on the same date keep their input order."""
    return sorted(matches, key=lambda m: m.date)


def filter_results(matches: Sequence[Match]) -> List[Match]:
    return [m for m in matches if m.result is not None]


def filter_no_results(matches: Sequence[Match]) -> List[Match]:
    return [m for m in matches if m.result is None]


def split_by_fraction(items: Sequence[T], fraction: float) -> Tuple[List[T], List[T]]:
    """Split into the first ``round(len * fraction)`` items and the rest."""
    if not 0.0 <= fraction <= 1.0:
        raise ValueError(f"fraction must be within [0, 1], got {fraction}")
    upper = int(round(len(items) * fraction))
    return list(items[:upper]), list(items[upper:])


def rand_k_split(items: Sequence[T], k: int, seed: Optional[int] = None) -> List[List[T]]:
    """Randomly assign items to ``k`` folds of near-equal size.

    Each fold keeps the items in their original relative order, so folds of
    a chronological list stay chronological.
    """
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    indices = list(range(len(items)))
    random.Random(seed).shuffle(indices)
    folds = [sorted(indices[i::k]) for i in range(k)]
    return [[items[i] for i in fold] for fold in folds]


@dataclass
class PassPlan:
    """Matches of one pass, split into the subsets fed to the generator."""
    matches: List[Match]
    training: List[Match]
    testing: List[Match]
    prediction: List[Match]

    @property
    def generation_order(self) -> List[Match]:
        """Every match of the pass in date order, fixtures interleaved with results."""
        return self.matches


def prepare_pass(matches: Sequence[Match], split: float = 0.9) -> PassPlan:
    """Sort matches and split them into training, testing and prediction subsets.

    Matches with a result are split chronologically (the earliest ``split``
    share for training); matches without one are prediction fixtures.
    """
    ordered = sort_matches(matches)
    training, testing = split_by_fraction(filter_results(ordered), split)
    prediction = filter_no_results(ordered)
    log.info("Pass: %d training, %d testing, %d prediction matches",
             len(training), len(testing), len(prediction))
    return PassPlan(ordered, training, testing, prediction)


def build_pass_samples(
    plan: PassPlan,
    registry: ClubRegistry,
    max_goal_value: int,
    generator: Generator,
) -> Tuple[List[Sample], List[Sample], List[Sample]]:
    """Generate the whole pass in date order and route each sample to its subset.

    Returns:
        (training samples, testing samples, prediction samples), each in the
        order of the matching ``plan`` subset.
    """
    subset_of = {}
    for i, subset in enumerate((plan.training, plan.testing, plan.prediction)):
        for m in subset:
            subset_of[id(m)] = i

    routed: Tuple[List[Sample], List[Sample], List[Sample]] = ([], [], [])
    order = plan.generation_order
    for m in order:
        if id(m) not in subset_of:
            raise ValueError(f"{m.home} v {m.away} on {m.date.isoformat()} is in no subset of the pass")

    samples = build_samples(order, registry, max_goal_value, generator)
    for m, sample in zip(order, samples):
        routed[subset_of[id(m)]].append(sample)
    return routed
