"""Match score prediction: feature generation over a chronological match set."""

from .data import Match, Outcome, load_matches, save_matches
from .clubs import ClubRegistry
from .stats import (
    Stats,
    Ledger,
    all_time_highest_score_in_league,
    max_goal_value,
)
from .generators import (
    Generator,
    DefaultGenerator,
    CompactGenerator,
    GENERATORS,
    make_generator,
    register,
)
from .dataset import (
    Sample,
    assemble,
    build_samples,
    build_pass_samples,
    filter_results,
    filter_no_results,
    prepare_pass,
    rand_k_split,
)
from .errors import (
    GuruError,
    MissingClubError,
    LedgerInvariantViolation,
    LedgerInUseError,
    UnparsableRecord,
)
from .utils import normalize
from .config import Config

__all__ = [
    'Config',
    'Match',
    'Outcome',
    'load_matches',
    'save_matches',
    'ClubRegistry',
    'Stats',
    'Ledger',
    'all_time_highest_score_in_league',
    'max_goal_value',
    'Generator',
    'DefaultGenerator',
    'CompactGenerator',
    'GENERATORS',
    'make_generator',
    'register',
    'Sample',
    'assemble',
    'build_samples',
    'build_pass_samples',
    'filter_results',
    'filter_no_results',
    'prepare_pass',
    'rand_k_split',
    'GuruError',
    'MissingClubError',
    'LedgerInvariantViolation',
    'LedgerInUseError',
    'UnparsableRecord',
    'normalize',
]
