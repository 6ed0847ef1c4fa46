"""Numeric helpers shared by the ledger and the feature set."""

from typing import Sequence

import numpy as np


def normalize(value: float, min_value: float, max_value: float) -> float:
    """Rescale ``value`` linearly into [0, 1] relative to ``[min_value, max_value]``.

    When the range is empty (``max_value == min_value``) the offset
    ``value - min_value`` is returned instead. That fallback is not clamped,
    so callers must tolerate results outside [0, 1].
    """
    if max_value != min_value:
        return (value - min_value) / (max_value - min_value)
    return value - min_value


def median(values: Sequence[float]) -> float:
    """Median of ``values``; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.median(values))
