"""Training and evaluation of the score network."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn as nn

from .data import Match
from .dataset import Sample, to_arrays
from .models import ScoreNetwork

log = logging.getLogger(__name__)


def train_network(
    net: ScoreNetwork,
    samples: Sequence[Sample],
    momentum: float = 0.3,
    rate: float = 0.2,
    halt_error: float = 0.0175,
    log_interval: Optional[int] = 1000,
    max_epochs: int = 20000,
) -> Dict:
    """
    Full-batch SGD on mean squared error.

    Stops as soon as the epoch MSE is at or below ``halt_error`` or after
    ``max_epochs``.

    Returns:
        Training history with the loss per epoch and whether the halt
        condition was reached.
    """
    if momentum > 1.0 or rate > 1.0:
        raise ValueError("Values for momentum and rate must be <= 1.0")
    if momentum < 0.0 or rate < 0.0:
        raise ValueError("Values for momentum and rate must be >= 0.0")
    if max_epochs < 1:
        raise ValueError(f"max_epochs must be at least 1, got {max_epochs}")
    if not samples:
        raise ValueError("Cannot train on an empty sample set")
    if not all(s.trainable for s in samples):
        raise ValueError("Training samples must all have outputs")

    X, Y = to_arrays(samples)
    X_t = torch.tensor(X)
    Y_t = torch.tensor(Y)

    optimizer = torch.optim.SGD(net.parameters(), lr=rate, momentum=momentum)
    criterion = nn.MSELoss()

    history = {'train_loss': [], 'halted': False, 'epochs': 0}

    net.train()
    for epoch in range(max_epochs):
        optimizer.zero_grad()
        loss = criterion(net(X_t), Y_t)
        loss.backward()
        optimizer.step()

        train_loss = loss.item()
        history['train_loss'].append(train_loss)
        history['epochs'] = epoch + 1

        if log_interval and (epoch + 1) % log_interval == 0:
            log.info("Epoch %d: mse=%.6f", epoch + 1, train_loss)

        if train_loss <= halt_error:
            history['halted'] = True
            log.info("Reached mse %.6f <= %.6f after %d epochs", train_loss, halt_error, epoch + 1)
            break
    else:
        log.warning("Stopped after %d epochs with mse %.6f (target %.6f)",
                    max_epochs, history['train_loss'][-1], halt_error)

    net.train(False)
    return history


# =============================================================================
# Evaluation
# =============================================================================

@dataclass
class NetworkStats:
    """Hit counter for one kind of prediction."""
    tested: int = 0
    positive: int = 0
    negative: int = 0

    def update(self, positive: bool):
        self.tested += 1
        if positive:
            self.positive += 1
        else:
            self.negative += 1

    @property
    def correct(self) -> int:
        """Share of correct predictions in whole percent."""
        return self.positive * 100 // max(self.tested, 1)

    def __str__(self):
        return (f"tested: {self.tested}, positive: {self.positive}, "
                f"negative: {self.negative}, correct: {self.correct}%")


@dataclass
class Prediction:
    date: datetime
    teams: Tuple[str, str]
    expected_scores: Tuple[int, int]
    predicted_scores: Tuple[int, int]

    def to_row(self) -> str:
        return (f"|{self.teams[0]}|{self.predicted_scores[0]} : "
                f"{self.predicted_scores[1]}|{self.teams[1]}|")

    def __str__(self):
        return (f"{self.teams[0]} {self.predicted_scores[0]} : {self.predicted_scores[1]} {self.teams[1]}\n"
                f"Expected: {self.expected_scores[0]} : {self.expected_scores[1]}\n")


@dataclass
class Predictions:
    items: List[Prediction] = field(default_factory=list)

    def append(self, prediction: Prediction):
        self.items.append(prediction)

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def to_table(self) -> str:
        """Markdown table of predicted results."""
        lines = ["|Home|Predicted result|Away|", "|-:|:-:|:-|"]
        lines += [p.to_row() for p in self.items]
        return "\n".join(lines) + "\n"

    def __str__(self):
        return "Home | Predicted result | Away\n" + "".join(str(p) for p in self.items)


def denormalize(value: float, highest: int) -> int:
    """Goals from a network output; truncates and never goes below 0."""
    return max(int(value * highest), 0)


def evaluate_network(
    net: ScoreNetwork,
    samples: Sequence[Sample],
    matches: Sequence[Match],
    highest: int,
) -> Tuple[NetworkStats, NetworkStats, Predictions]:
    """
    Run the network on ``samples`` and compare with the matches' results.

    ``samples[i]`` must belong to ``matches[i]``. Matches without a result
    only produce predictions.

    Returns:
        (exact result stats, winner stats, predictions)
    """
    if len(samples) != len(matches):
        raise ValueError(f"{len(samples)} samples for {len(matches)} matches")

    result_stats = NetworkStats()
    winner_stats = NetworkStats()
    predictions = Predictions()

    for sample, match in zip(samples, matches):
        out = net.run(sample.inputs)
        predicted = (denormalize(out[0], highest), denormalize(out[1], highest))

        if match.result is None:
            predictions.append(Prediction(match.date, (match.home, match.away), (0, 0), predicted))
            continue

        expected = tuple(match.result)
        predictions.append(Prediction(match.date, (match.home, match.away), expected, predicted))
        result_stats.update(expected == predicted)
        winner_stats.update(
            np.sign(expected[0] - expected[1]) == np.sign(predicted[0] - predicted[1])
        )

    return result_stats, winner_stats, predictions
