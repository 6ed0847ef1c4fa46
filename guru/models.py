"""Feed-forward network predicting normalized home and away goals."""

from pathlib import Path
from typing import List, Sequence

import numpy as np
import torch
import torch.nn as nn

# Hidden layer sizes of the score network
DEFAULT_HIDDEN_DIMS = [12, 8, 5]


class ScoreNetwork(nn.Module):
    """
    Fully connected network with sigmoid activations.

    Inputs are generator feature vectors, outputs the home and away goals
    normalized to [0, 1] against the league's goal anchor.
    """

    def __init__(self, input_dim: int, hidden_dims: List[int] = DEFAULT_HIDDEN_DIMS, output_dim: int = 2):
        super().__init__()
        self.input_dim = input_dim
        self.hidden_dims = list(hidden_dims)
        self.output_dim = output_dim

        layers = []
        prev_dim = input_dim
        for h_dim in hidden_dims:
            layers.append(nn.Linear(prev_dim, h_dim))
            layers.append(nn.Sigmoid())
            prev_dim = h_dim
        layers.append(nn.Linear(prev_dim, output_dim))
        layers.append(nn.Sigmoid())
        self.layers = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Forward pass.

        Args:
            x: Input features [batch, input_dim]

        Returns:
            Normalized goals [batch, output_dim]
        """
        return self.layers(x)

    def run(self, inputs: Sequence[float]) -> np.ndarray:
        """Predict normalized goals for a single feature vector."""
        x = torch.tensor(np.asarray(inputs, dtype=np.float32)).unsqueeze(0)
        self.train(False)
        with torch.no_grad():
            return self.forward(x).squeeze(0).numpy().astype(np.float64)

    def save(self, path: Path):
        """Save model weights."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        torch.save(self.state_dict(), path)

    def load(self, path: Path):
        """Load model weights."""
        self.load_state_dict(torch.load(path, weights_only=True))
