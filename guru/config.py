"""TOML-based configuration for the prediction pipeline."""

import tomllib
from dataclasses import dataclass, field
from typing import List
from pathlib import Path


@dataclass
class TrainingConfig:
    momentum: float = 0.3
    rate: float = 0.2
    halt_error: float = 0.0175
    log_interval: int = 1000
    max_epochs: int = 20000
    hidden_dims: List[int] = field(default_factory=lambda: [12, 8, 5])


@dataclass
class FeatureConfig:
    generator: str = "default"
    away_factor: float = 1.0
    sort_clubs: bool = True


@dataclass
class DataConfig:
    data_path: str = "data/data.json"
    model_path: str = "model/guru.pt"
    split: float = 0.9


@dataclass
class Config:
    training: TrainingConfig = field(default_factory=TrainingConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    data: DataConfig = field(default_factory=DataConfig)

    @classmethod
    def load(cls, path: Path, profile: str = "default") -> "Config":
        """Load a configuration profile from a TOML file.

        The file is keyed by profile name, e.g. [nisa.training].
        """
        with open(path, "rb") as f:
            raw = tomllib.load(f)

        if profile not in raw:
            available = [k for k in raw if isinstance(raw[k], dict)]
            raise ValueError(
                f"Unknown profile '{profile}'. "
                f"Available: {', '.join(available)}"
            )

        section = raw[profile]
        config = cls()

        if "training" in section:
            t = section["training"]
            config.training = TrainingConfig(
                momentum=t.get("momentum", config.training.momentum),
                rate=t.get("rate", config.training.rate),
                halt_error=t.get("halt_error", config.training.halt_error),
                log_interval=t.get("log_interval", config.training.log_interval),
                max_epochs=t.get("max_epochs", config.training.max_epochs),
                hidden_dims=t.get("hidden_dims", config.training.hidden_dims),
            )

        if "features" in section:
            f = section["features"]
            config.features = FeatureConfig(
                generator=f.get("generator", config.features.generator),
                away_factor=f.get("away_factor", config.features.away_factor),
                sort_clubs=f.get("sort_clubs", config.features.sort_clubs),
            )

        if "data" in section:
            d = section["data"]
            config.data = DataConfig(
                data_path=d.get("data_path", config.data.data_path),
                model_path=d.get("model_path", config.data.model_path),
                split=d.get("split", config.data.split),
            )

        return config

    @classmethod
    def default(cls) -> "Config":
        """Return default configuration matching config.toml."""
        return cls()
