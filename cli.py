#!/usr/bin/env python3
"""Command line for training and running the score prediction network.

Usage:
    python cli.py [--config CONFIG] [--profile NAME] [--verbose] [options]

The match file is split into training matches (earliest share of the
matches with a result), test matches (the rest of them) and prediction
fixtures (matches without a result). Features for all three are generated
in one chronological pass.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from guru.clubs import ClubRegistry
from guru.config import Config
from guru.data import load_matches
from guru.dataset import PassPlan, build_pass_samples, prepare_pass
from guru.errors import GuruError
from guru.generators import GENERATORS, make_generator
from guru.models import ScoreNetwork
from guru.stats import Ledger, max_goal_value
from guru.training import NetworkStats, Predictions, evaluate_network, train_network

log = logging.getLogger(__name__)

# Paths relative to project root
PROJECT_ROOT = Path(__file__).parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="guru", description="Match score prediction")
    parser.add_argument("--config", type=str, default=None, help="Path to TOML config file")
    parser.add_argument("--profile", type=str, default="default", help="Config profile (default: default)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    parser.add_argument("--data", "-d", type=str, default=None, help="Match data JSON file")
    parser.add_argument("--error", "-e", type=float, default=None,
                        help="Target mean squared error to stop training at")
    parser.add_argument("--split-data", "-s", type=float, default=None,
                        help="Share of played matches used for training (default: 0.9)")
    parser.add_argument("--generator", "-g", choices=sorted(GENERATORS), default=None,
                        help="Feature generator")
    parser.add_argument("--no-train", action="store_true", help="Skip training")
    parser.add_argument("--save-network", action="store_true", help="Save weights after training")
    parser.add_argument("--load-network", action="store_true", help="Load weights before training")
    parser.add_argument("--format", choices=["table", "markdown"], default="table",
                        help="Prediction output format")
    return parser


def load_config(args) -> Config:
    if args.config:
        return Config.load(Path(args.config), args.profile)
    # Try default config.toml
    default_path = PROJECT_ROOT / "config.toml"
    if default_path.exists():
        return Config.load(default_path, args.profile)
    return Config.default()


def resolve(path: str) -> Path:
    p = Path(path)
    if not p.is_absolute():
        p = PROJECT_ROOT / p
    return p


def apply_overrides(args, config: Config):
    if args.data is not None:
        config.data.data_path = args.data
    if args.error is not None:
        config.training.halt_error = args.error
    if args.split_data is not None:
        config.data.split = args.split_data
    if args.generator is not None:
        config.features.generator = args.generator


def print_evaluation(title: str, stats: List[NetworkStats], predictions: Predictions):
    print(title)
    print(predictions)
    print(f"Result {stats[0]}\n")
    print(f"Winner {stats[1]}")
    print("--------------------------\n\n")


def run(args, config: Config):
    """One full pass: generate samples, train, evaluate and predict."""
    matches = load_matches(resolve(config.data.data_path))
    plan: PassPlan = prepare_pass(matches, config.data.split)

    registry = ClubRegistry.build(plan.matches, sort=config.features.sort_clubs)
    ledger = Ledger(registry)
    highest = max_goal_value(plan.matches)

    with make_generator(
        config.features.generator,
        plan.training,
        registry,
        ledger,
        away_factor=config.features.away_factor,
    ) as generator:
        training_set, test_set, prediction_set = build_pass_samples(plan, registry, highest, generator)
        input_dim = generator.num_features

    print(f"{len(registry)} clubs, {input_dim} input features, goal anchor {highest}")

    net = ScoreNetwork(input_dim, config.training.hidden_dims)
    model_path = resolve(config.data.model_path)
    if args.load_network:
        net.load(model_path)
        print(f"Loaded network from {model_path}")

    if not args.no_train:
        if not training_set:
            print("No matches with a result to train on")
            sys.exit(1)
        print("Training Prediction Network...")
        history = train_network(
            net,
            training_set,
            momentum=config.training.momentum,
            rate=config.training.rate,
            halt_error=config.training.halt_error,
            log_interval=config.training.log_interval,
            max_epochs=config.training.max_epochs,
        )
        print(f"  {history['epochs']} epochs, final mse {history['train_loss'][-1]:.6f}")

    if args.save_network:
        net.save(model_path)
        print(f"Saved network to {model_path}")

    result, winner, predictions = evaluate_network(net, training_set, plan.training, highest)
    print_evaluation("Testing on (seen) Training Data", [result, winner], predictions)

    result, winner, predictions = evaluate_network(net, test_set, plan.testing, highest)
    print_evaluation("Testing on (unseen) Test Data", [result, winner], predictions)

    _, _, predictions = evaluate_network(net, prediction_set, plan.prediction, highest)
    print("Predicting future matches: \n")
    if args.format == "markdown":
        print(predictions.to_table())
    else:
        print(predictions)


# =============================================================================
# Main
# =============================================================================

def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = load_config(args)
        apply_overrides(args, config)
        run(args, config)
    except (GuruError, ValueError, OSError) as e:
        log.debug("Pass aborted", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
