"""Tests for guru.dataset module."""

import random

import numpy as np
import pytest

from guru.clubs import ClubRegistry
from guru.dataset import (
    Sample,
    assemble,
    build_pass_samples,
    build_samples,
    filter_no_results,
    filter_results,
    prepare_pass,
    rand_k_split,
    sort_matches,
    split_by_fraction,
    to_arrays,
)
from guru.errors import LedgerInvariantViolation, MissingClubError
from guru.generators import DefaultGenerator
from guru.stats import Ledger, max_goal_value

from conftest import make_match


@pytest.fixture
def generator(round_robin):
    registry = ClubRegistry.build(round_robin)
    return DefaultGenerator(round_robin, registry, Ledger(registry))


class TestAssemble:
    def test_outputs_normalized_to_anchor(self, round_robin, generator):
        sample = assemble(round_robin[0], generator.registry, 3, generator)
        np.testing.assert_array_almost_equal(sample.outputs, [2 / 3, 1 / 3])
        assert len(sample.inputs) == generator.num_features
        assert sample.trainable

    def test_fixture_has_no_outputs(self, round_robin, generator):
        sample = assemble(make_match("2020-02-01", "A", "C"), generator.registry, 3, generator)
        assert len(sample.outputs) == 0
        assert not sample.trainable

    def test_unknown_club_leaves_ledger_untouched(self, generator):
        with pytest.raises(MissingClubError):
            assemble(make_match("2020-01-01", "A", "Z", (1, 0)), generator.registry, 3, generator)
        assert generator.ledger.matches_recorded == 0


class TestBuildSamples:
    def test_one_sample_per_match(self, round_robin, generator):
        samples = build_samples(round_robin, generator.registry, 3, generator)
        assert len(samples) == 3
        assert generator.ledger.matches_recorded == 3

    def test_out_of_order_rejected(self, round_robin, generator):
        with pytest.raises(LedgerInvariantViolation):
            build_samples(list(reversed(round_robin)), generator.registry, 3, generator)

    def test_same_date_allowed(self, generator):
        matches = [
            make_match("2020-01-01", "A", "B", (1, 0)),
            make_match("2020-01-01", "C", "A", (0, 2)),
        ]
        assert len(build_samples(matches, generator.registry, 3, generator)) == 2

    def test_full_pass(self, season, registry, ledger):
        plan = prepare_pass(season)
        highest = max_goal_value(plan.matches)
        with DefaultGenerator(plan.training, registry, ledger) as gen:
            training = build_samples(plan.training, registry, highest, gen)
            testing = build_samples(plan.testing, registry, highest, gen)
            prediction = build_samples(plan.prediction, registry, highest, gen)
        assert all(s.trainable for s in training + testing)
        assert not any(s.trainable for s in prediction)
        assert ledger.matches_recorded == len(training) + len(testing)
        for s in training + testing:
            assert np.all((s.outputs >= 0.0) & (s.outputs <= 1.0))


class TestBuildPassSamples:
    @pytest.fixture
    def postponed(self):
        """A fixture postponed to mid-season, followed by further results."""
        return [
            make_match("2020-01-01", "A", "B", (1, 0)),
            make_match("2020-01-05", "A", "C"),
            make_match("2020-01-10", "A", "C", (4, 0)),
            make_match("2020-01-15", "A", "B", (3, 0)),
        ]

    def _generator(self, plan):
        registry = ClubRegistry.build(plan.matches)
        return DefaultGenerator(plan.training, registry, Ledger(registry))

    def test_routes_samples_to_subsets(self, postponed):
        plan = prepare_pass(postponed, 0.5)
        gen = self._generator(plan)
        training, testing, prediction = build_pass_samples(plan, gen.registry, 4, gen)

        assert (len(training), len(testing), len(prediction)) == (2, 1, 1)
        assert all(s.trainable for s in training + testing)
        assert not prediction[0].trainable
        np.testing.assert_array_almost_equal(training[1].outputs, [1.0, 0.0])
        np.testing.assert_array_almost_equal(testing[0].outputs, [0.75, 0.0])

    def test_postponed_fixture_sees_only_earlier_results(self, postponed):
        plan = prepare_pass(postponed, 0.5)
        gen = self._generator(plan)
        _, _, prediction = build_pass_samples(plan, gen.registry, 4, gen)

        reference = self._generator(plan)
        chronological = [reference.generate(m) for m in plan.matches]
        np.testing.assert_array_equal(prediction[0].inputs, chronological[1])

        names = gen.feature_names()
        x = dict(zip(names, prediction[0].inputs))
        assert x["home_highest"] == 1.0  # only the 1-0 on 2020-01-01
        assert x["home_highest_vs_league"] == 1.0

    def test_subsets_generated_one_after_another_rejected(self, postponed):
        plan = prepare_pass(postponed, 0.5)
        gen = self._generator(plan)
        build_samples(plan.training, gen.registry, 4, gen)
        build_samples(plan.testing, gen.registry, 4, gen)
        with pytest.raises(LedgerInvariantViolation):
            build_samples(plan.prediction, gen.registry, 4, gen)

    def test_match_outside_subsets(self, round_robin, generator):
        plan = prepare_pass(round_robin)
        plan.training = plan.training[:2]
        with pytest.raises(ValueError):
            build_pass_samples(plan, generator.registry, 3, generator)
        assert generator.ledger.matches_recorded == 0


class TestToArrays:
    def test_stacks_as_float32(self):
        samples = [Sample(np.ones(4), np.array([0.1, 0.2])) for _ in range(3)]
        X, Y = to_arrays(samples)
        assert X.shape == (3, 4) and Y.shape == (3, 2)
        assert X.dtype == np.float32 and Y.dtype == np.float32

    def test_empty(self):
        X, Y = to_arrays([])
        assert len(X) == 0 and len(Y) == 0


class TestPartitioning:
    def test_sort_is_stable(self):
        a = make_match("2020-01-01", "A", "B", (1, 0))
        b = make_match("2020-01-01", "C", "D", (1, 0))
        c = make_match("2019-12-01", "B", "C", (1, 0))
        assert sort_matches([a, b, c]) == [c, a, b]

    def test_filters(self, season):
        played = filter_results(season)
        fixtures = filter_no_results(season)
        assert len(played) == 36
        assert len(fixtures) == 2
        assert all(m.result is None for m in fixtures)

    def test_split_by_fraction(self):
        items = list(range(10))
        assert split_by_fraction(items, 0.9) == (list(range(9)), [9])
        assert split_by_fraction(items, 0.0) == ([], items)
        assert split_by_fraction(items, 1.0) == (items, [])

    @pytest.mark.parametrize("fraction", [-0.1, 1.5])
    def test_split_fraction_out_of_range(self, fraction):
        with pytest.raises(ValueError):
            split_by_fraction([1, 2, 3], fraction)

    def test_rand_k_split_covers_items(self):
        items = list(range(20))
        folds = rand_k_split(items, 3, seed=1)
        assert sorted(len(f) for f in folds) == [6, 7, 7]
        assert sorted(x for f in folds for x in f) == items
        for fold in folds:
            assert fold == sorted(fold)

    def test_rand_k_split_seeded(self):
        items = list(range(20))
        assert rand_k_split(items, 4, seed=7) == rand_k_split(items, 4, seed=7)

    def test_rand_k_split_invalid_k(self):
        with pytest.raises(ValueError):
            rand_k_split([1, 2], 0)

    def test_prepare_pass(self, season):
        shuffled = list(season)
        random.Random(3).shuffle(shuffled)
        plan = prepare_pass(shuffled, 0.9)

        assert len(plan.training) == 32
        assert len(plan.testing) == 4
        assert len(plan.prediction) == 2
        assert plan.training[-1].date <= plan.testing[0].date
        assert [m.date for m in plan.matches] == sorted(m.date for m in season)

        order = plan.generation_order
        assert order == plan.matches
        assert all(a.date <= b.date for a, b in zip(order, order[1:]))
