"""Tests for the TD(lambda) learner."""

from __future__ import annotations

import numpy as np
import pytest

from llhrr.config import RunConfig
from llhrr.learner import Learner, initialize, report_values, run_episodes
from llhrr.types import InvalidConfigError, Move, StepRecord


def small_config(**overrides) -> RunConfig:
    params = dict(
        world_size=4,
        vector_length=8,
        alpha=0.5,
        lambda_=0.0,
        epsilon=0.0,
        discount=0.9,
        number_of_runs=1,
        seed=0,
    )
    params.update(overrides)
    return RunConfig(**params)


class TestLearnerSetup:
    def test_components_share_dimension(self):
        learner = Learner(small_config(vector_length=16))

        assert learner.space.dim == 16
        assert learner.trace.dim == 16
        assert learner.weights.shape == (16,)
        assert all(s.encoding.shape == (16,) for s in learner.world)

    def test_weights_start_at_zero(self):
        learner = Learner(small_config())
        np.testing.assert_array_equal(learner.weights, np.zeros(8))

    def test_fixed_goal(self):
        learner = Learner(small_config(), goal_location=2)
        assert learner.world.goal_location == 2
        assert learner.world[2].reward == 1.0

    def test_goal_out_of_range(self):
        with pytest.raises(InvalidConfigError):
            Learner(small_config(), goal_location=9)

    def test_default_config(self):
        learner = Learner(rng=np.random.default_rng(0))
        assert len(learner.world) == 64
        assert learner.space.dim == 1024


class TestEpisode:
    @pytest.fixture
    def learner(self):
        return Learner(small_config(), goal_location=2)

    def test_reaches_goal_from_start(self, learner):
        result = learner.run_episode(start_location=0)

        assert result.reached_goal
        assert 0 < result.steps <= learner.config.max_steps
        assert result.start_location == 0

    def test_walk_follows_left_tie_break(self, learner):
        records: list[StepRecord] = []
        learner.add_listener(records.append)

        result = learner.run_episode(start_location=0)

        # All values are zero, so every tie moves left: 0 -> 3 -> 2
        assert [r.location for r in records] == [0, 3, 2]
        assert [r.movement for r in records] == [Move.LEFT, Move.LEFT, None]
        assert result.steps == 2

    def test_weights_nonzero_and_finite_after_episode(self, learner):
        learner.run_episode(start_location=0)
        weights = learner.weights

        assert np.any(weights != 0.0)
        assert np.all(np.isfinite(weights))

    def test_terminal_update_uses_goal_encoding(self, learner):
        learner.run_episode(start_location=0)

        goal_encoding = learner.world[2].encoding
        # Only the terminal TD error (1 - 0) is nonzero on the first episode
        np.testing.assert_allclose(learner.weights, 0.5 * goal_encoding)

    def test_goal_value_after_episode(self, learner):
        learner.run_episode(start_location=0)
        values = dict(learner.report_values())

        expected = 0.5 * float(np.dot(learner.world[2].encoding, learner.world[2].encoding))
        assert values[2] == pytest.approx(expected)

    def test_start_at_goal(self, learner):
        records: list[StepRecord] = []
        learner.add_listener(records.append)

        result = learner.run_episode(start_location=2)

        assert result.reached_goal
        assert result.steps == 0
        assert len(records) == 1
        assert records[0].terminal
        assert records[0].td_error == pytest.approx(1.0)

    def test_step_cap_ends_episode(self):
        learner = Learner(
            small_config(world_size=100, max_steps=5),
            goal_location=50,
        )

        result = learner.run_episode(start_location=0)

        assert not result.reached_goal
        assert result.steps == 5
        assert learner.statistics.episodes == 1
        assert learner.statistics.goals_reached == 0

    def test_goal_on_last_allowed_move_is_credited(self):
        learner = Learner(
            small_config(world_size=100, max_steps=5),
            goal_location=95,
        )

        result = learner.run_episode(start_location=0)

        # 0 -> 99 -> 98 -> 97 -> 96 -> 95
        assert result.reached_goal
        assert result.steps == 5
        assert np.any(learner.weights != 0.0)

    def test_episode_after_step_cap_still_runs(self):
        learner = Learner(
            small_config(world_size=100, max_steps=5),
            goal_location=50,
        )
        learner.run_episode(start_location=0)
        result = learner.run_episode(start_location=51)

        assert result.reached_goal
        assert result.steps == 1

    def test_trace_reset_each_episode(self, learner):
        learner.run_episode(start_location=0)
        records: list[StepRecord] = []
        learner.add_listener(records.append)

        learner.run_episode(start_location=2)

        # First update after a reset: |x / sqrt(2)|
        expected = np.linalg.norm(learner.world[2].encoding) / np.sqrt(2)
        assert records[0].trace_norm == pytest.approx(expected)

    def test_invalid_start(self, learner):
        with pytest.raises(InvalidConfigError):
            learner.run_episode(start_location=4)

    def test_single_location_world(self):
        learner = Learner(small_config(world_size=1))

        result = learner.run_episode()

        assert result.reached_goal
        assert result.steps == 0

    def test_run_index_defaults_to_episode_count(self, learner):
        first = learner.run_episode(start_location=0)
        second = learner.run_episode(start_location=1)
        assert (first.run_index, second.run_index) == (0, 1)
        assert learner.episodes_run == 2


class TestListeners:
    def test_diagnostics_fields(self):
        learner = Learner(small_config(), goal_location=2)
        records: list[StepRecord] = []
        learner.add_listener(records.append)

        learner.run_episode(run_index=7, start_location=0)

        assert all(r.run_index == 7 for r in records)
        assert all(r.goal_location == 2 for r in records)
        assert [r.step for r in records] == [0, 1, 2]
        assert records[0].next_location == 3

    def test_remove_listener(self):
        learner = Learner(small_config(), goal_location=2)
        records: list[StepRecord] = []
        learner.add_listener(records.append)
        learner.remove_listener(records.append)

        learner.run_episode(start_location=0)

        assert records == []

    def test_listener_error_does_not_stop_learning(self):
        learner = Learner(small_config(), goal_location=2)

        def broken(record):
            raise RuntimeError("boom")

        learner.add_listener(broken)
        result = learner.run_episode(start_location=0)

        assert result.reached_goal


class TestRuns:
    def test_zero_runs_leave_weights_zero(self):
        learner = initialize(small_config(number_of_runs=0))

        results = run_episodes(learner, 0)

        assert results == []
        np.testing.assert_array_equal(learner.weights, np.zeros(8))
        assert all(value == 0.0 for _, value in report_values(learner))

    def test_run_episodes_defaults_to_config(self):
        learner = initialize(small_config(number_of_runs=5))
        results = learner.run_episodes()
        assert len(results) == 5
        assert learner.statistics.episodes == 5

    def test_report_values_covers_every_location(self):
        learner = initialize(small_config(world_size=6))
        run_episodes(learner, 3)

        values = report_values(learner)

        assert [loc for loc, _ in values] == list(range(6))
        assert all(np.isfinite(v) for _, v in values)

    def test_same_seed_same_weights(self):
        config = RunConfig(world_size=8, vector_length=64, number_of_runs=20, seed=42)
        a = initialize(config)
        b = initialize(config)

        run_episodes(a, 20)
        run_episodes(b, 20)

        assert a.world.goal_location == b.world.goal_location
        np.testing.assert_array_equal(a.weights, b.weights)
        assert a.statistics.history == b.statistics.history

    def test_explicit_generator_matches_seed(self):
        config = RunConfig(world_size=8, vector_length=64, seed=3)
        a = initialize(config)
        b = initialize(config.with_overrides(seed=None), rng=np.random.default_rng(3))

        run_episodes(a, 10)
        run_episodes(b, 10)

        np.testing.assert_array_equal(a.weights, b.weights)

    def test_different_seeds_differ(self):
        a = initialize(RunConfig(world_size=8, vector_length=64, seed=1))
        b = initialize(RunConfig(world_size=8, vector_length=64, seed=2))

        run_episodes(a, 5)
        run_episodes(b, 5)

        assert not np.array_equal(a.weights, b.weights)

    def test_weights_persist_across_episodes(self):
        learner = Learner(small_config(), goal_location=2)
        learner.run_episode(start_location=2)
        after_first = learner.weights

        learner.run_episode(start_location=2)

        # Second terminal update starts from the learned weights
        assert not np.array_equal(learner.weights, after_first)
        assert np.linalg.norm(learner.weights) > np.linalg.norm(after_first)

    def test_goal_learns_highest_value(self):
        learner = initialize(RunConfig(
            world_size=8,
            vector_length=1024,
            alpha=0.1,
            number_of_runs=200,
            seed=11,
        ))
        run_episodes(learner, 200)

        values = dict(report_values(learner))
        goal = learner.world.goal_location
        others = [v for loc, v in values.items() if loc != goal]

        assert values[goal] > 0.5
        assert values[goal] > np.mean(others)
