# Copyright 2025 Thousand Brains Project
#
# Use of this source code is governed by the MIT
# license that can be found in the LICENSE file or at
# https://opensource.org/licenses/MIT.

"""TD(lambda) learner over HRR-encoded locations.

This module ties the components together into one run:
- VectorSpace: random HRR encodings for every location
- World: circular locations with a single rewarded goal
- EligibilityTrace: per-episode accumulation of visited encodings
- ValueFunction: linear readout learned across episodes
- EpsilonSoftPolicy: left/right movement choice

A Learner owns every piece of mutable run state (random generator, world,
weights, trace and statistics). Nothing is shared between learners, so
independent runs can live side by side in one process.

Example:
    >>> from llhrr import RunConfig, initialize, run_episodes, report_values
    >>> learner = initialize(RunConfig(world_size=16, vector_length=256, seed=1))
    >>> run_episodes(learner, 50)
    >>> for location, value in report_values(learner):
    ...     print(location, value)
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

import numpy as np

from .config import RunConfig
from .policy import EpsilonSoftPolicy
from .trace import EligibilityTrace
from .types import EpisodeResult, EpisodeStatistics, InvalidConfigError, StepRecord
from .value import ValueFunction
from .vectors import VectorSpace, VectorSpaceConfig
from .world import World, build_world

logger = logging.getLogger(__name__)

StepListener = Callable[[StepRecord], None]


class Learner:
    """Run context for TD(lambda) learning on the circular world.

    Construction draws, in order, one encoding per location and then the goal
    location. Each episode then draws its start location, followed by the
    policy's exploration draws.

    Attributes:
        config: RunConfig for this run.
        rng: Generator feeding every sampling point of the run.
        space: VectorSpace producing the encodings.
        world: World being learned.
        trace: EligibilityTrace, reset at the start of every episode.
        value_fn: ValueFunction holding the learned weights.
        policy: EpsilonSoftPolicy choosing movements.
        statistics: EpisodeStatistics over the episodes run so far.
    """

    def __init__(
            self,
            config: Optional[RunConfig] = None,
            rng: Optional[np.random.Generator] = None,
            goal_location: Optional[int] = None,
    ) -> None:
        """Initialize the learner.

        Args:
            config: Run configuration. Uses defaults if None.
            rng: Random generator. Created from config.seed if None.
            goal_location: Fixed goal instead of a random draw.

        Raises:
            InvalidConfigError: If goal_location is outside the world.
        """
        self.config = config or RunConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self._init_space()
        self._init_world(goal_location)
        self._init_learning()

        self.statistics = EpisodeStatistics()
        self._listeners: List[StepListener] = []
        self._episodes_run = 0

    def _init_space(self) -> None:
        """Initialize the HRR engine."""
        self.space = VectorSpace(
            VectorSpaceConfig(dim=self.config.vector_length),
            rng=self.rng,
        )

    def _init_world(self, goal_location: Optional[int]) -> None:
        """Initialize the world and its goal."""
        self.world = build_world(
            self.config.world_size,
            self.space,
            rng=self.rng,
            goal_location=goal_location,
        )

    def _init_learning(self) -> None:
        """Initialize trace, weights and policy."""
        self.trace = EligibilityTrace(self.space.dim)
        self.value_fn = ValueFunction(self.space)
        self.policy = EpsilonSoftPolicy(self.config.epsilon, rng=self.rng)

    # ==================== Listeners ====================

    def add_listener(self, callback: StepListener) -> None:
        """Add a listener to be notified of every learning step.

        Args:
            callback: Function called with each StepRecord.
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: StepListener) -> None:
        """Remove a listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, record: StepRecord) -> None:
        logger.debug(
            f"run={record.run_index} step={record.step} goal={record.goal_location} "
            f"loc={record.location} td={record.td_error:.6f}"
        )
        for listener in self._listeners:
            try:
                listener(record)
            except Exception as e:
                logger.warning(f"Listener error: {e}")

    # ==================== Episodes ====================

    def run_episode(
            self,
            run_index: Optional[int] = None,
            start_location: Optional[int] = None,
    ) -> EpisodeResult:
        """Run one episode from a start location until the goal or the step cap.

        Every visited state first updates the eligibility trace, then receives
        a TD update of the weights along its own encoding.

        Args:
            run_index: Index reported in diagnostics. Defaults to the number
                of episodes run so far.
            start_location: Fixed start instead of a random draw.

        Returns:
            EpisodeResult for this episode.

        Raises:
            InvalidConfigError: If start_location is outside the world.
        """
        cfg = self.config
        world = self.world
        if run_index is None:
            run_index = self._episodes_run

        if start_location is None:
            start_location = int(self.rng.integers(world.size))
        elif not 0 <= start_location < world.size:
            raise InvalidConfigError(
                f"start location {start_location} outside [0, {world.size})"
            )

        self.trace.reset()
        location = start_location
        steps = 0
        reached_goal = False
        td_error = 0.0

        while True:
            state = world[location]
            self.trace.update(state.encoding, cfg.lambda_)

            if state.location == world.goal_location:
                # Terminal transition: no successor value
                td_error = self.value_fn.td_error(state, None, cfg.discount)
                self.value_fn.update(state.encoding, td_error, cfg.alpha)
                self._emit(StepRecord(
                    run_index=run_index,
                    step=steps,
                    goal_location=world.goal_location,
                    location=location,
                    td_error=td_error,
                    trace_norm=self.trace.norm,
                ))
                reached_goal = True
                break

            if steps >= cfg.max_steps:
                break

            left, current, right = world.neighbors(location)
            movement = self.policy.choose(left, current, right, self.value_fn)
            next_location = self.policy.resolve(movement, location, world.size)
            next_state = world[next_location]

            td_error = self.value_fn.td_error(state, next_state, cfg.discount)
            self.value_fn.update(state.encoding, td_error, cfg.alpha)
            self._emit(StepRecord(
                run_index=run_index,
                step=steps,
                goal_location=world.goal_location,
                location=location,
                td_error=td_error,
                movement=movement,
                next_location=next_location,
                trace_norm=self.trace.norm,
            ))

            location = next_location
            steps += 1

        if not reached_goal:
            logger.info(
                f"Episode {run_index} hit the step cap ({cfg.max_steps}) "
                f"at location {location}"
            )

        result = EpisodeResult(
            run_index=run_index,
            start_location=start_location,
            steps=steps,
            reached_goal=reached_goal,
            final_td_error=td_error,
        )
        self.statistics.record(result)
        self._episodes_run += 1

        logger.info(
            f"Episode {run_index}: start={start_location} steps={steps} "
            f"goal_reached={reached_goal}"
        )
        return result

    def run_episodes(self, count: Optional[int] = None) -> List[EpisodeResult]:
        """Run episodes one after another.

        Args:
            count: Number of episodes. Uses config.number_of_runs if None.

        Returns:
            EpisodeResults in order.
        """
        if count is None:
            count = self.config.number_of_runs
        return [self.run_episode() for _ in range(count)]

    # ==================== Reporting ====================

    def report_values(self) -> List[Tuple[int, float]]:
        """(location, value) for every location of the world, in order."""
        return self.value_fn.values(self.world.states)

    @property
    def weights(self) -> np.ndarray:
        """Copy of the learned weight vector."""
        return self.value_fn.weights

    @property
    def episodes_run(self) -> int:
        return self._episodes_run

    def __repr__(self) -> str:
        return (
            f"Learner(world={self.world}, dim={self.space.dim}, "
            f"episodes={self._episodes_run})"
        )


# Functional API over a Learner handle


def initialize(
        config: Optional[RunConfig] = None,
        rng: Optional[np.random.Generator] = None,
) -> Learner:
    """Create a Learner for config."""
    return Learner(config, rng=rng)


def run_episodes(handle: Learner, count: Optional[int] = None) -> List[EpisodeResult]:
    """Run count episodes on handle."""
    return handle.run_episodes(count)


def report_values(handle: Learner) -> List[Tuple[int, float]]:
    """(location, value) for every location of handle's world."""
    return handle.report_values()
