"""
Episode Runner
==============

Synchronous episode loop:

    new_episode -> (acquire -> process -> submit -> pace)* -> summary

Single-threaded. Each tick blocks on the engine, runs the motion
pipeline in-process, and only then requests the next tick.
"""

import logging
import time
from typing import List, Optional

from doom_motion_agent.engine.base import EngineUnavailableError, GameEngine
from doom_motion_agent.models.tick import EpisodeSummary
from doom_motion_agent.observability.analytics import EpisodeAnalytics
from doom_motion_agent.observability.visualization import LabelVisualizer
from doom_motion_agent.signals.motion_processor import MotionSignalProcessor


logger = logging.getLogger(__name__)


class EpisodeRunner:
    """
    Plays episodes against an engine.

    Attributes:
        engine: Game engine backend
        processor: Motion pipeline session
        visualizer: Optional debug window
        tick_sleep_ms: Pause after every action
        reset_reference_on_episode: Zero the reference frame per episode
    """

    def __init__(
        self,
        engine: GameEngine,
        processor: MotionSignalProcessor,
        visualizer: Optional[LabelVisualizer] = None,
        tick_sleep_ms: int = 0,
        reset_reference_on_episode: bool = True,
    ) -> None:
        self.engine = engine
        self.processor = processor
        self.visualizer = visualizer
        self.tick_sleep_ms = tick_sleep_ms
        self.reset_reference_on_episode = reset_reference_on_episode

        self._analytics = EpisodeAnalytics()
        self._stop_requested: bool = False

    def request_stop(self) -> None:
        """Stop after the current tick."""
        self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def run_episode(self, episode: int) -> EpisodeSummary:
        """
        Play one episode to completion (or until a stop is requested).

        Args:
            episode: Zero-based episode index

        Returns:
            EpisodeSummary for the episode

        Raises:
            EngineUnavailableError: If the engine fails mid-episode
            DimensionMismatchError: If a frame is malformed
        """
        logger.info(f"Episode #{episode + 1}")

        if self.reset_reference_on_episode:
            self.processor.detector.reset()
        self._analytics.reset(episode)

        self.engine.new_episode()

        while not self._stop_requested and not self.engine.is_episode_finished():
            frame = self.engine.acquire()
            result = self.processor.update(frame)

            if self.visualizer is not None:
                self.visualizer.show(frame, result)

            reward = self.engine.submit(result.selection.vector)
            self._analytics.record(result, reward)

            if self.tick_sleep_ms > 0:
                time.sleep(self.tick_sleep_ms / 1000.0)

        summary = self._analytics.snapshot(self.engine.total_reward())

        logger.info("Episode finished.")
        logger.info(f"Total reward: {summary.total_reward}")
        unattributed = summary.total_reward - summary.action_reward
        if abs(unattributed) > 1e-6:
            logger.info(f"Reward not returned by submitted actions: {unattributed}")
        logger.info(f"Episode summary: {summary.to_dict()}")

        return summary

    def run(self, episodes: int) -> List[EpisodeSummary]:
        """
        Play several episodes.

        Stops early if a stop is requested. Engine failures abort the
        run and propagate to the caller.

        Args:
            episodes: Number of episodes to play

        Returns:
            Summaries of the episodes played
        """
        summaries: List[EpisodeSummary] = []

        for episode in range(episodes):
            if self._stop_requested:
                logger.info("Stop requested, skipping remaining episodes")
                break
            try:
                summaries.append(self.run_episode(episode))
            except EngineUnavailableError as e:
                logger.error(f"Episode {episode + 1} aborted: {e}")
                raise

        return summaries
