"""
Analytics Module
================

Per-episode counters derived from tick results.

Analytics do NOT influence action selection.
NO POLICY IMPORTS.
"""

import logging
from collections import Counter

from doom_motion_agent.models.tick import EpisodeSummary, TickResult


logger = logging.getLogger(__name__)


class EpisodeAnalytics:
    """
    Accumulates statistics over one episode.

    Call record() once per submitted action, snapshot() at the end,
    and reset() before the next episode.
    """

    def __init__(self) -> None:
        self._episode: int = 0
        self._ticks: int = 0
        self._reward: float = 0.0
        self._total_blobs: int = 0
        self._actions: Counter = Counter()
        self._reasons: Counter = Counter()

    def reset(self, episode: int) -> None:
        """Start counting a new episode."""
        self._episode = episode
        self._ticks = 0
        self._reward = 0.0
        self._total_blobs = 0
        self._actions.clear()
        self._reasons.clear()

    def record(self, result: TickResult, reward: float) -> None:
        """
        Add one tick.

        Args:
            result: Pipeline output for the tick
            reward: Reward returned by the engine for the submitted action
        """
        self._ticks += 1
        self._reward += reward
        self._total_blobs += result.label_count
        self._actions[result.selection.kind.value] += 1
        self._reasons[result.selection.reason.value] += 1

    @property
    def ticks(self) -> int:
        return self._ticks

    def snapshot(self, total_reward: float) -> EpisodeSummary:
        """
        Freeze the counters.

        Args:
            total_reward: Engine-reported cumulative reward

        Returns:
            EpisodeSummary for the current episode
        """
        mean_blobs = self._total_blobs / self._ticks if self._ticks else 0.0
        return EpisodeSummary(
            episode=self._episode,
            ticks=self._ticks,
            total_reward=total_reward,
            action_reward=self._reward,
            action_counts=dict(self._actions),
            reason_counts=dict(self._reasons),
            total_blobs=self._total_blobs,
            mean_blobs_per_tick=mean_blobs,
        )
