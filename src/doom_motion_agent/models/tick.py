"""
Tick and Episode Models
=======================

Results passed from the motion pipeline to the episode runner.
"""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from doom_motion_agent.models.action import Selection
from doom_motion_agent.models.blob import Blob


@dataclass(frozen=True, slots=True)
class TickResult:
    """
    Output of one pass through the motion pipeline.

    Attributes:
        tic: Engine tic (state number) of the processed frame
        mask: Boolean motion mask (H, W)
        points: Foreground points (N, 2) as (x, y)
        labels: Cluster label per point (N,)
        blobs: All extracted blobs, ordered by label
        kept_blobs: Blobs surviving the HUD cutoff
        selection: Chosen action
    """

    tic: int
    mask: np.ndarray
    points: np.ndarray
    labels: np.ndarray
    blobs: List[Blob]
    kept_blobs: List[Blob]
    selection: Selection

    @property
    def label_count(self) -> int:
        """Number of clusters before filtering."""
        return len(self.blobs)

    def __repr__(self) -> str:
        return (
            f"TickResult(tic={self.tic}, points={len(self.points)}, "
            f"labels={len(self.blobs)}, kept={len(self.kept_blobs)}, "
            f"action={self.selection.kind.value})"
        )


@dataclass(frozen=True, slots=True)
class EpisodeSummary:
    """
    Aggregate statistics for one finished episode.

    Attributes:
        episode: Zero-based episode index
        ticks: Actions submitted
        total_reward: Engine-reported cumulative reward
        action_reward: Sum of the rewards returned for the submitted actions
        action_counts: Actions submitted, by ActionKind value
        reason_counts: Selections, by ReasonCode value
        total_blobs: Blobs extracted over the episode (before filtering)
        mean_blobs_per_tick: total_blobs / ticks
    """

    episode: int
    ticks: int
    total_reward: float
    action_reward: float
    action_counts: Dict[str, int]
    reason_counts: Dict[str, int]
    total_blobs: int
    mean_blobs_per_tick: float

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "episode": self.episode,
            "ticks": self.ticks,
            "total_reward": round(self.total_reward, 4),
            "action_reward": round(self.action_reward, 4),
            "action_counts": dict(self.action_counts),
            "reason_counts": dict(self.reason_counts),
            "total_blobs": self.total_blobs,
            "mean_blobs_per_tick": round(self.mean_blobs_per_tick, 4),
        }
