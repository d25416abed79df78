"""
Action Selection
================

Maps the surviving blobs of a tick to one of the three fixed actions.

Selection Rules (centroid policy):
    center = frame_width / 2
    x = centroid_x of the FIRST surviving blob

    x < center - margin  -> TURN_LEFT
    x > center + margin  -> TURN_RIGHT
    otherwise            -> FIRE

    No surviving blob    -> FIRE, with no target

The selector is total: every input yields a Selection.
"""

import logging
import random
from typing import Optional, Protocol, Sequence

from doom_motion_agent.models.action import ActionKind, ActionSet, Selection
from doom_motion_agent.models.blob import Blob
from doom_motion_agent.models.reason_codes import ReasonCode


logger = logging.getLogger(__name__)


class ActionPolicy(Protocol):
    """
    Protocol for action selection backends.

    Implementations receive the filtered blobs plus the number of blobs
    before filtering, so an empty result can be explained.
    """

    def select(
        self,
        blobs: Sequence[Blob],
        frame_width: int,
        extracted_count: Optional[int] = None,
    ) -> Selection:
        """
        Choose the action for this tick.

        Args:
            blobs: Blobs that survived filtering, in label order
            frame_width: Frame width in pixels
            extracted_count: Blobs before filtering (None if unknown)

        Returns:
            Selection with kind, vector, reason and optional target
        """
        ...


def _empty_reason(extracted_count: Optional[int]) -> ReasonCode:
    if extracted_count:
        return ReasonCode.ALL_BLOBS_FILTERED
    return ReasonCode.NO_MOTION


class CentroidActionSelector:
    """
    Steers toward the first blob's centroid, fires when it is centered.

    Attributes:
        actions: The three fixed action vectors
        margin: Half-width of the fire band around screen center
    """

    def __init__(self, actions: ActionSet, margin: float = 25.0) -> None:
        """
        Initialize centroid selector.

        Args:
            actions: Fixed action vectors
            margin: Half-width of the center band in pixels

        Raises:
            ValueError: If margin is negative
        """
        if margin < 0:
            raise ValueError(f"margin must be >= 0, got {margin}")

        self.actions = actions
        self.margin = float(margin)

        logger.info(f"CentroidActionSelector initialized: margin={self.margin}")

    def select(
        self,
        blobs: Sequence[Blob],
        frame_width: int,
        extracted_count: Optional[int] = None,
    ) -> Selection:
        """Choose the action from the first blob's horizontal position."""
        if not blobs:
            return Selection(
                kind=ActionKind.FIRE,
                vector=self.actions.fire,
                reason=_empty_reason(extracted_count),
                target=None,
            )

        target = blobs[0]
        center = frame_width / 2

        if target.centroid_x < center - self.margin:
            kind, reason = ActionKind.TURN_LEFT, ReasonCode.TARGET_LEFT
        elif target.centroid_x > center + self.margin:
            kind, reason = ActionKind.TURN_RIGHT, ReasonCode.TARGET_RIGHT
        else:
            kind, reason = ActionKind.FIRE, ReasonCode.TARGET_CENTERED

        return Selection(
            kind=kind,
            vector=self.actions.vector(kind),
            reason=reason,
            target=target,
        )


class RandomActionSelector:
    """
    Uniform random choice among the three actions.

    Ignores blob positions; the first surviving blob is still reported
    as the target so the debug view can show it.
    """

    _KINDS = (ActionKind.TURN_LEFT, ActionKind.TURN_RIGHT, ActionKind.FIRE)

    def __init__(self, actions: ActionSet, seed: Optional[int] = None) -> None:
        """
        Initialize random selector.

        Args:
            actions: Fixed action vectors
            seed: RNG seed for reproducible runs
        """
        self.actions = actions
        self._rng = random.Random(seed)

        logger.info(f"RandomActionSelector initialized: seed={seed}")

    def select(
        self,
        blobs: Sequence[Blob],
        frame_width: int,
        extracted_count: Optional[int] = None,
    ) -> Selection:
        """Pick one of the three actions at random."""
        kind = self._rng.choice(self._KINDS)
        return Selection(
            kind=kind,
            vector=self.actions.vector(kind),
            reason=ReasonCode.RANDOM_CHOICE,
            target=blobs[0] if blobs else None,
        )
