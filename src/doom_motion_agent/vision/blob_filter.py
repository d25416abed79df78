"""
Blob Filter
===========

Drops blobs in the lower part of the view, where the weapon sprite and
HUD move on almost every tick.
"""

import logging
from typing import List, Sequence

from doom_motion_agent.models.blob import Blob


logger = logging.getLogger(__name__)

DEFAULT_CUTOFF_RATIO = 0.56


def filter_blobs(
    blobs: Sequence[Blob],
    frame_height: int,
    cutoff_ratio: float = DEFAULT_CUTOFF_RATIO,
) -> List[Blob]:
    """
    Keep blobs whose centroid is at or above the cutoff line.

    A blob is removed iff centroid_y > cutoff_ratio * frame_height.
    Order and centroid values of the kept blobs are unchanged.

    Args:
        blobs: Blobs in examination order
        frame_height: Frame height in pixels
        cutoff_ratio: Fraction of the height where the cutoff line sits

    Returns:
        New list with the surviving blobs
    """
    if frame_height <= 0:
        raise ValueError(f"frame_height must be > 0, got {frame_height}")
    if not 0 < cutoff_ratio <= 1:
        raise ValueError(f"cutoff_ratio must be in (0, 1], got {cutoff_ratio}")

    cutoff = cutoff_ratio * frame_height
    kept = [blob for blob in blobs if blob.centroid_y <= cutoff]

    if len(kept) != len(blobs):
        logger.debug(f"Filtered {len(blobs) - len(kept)} blobs below y={cutoff:.1f}")

    return kept
